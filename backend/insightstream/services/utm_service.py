"""UTM-tagged campaign links and their short ids."""

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional
from urllib.parse import urlparse, urlencode, parse_qsl, urlunparse
import logging
import secrets

from insightstream.models.utm_link import UtmLink
from insightstream.models.platform_schemas import UtmLinkCreate
from insightstream.utils.validators import is_valid_http_url

logger = logging.getLogger(__name__)

SHORT_ID_BYTES = 6
MAX_SHORT_ID_ATTEMPTS = 5


def build_utm_url(base_url: str, utm_source: str, utm_medium: str, utm_campaign: str) -> str:
    """Add utm_* parameters to a URL, replacing any existing ones."""
    parsed = urlparse(base_url.strip())
    query = [(key, value) for key, value in parse_qsl(parsed.query, keep_blank_values=True)
             if key not in ("utm_source", "utm_medium", "utm_campaign")]
    query += [
        ("utm_source", utm_source),
        ("utm_medium", utm_medium),
        ("utm_campaign", utm_campaign),
    ]
    return urlunparse(parsed._replace(query=urlencode(query)))


def create_utm_link(db: Session, user_id: str, data: UtmLinkCreate) -> UtmLink:
    """
    Store a new campaign link.

    Raises:
        ValueError: If the base URL is not an http(s) URL
    """
    if not is_valid_http_url(data.base_url):
        raise ValueError("Base URL must be a valid http(s) URL")

    generated_url = build_utm_url(data.base_url, data.utm_source, data.utm_medium, data.utm_campaign)

    for _ in range(MAX_SHORT_ID_ATTEMPTS):
        link = UtmLink(
            short_id=secrets.token_urlsafe(SHORT_ID_BYTES),
            user_id=user_id,
            base_url=data.base_url.strip(),
            utm_source=data.utm_source,
            utm_medium=data.utm_medium,
            utm_campaign=data.utm_campaign,
            generated_url=generated_url,
        )
        db.add(link)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Short id collision, retrying")
            continue
        db.refresh(link)
        logger.info(f"Created UTM link {link.short_id} for campaign {link.utm_campaign}")
        return link

    raise RuntimeError("Could not allocate a unique short id")


def list_utm_links(db: Session, user_id: str) -> List[UtmLink]:
    """Links created by a user, newest first."""
    return db.query(UtmLink).filter(UtmLink.user_id == user_id).order_by(UtmLink.created_at.desc()).all()


def get_utm_link(db: Session, link_id: str) -> Optional[UtmLink]:
    return db.query(UtmLink).filter(UtmLink.id == link_id).first()


def get_by_short_id(db: Session, short_id: str) -> Optional[UtmLink]:
    return db.query(UtmLink).filter(UtmLink.short_id == short_id).first()


def delete_utm_link(db: Session, link: UtmLink):
    db.delete(link)
    db.commit()
