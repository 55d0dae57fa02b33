"""Assign, list and remove per-user YouTube and Instagram links."""

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified
from typing import List, Tuple
import csv
import io
import logging

from insightstream.models.links import AssignedLinks, COLLECTION_INSTAGRAM, LINK_COLLECTIONS
from insightstream.models.analytics import InstagramPostSnapshot
from insightstream.models.platform_schemas import AssignLinksResult
from insightstream.utils.link_parsers import extract_instagram_shortcode
from insightstream.utils.validators import is_valid_http_url

logger = logging.getLogger(__name__)


def _check_collection(collection: str):
    if collection not in LINK_COLLECTIONS:
        raise ValueError(f"Unknown link collection '{collection}'")


def clean_links(links: List[str]) -> Tuple[List[str], List[str]]:
    """
    Trim links and split them into valid and excluded.

    Blank entries are dropped silently. Duplicates within the input are
    collapsed, keeping the first occurrence.

    Returns:
        Tuple of (valid_links, excluded_links)
    """
    valid = []
    excluded = []
    for link in links:
        link = (link or "").strip()
        if not link:
            continue
        if not is_valid_http_url(link):
            excluded.append(link)
            continue
        if link not in valid:
            valid.append(link)
    return valid, excluded


def assign_links(db: Session, user_id: str, collection: str, links: List[str]) -> AssignLinksResult:
    """
    Add links to a user's collection.

    Existing links keep their position and new ones are appended in input order.

    Returns:
        AssignLinksResult with the number of links actually added
    """
    _check_collection(collection)
    valid, excluded = clean_links(links)

    if not valid:
        return AssignLinksResult(success=False, actually_added_count=0, excluded=excluded)

    try:
        record = db.query(AssignedLinks).filter(
            AssignedLinks.user_id == user_id,
            AssignedLinks.collection == collection
        ).first()

        if record is None:
            record = AssignedLinks(user_id=user_id, collection=collection, links=[])
            db.add(record)

        current = list(record.links or [])
        new_links = [link for link in valid if link not in current]
        record.links = current + new_links
        flag_modified(record, "links")
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to assign {collection} links to user {user_id}: {e}")
        return AssignLinksResult(success=False, actually_added_count=0, excluded=excluded)

    logger.info(f"Assigned {len(new_links)} new {collection} link(s) to user {user_id}")
    return AssignLinksResult(success=True, actually_added_count=len(new_links), excluded=excluded)


def get_links(db: Session, user_id: str, collection: str) -> List[str]:
    """Links assigned to a user, or [] if there are none or the lookup fails."""
    _check_collection(collection)
    try:
        record = db.query(AssignedLinks).filter(
            AssignedLinks.user_id == user_id,
            AssignedLinks.collection == collection
        ).first()
    except Exception as e:
        logger.error(f"Failed to load {collection} links for user {user_id}: {e}")
        return []

    return list(record.links or []) if record else []


def remove_link(db: Session, user_id: str, collection: str, link: str) -> bool:
    """
    Remove one link from a user's collection.

    Removing an Instagram link also deletes that reel's stored snapshot.

    Returns:
        True if the link was present and removed
    """
    _check_collection(collection)
    link = (link or "").strip()

    try:
        record = db.query(AssignedLinks).filter(
            AssignedLinks.user_id == user_id,
            AssignedLinks.collection == collection
        ).first()

        if not record or link not in (record.links or []):
            return False

        record.links = [existing for existing in record.links if existing != link]
        flag_modified(record, "links")

        if collection == COLLECTION_INSTAGRAM:
            shortcode = extract_instagram_shortcode(link)
            if shortcode:
                db.query(InstagramPostSnapshot).filter(
                    InstagramPostSnapshot.user_id == user_id,
                    InstagramPostSnapshot.shortcode == shortcode
                ).delete()

        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to remove {collection} link for user {user_id}: {e}")
        return False

    return True


def parse_csv_links(content: str) -> List[str]:
    """
    Read links from CSV text.

    Uses the `link` (or `url`) column when the first row is a header, otherwise
    the first cell of every row.
    """
    rows = [row for row in csv.reader(io.StringIO(content)) if row and any(cell.strip() for cell in row)]
    if not rows:
        return []

    header = [cell.strip().lower() for cell in rows[0]]
    for column in ("link", "url"):
        if column in header:
            index = header.index(column)
            return [row[index].strip() for row in rows[1:] if len(row) > index and row[index].strip()]

    return [row[0].strip() for row in rows if row[0].strip()]
