"""Short-link redirect that records a campaign session in Google Analytics."""

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
import logging

from insightstream.database import get_db
from insightstream.models.api_key import SERVICE_GOOGLE_ANALYTICS_MP
from insightstream.platforms.google_analytics.ga_api import send_session_start_event
from insightstream.services import utm_service
from insightstream.services.api_key_service import get_api_key_value

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{short_id}")
def track_and_redirect(short_id: str, db: Session = Depends(get_db)):
    """Redirect to the link's tagged URL; unknown ids go to the home page."""
    link = utm_service.get_by_short_id(db, short_id)
    if not link:
        logger.warning(f"Unknown tracking link {short_id}")
        return RedirectResponse(url="/", status_code=307)

    api_secret = get_api_key_value(db, SERVICE_GOOGLE_ANALYTICS_MP)
    if api_secret:
        send_session_start_event(link, api_secret)

    return RedirectResponse(url=link.generated_url, status_code=307)
