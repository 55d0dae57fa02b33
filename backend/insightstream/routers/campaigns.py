"""UTM campaign links and Google Analytics campaign reports."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from insightstream.ai import flows
from insightstream.database import get_db
from insightstream.models.user import User
from insightstream.models.platform_schemas import (
    UtmLinkCreate,
    UtmLinkResponse,
    CampaignAnalyticsRequest,
    CampaignAnalytics,
)
from insightstream.models.schemas import MessageResponse
from insightstream.middleware.auth import get_current_user, resolve_target_user_id
from insightstream.services import utm_service

router = APIRouter()


@router.post("/links", response_model=UtmLinkResponse, status_code=status.HTTP_201_CREATED)
def create_link(
    data: UtmLinkCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return utm_service.create_utm_link(db, current_user.id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/links", response_model=List[UtmLinkResponse])
def list_links(
    user_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    target = resolve_target_user_id(current_user, user_id)
    return utm_service.list_utm_links(db, target)


@router.delete("/links/{link_id}", response_model=MessageResponse)
def delete_link(
    link_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a link. Only its owner or an admin may do so."""
    link = utm_service.get_utm_link(db, link_id)
    if not link:
        raise HTTPException(status_code=404, detail="Link not found")
    if link.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Cannot delete another user's link")

    utm_service.delete_utm_link(db, link)
    return MessageResponse(message="Link deleted")


@router.post("/analytics", response_model=CampaignAnalytics)
def campaign_analytics(
    data: CampaignAnalyticsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Last 90 days of GA metrics for one campaign. Errors are reported in the body."""
    return flows.fetch_campaign_analytics(db, data.property_id, data.campaign_name)
