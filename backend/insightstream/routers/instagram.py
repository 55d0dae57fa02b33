"""Instagram reel links, stored reel analytics and live lookups."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from insightstream.ai import flows
from insightstream.database import get_db
from insightstream.models.user import User
from insightstream.models.api_key import SERVICE_INSTAGRAM_SCRAPER
from insightstream.models.links import COLLECTION_INSTAGRAM
from insightstream.models.platform_schemas import (
    LinkAssignRequest,
    LinkRemoveRequest,
    LinkCsvUploadRequest,
    AssignLinksResult,
    LinkListResponse,
    ReelStatsRequest,
    InstagramReelStats,
    InstagramPostSnapshotResponse,
    RefreshResult,
)
from insightstream.models.schemas import MessageResponse
from insightstream.middleware.auth import get_current_user, get_current_admin, resolve_target_user_id
from insightstream.platforms.instagram.instagram_api import InstagramScraperAPI
from insightstream.services import analytics_store, link_service
from insightstream.services.api_key_service import get_api_key_value
from insightstream.services.refresh_service import refresh_user_instagram

router = APIRouter()


@router.get("/links", response_model=LinkListResponse)
def get_links(
    user_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    target = resolve_target_user_id(current_user, user_id)
    return LinkListResponse(user_id=target, links=link_service.get_links(db, target, COLLECTION_INSTAGRAM))


@router.post("/links", response_model=AssignLinksResult)
def assign_links(
    data: LinkAssignRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin)
):
    return link_service.assign_links(db, data.user_id, COLLECTION_INSTAGRAM, data.links)


@router.post("/links/csv", response_model=AssignLinksResult)
def upload_links_csv(
    data: LinkCsvUploadRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin)
):
    links = link_service.parse_csv_links(data.csv_content)
    if not links:
        raise HTTPException(status_code=400, detail="No links found in CSV")
    return link_service.assign_links(db, data.user_id, COLLECTION_INSTAGRAM, links)


@router.delete("/links", response_model=MessageResponse)
def remove_link(
    data: LinkRemoveRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin)
):
    """Remove a reel link and its stored analytics."""
    if not link_service.remove_link(db, data.user_id, COLLECTION_INSTAGRAM, data.link):
        raise HTTPException(status_code=404, detail="Link not assigned to user")
    return MessageResponse(message="Link removed")


@router.get("/posts", response_model=List[InstagramPostSnapshotResponse])
def list_posts(
    user_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Stored reel snapshots, most recently fetched first."""
    target = resolve_target_user_id(current_user, user_id)
    return analytics_store.list_instagram_posts_for_user(db, target)


@router.post("/refresh", response_model=RefreshResult)
def refresh_posts(
    user_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    target = resolve_target_user_id(current_user, user_id)
    api_key = get_api_key_value(db, SERVICE_INSTAGRAM_SCRAPER)
    if not api_key:
        raise HTTPException(status_code=503, detail="RapidAPI key for Instagram scraper is not configured.")
    return refresh_user_instagram(db, target, InstagramScraperAPI(api_key))


@router.post("/reel-stats", response_model=InstagramReelStats)
def reel_stats(
    data: ReelStatsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Live statistics for one reel. Failures are reported in the body."""
    return flows.fetch_instagram_reel_stats(db, data.reel_url)
