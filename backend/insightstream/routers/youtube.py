"""YouTube links, stored video analytics and live API lookups."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from insightstream.ai import flows
from insightstream.ai.client import FlowError
from insightstream.database import get_db
from insightstream.models.user import User
from insightstream.models.api_key import SERVICE_YOUTUBE
from insightstream.models.links import COLLECTION_YOUTUBE
from insightstream.models.platform_schemas import (
    LinkAssignRequest,
    LinkRemoveRequest,
    LinkCsvUploadRequest,
    AssignLinksResult,
    LinkListResponse,
    VideoIdsRequest,
    YouTubeVideoDetails,
    YouTubeComment,
    YouTubeVideoSnapshotResponse,
    RefreshResult,
)
from insightstream.models.schemas import MessageResponse
from insightstream.middleware.auth import get_current_user, get_current_admin, resolve_target_user_id
from insightstream.platforms.youtube.youtube_api import YouTubeAPI
from insightstream.services import analytics_store, link_service
from insightstream.services.api_key_service import get_api_key_value
from insightstream.services.refresh_service import refresh_user_youtube
from insightstream.utils.link_parsers import extract_youtube_video_id

router = APIRouter()


# ============================================
# Assigned links
# ============================================

@router.get("/links", response_model=LinkListResponse)
def get_links(
    user_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    target = resolve_target_user_id(current_user, user_id)
    return LinkListResponse(user_id=target, links=link_service.get_links(db, target, COLLECTION_YOUTUBE))


@router.post("/links", response_model=AssignLinksResult)
def assign_links(
    data: LinkAssignRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin)
):
    """Append YouTube links to a user's list (admin only)."""
    return link_service.assign_links(db, data.user_id, COLLECTION_YOUTUBE, data.links)


@router.post("/links/csv", response_model=AssignLinksResult)
def upload_links_csv(
    data: LinkCsvUploadRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin)
):
    """Assign links parsed from CSV text (admin only)."""
    links = link_service.parse_csv_links(data.csv_content)
    if not links:
        raise HTTPException(status_code=400, detail="No links found in CSV")
    return link_service.assign_links(db, data.user_id, COLLECTION_YOUTUBE, links)


@router.delete("/links", response_model=MessageResponse)
def remove_link(
    data: LinkRemoveRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin)
):
    if not link_service.remove_link(db, data.user_id, COLLECTION_YOUTUBE, data.link):
        raise HTTPException(status_code=404, detail="Link not assigned to user")
    return MessageResponse(message="Link removed")


# ============================================
# Stored analytics
# ============================================

@router.get("/videos", response_model=List[YouTubeVideoSnapshotResponse])
def list_videos(
    user_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Stored video snapshots, newest published first."""
    target = resolve_target_user_id(current_user, user_id)
    return analytics_store.list_youtube_videos_for_user(db, target)


@router.post("/refresh", response_model=RefreshResult)
def refresh_videos(
    user_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Fetch fresh statistics for the user's assigned videos now."""
    target = resolve_target_user_id(current_user, user_id)
    api_key = get_api_key_value(db, SERVICE_YOUTUBE)
    if not api_key:
        raise HTTPException(status_code=503, detail="YouTube API key is not configured.")
    return refresh_user_youtube(db, target, YouTubeAPI(api_key))


# ============================================
# Live lookups
# ============================================

@router.post("/details", response_model=List[YouTubeVideoDetails])
def video_details(
    data: VideoIdsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Live statistics for video ids or links."""
    video_ids = [extract_youtube_video_id(value) or value.strip() for value in data.video_ids]
    try:
        return flows.fetch_youtube_details(db, video_ids)
    except FlowError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/videos/{video_id}/comments", response_model=List[YouTubeComment])
def video_comments(
    video_id: str,
    max_results: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Most relevant top-level comments for a video."""
    try:
        return flows.fetch_youtube_comments(db, video_id, max_results=max_results)
    except FlowError as e:
        raise HTTPException(status_code=502, detail=str(e))
