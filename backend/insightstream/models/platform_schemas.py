"""Pydantic schemas for links, analytics snapshots and campaign data."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


# ============================================
# Link Assignment Schemas
# ============================================

class LinkAssignRequest(BaseModel):
    """Links to assign to a user."""
    user_id: str
    links: List[str] = Field(..., min_length=1)


class LinkRemoveRequest(BaseModel):
    """Single link to remove from a user."""
    user_id: str
    link: str


class AssignLinksResult(BaseModel):
    """Outcome of a link assignment."""
    success: bool
    actually_added_count: int = 0
    excluded: List[str] = []


class LinkListResponse(BaseModel):
    user_id: str
    links: List[str]


class LinkCsvUploadRequest(BaseModel):
    """CSV text with a `link` column, or one URL per row."""
    user_id: str
    csv_content: str = Field(..., min_length=1)


# ============================================
# YouTube Schemas
# ============================================

class YouTubeVideoDetails(BaseModel):
    """Video statistics as returned by the YouTube client."""
    id: str
    title: str = "Untitled Video"
    description: str = ""
    thumbnail_url: str = "https://placehold.co/320x180.png?text=No+Thumbnail"
    views: int = 0
    likes: int = 0
    comments: int = 0
    published_at: Optional[datetime] = None


class VideoIdsRequest(BaseModel):
    video_ids: List[str] = Field(..., min_length=1)


class YouTubeComment(BaseModel):
    """Top-level comment on a video."""
    id: str
    author_display_name: str
    author_profile_image_url: str = ""
    text_display: str
    published_at: str
    like_count: int = 0
    total_reply_count: int = 0


class YouTubeVideoSnapshotResponse(BaseModel):
    video_id: str
    title: Optional[str] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    published_at: Optional[datetime] = None
    views: int = 0
    likes: int = 0
    comments: int = 0
    last_fetched: datetime

    class Config:
        from_attributes = True


# ============================================
# Instagram Schemas
# ============================================

class ReelStatsRequest(BaseModel):
    reel_url: str = Field(..., min_length=1)


class InstagramReelStats(BaseModel):
    """Reel statistics as returned by the scraper client."""
    shortcode: str = ""
    original_url: str
    comment_count: int = 0
    like_count: int = 0
    play_count: int = 0
    caption: Optional[str] = None
    thumbnail_url: Optional[str] = None
    username: Optional[str] = None
    posted_at: Optional[datetime] = None
    fetched_successfully: bool
    error_message: Optional[str] = None


class InstagramPostSnapshotResponse(BaseModel):
    shortcode: str
    reel_url: str
    thumbnail_url: Optional[str] = None
    caption: Optional[str] = None
    username: Optional[str] = None
    posted_at: Optional[datetime] = None
    likes: int = 0
    comments: int = 0
    views: int = 0
    last_fetched: datetime
    error_message: Optional[str] = None

    class Config:
        from_attributes = True


# ============================================
# Refresh Schemas
# ============================================

class RefreshResult(BaseModel):
    """Outcome of refreshing one user's feed on one platform."""
    user_id: str
    platform: str
    links: int = 0
    updated: int = 0
    failed: int = 0
    errors: List[str] = []


class RefreshSummary(BaseModel):
    """Outcome of the daily refresh job."""
    started_at: datetime
    finished_at: Optional[datetime] = None
    users_processed: int = 0
    videos_updated: int = 0
    reels_updated: int = 0
    reels_failed: int = 0
    errors: List[str] = []


# ============================================
# Campaign Schemas
# ============================================

class UtmLinkCreate(BaseModel):
    base_url: str
    utm_source: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-zA-Z0-9_-]+$")
    utm_medium: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-zA-Z0-9_-]+$")
    utm_campaign: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-zA-Z0-9_-]+$")


class UtmLinkResponse(BaseModel):
    id: str
    short_id: str
    user_id: str
    base_url: str
    utm_source: str
    utm_medium: str
    utm_campaign: str
    generated_url: str
    created_at: datetime

    class Config:
        from_attributes = True


class CampaignAnalyticsRequest(BaseModel):
    property_id: str = Field(..., min_length=1)
    campaign_name: str = Field(..., min_length=1)


class CampaignAnalytics(BaseModel):
    total_users: float = 0
    sessions: float = 0
    conversions: float = 0
    bounce_rate: float = 0
    average_session_duration: float = 0  # seconds
    error: Optional[str] = None
