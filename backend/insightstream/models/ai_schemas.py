"""Pydantic schemas for AI flows and chat usage."""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Literal

from insightstream.models.platform_schemas import YouTubeComment


def cap(value, limit: int) -> list:
    """Turn a missing model list into [] and drop items past `limit`."""
    if value is None:
        return []
    return list(value)[:limit]


# ============================================
# Video text analysis
# ============================================

class AnalyzeVideoTextInput(BaseModel):
    video_id: str
    title: str
    description: str = ""
    comments: List[YouTubeComment] = []


class VideoTextAnalysis(BaseModel):
    overall_sentiment: Literal["positive", "negative", "neutral", "mixed"]
    sentiment_summary: str
    top_positive_keywords: List[str] = []
    top_negative_keywords: List[str] = []
    identified_topics: List[str] = []
    content_suggestions: List[str] = []

    @field_validator("top_positive_keywords", "top_negative_keywords", "identified_topics", mode="before")
    @classmethod
    def _cap_five(cls, value):
        return cap(value, 5)

    @field_validator("content_suggestions", mode="before")
    @classmethod
    def _cap_three(cls, value):
        return cap(value, 3)


# ============================================
# General query / suggestions
# ============================================

class YouTubeVideoData(BaseModel):
    title: str
    likes: int = 0
    comments: int = 0
    views: int = 0


class InstagramPostData(BaseModel):
    thumbnail: str = ""
    likes: int = 0
    comments: int = 0
    timestamp: str = ""
    caption: Optional[str] = None


class GeneralQueryInput(BaseModel):
    user_query: str = Field(..., min_length=1)
    user_role: str = "user"
    youtube_data: Optional[List[YouTubeVideoData]] = None
    instagram_data: Optional[List[InstagramPostData]] = None


class GeneralQueryOutput(BaseModel):
    ai_response: str = ""


class SuggestionYouTubeData(BaseModel):
    title: str
    likes: int = 0
    comments: int = 0
    shares: int = 0


class SuggestContentImprovementsInput(BaseModel):
    youtube_data: List[SuggestionYouTubeData] = []
    instagram_data: List[InstagramPostData] = []
    user_role: str = "user"


class ContentSuggestion(BaseModel):
    platform: Literal["youtube", "instagram"]
    type: str
    description: str


class SuggestContentImprovementsOutput(BaseModel):
    suggestions: List[ContentSuggestion] = []

    @field_validator("suggestions", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or []


# ============================================
# Analytics reports
# ============================================

class VideoForReport(BaseModel):
    id: str
    title: str
    description: str = ""
    thumbnail_url: str = "https://placehold.co/320x180.png"
    views: int = 0
    likes: int = 0
    comments: int = 0
    published_at: str


class ChannelReportInput(BaseModel):
    videos: List[VideoForReport] = Field(..., min_length=1)
    filter_context: Optional[str] = None


class TopVideo(BaseModel):
    id: str
    title: str
    views: int = 0
    likes: int = 0
    comments: int = 0
    reason: Optional[str] = None


class ReportSections(BaseModel):
    report_title: str
    overall_performance_summary: str
    key_observations: List[str] = []
    areas_for_improvement: List[str] = []
    actionable_suggestions: List[str] = []

    @field_validator("key_observations", mode="before")
    @classmethod
    def _cap_observations(cls, value):
        return cap(value, 5)

    @field_validator("areas_for_improvement", "actionable_suggestions", mode="before")
    @classmethod
    def _cap_three(cls, value):
        return cap(value, 3)


class ChannelAnalyticsReport(ReportSections):
    top_performing_videos: List[TopVideo] = []

    @field_validator("top_performing_videos", mode="before")
    @classmethod
    def _cap_top(cls, value):
        return cap(value, 3)


class ReelForReport(BaseModel):
    id: str
    reel_url: str = ""
    caption: str = ""
    username: str = ""
    likes: int = 0
    comments: int = 0
    play_count: int = 0
    reshare_count: int = 0
    posted_at: str


class InstagramReportInput(BaseModel):
    reels: List[ReelForReport] = Field(..., min_length=1)
    filter_context: Optional[str] = None


class TopReel(BaseModel):
    id: str
    reel_url: Optional[str] = None
    caption: Optional[str] = None
    username: Optional[str] = None
    play_count: int = 0
    likes: int = 0
    comments: int = 0
    reshare_count: Optional[int] = None
    reason: Optional[str] = None


class InstagramAnalyticsReport(ReportSections):
    top_performing_reels: List[TopReel] = []

    @field_validator("top_performing_reels", mode="before")
    @classmethod
    def _cap_top(cls, value):
        return cap(value, 3)


# ============================================
# Chat usage
# ============================================

class ChatUsageDecision(BaseModel):
    allowed: bool
    messages_remaining: int = Field(..., ge=0)
    limit_reached: bool
    daily_limit: int
    error: Optional[str] = None


class ChatUsageStatus(BaseModel):
    messages_remaining: int = Field(..., ge=0)
    daily_limit: int
    error: Optional[str] = None


class ChatQueryResponse(BaseModel):
    ai_response: str
    usage: ChatUsageDecision
