"""
AI and data flows.

AI flows format a prompt, ask the model for JSON and validate it. Data flows
wrap the platform clients with the stored API keys so routers and the AI
pages share one entry point.
"""

from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from insightstream.ai import prompts
from insightstream.ai.client import GenerativeClient, FlowError, EmptyResponseError, get_client
from insightstream.models.ai_schemas import (
    AnalyzeVideoTextInput,
    VideoTextAnalysis,
    GeneralQueryInput,
    GeneralQueryOutput,
    SuggestContentImprovementsInput,
    SuggestContentImprovementsOutput,
    ChannelReportInput,
    ChannelAnalyticsReport,
    InstagramReportInput,
    InstagramAnalyticsReport,
    ChatUsageDecision,
    ChatUsageStatus,
)
from insightstream.models.api_key import (
    SERVICE_YOUTUBE,
    SERVICE_INSTAGRAM_SCRAPER,
    SERVICE_GOOGLE_ANALYTICS,
)
from insightstream.models.platform_schemas import (
    YouTubeVideoDetails,
    YouTubeComment,
    InstagramReelStats,
    CampaignAnalytics,
)
from insightstream.platforms.errors import PlatformAPIError
from insightstream.platforms.youtube.youtube_api import YouTubeAPI
from insightstream.platforms.instagram.instagram_api import InstagramScraperAPI
from insightstream.platforms.google_analytics import ga_api
from insightstream.services import chat_usage_service
from insightstream.services.api_key_service import get_api_key_value
from insightstream.config import settings

logger = logging.getLogger(__name__)

MISSING_CAPTION = "Instagram Post (caption not available)"
GENERAL_QUERY_FALLBACK = (
    "I'm sorry, I couldn't generate a response for that query. Could you please try rephrasing it?"
)


# ============================================
# AI flows
# ============================================

def analyze_video_text(data: AnalyzeVideoTextInput, client: Optional[GenerativeClient] = None) -> VideoTextAnalysis:
    """Sentiment, keywords, topics and suggestions for one video."""
    client = client or get_client()
    return client.generate_json(prompts.video_text_analysis(data), VideoTextAnalysis)


def general_query(data: GeneralQueryInput, client: Optional[GenerativeClient] = None) -> GeneralQueryOutput:
    """Free-form assistant answer; never returns an empty response."""
    instagram_data = None
    if data.instagram_data:
        instagram_data = [
            post.model_copy(update={"caption": post.caption or MISSING_CAPTION})
            for post in data.instagram_data
        ]
    data = data.model_copy(update={"instagram_data": instagram_data})

    client = client or get_client()
    try:
        output = client.generate_json(prompts.general_query(data), GeneralQueryOutput)
    except EmptyResponseError:
        logger.warning("General query returned an empty response")
        return GeneralQueryOutput(ai_response=GENERAL_QUERY_FALLBACK)

    if not output.ai_response.strip():
        return GeneralQueryOutput(ai_response=GENERAL_QUERY_FALLBACK)
    return output


def suggest_content_improvements(
    data: SuggestContentImprovementsInput,
    client: Optional[GenerativeClient] = None
) -> SuggestContentImprovementsOutput:
    client = client or get_client()
    return client.generate_json(prompts.content_improvements(data), SuggestContentImprovementsOutput)


def generate_channel_analytics_report(
    data: ChannelReportInput,
    client: Optional[GenerativeClient] = None
) -> ChannelAnalyticsReport:
    client = client or get_client()
    return client.generate_json(prompts.channel_report(data), ChannelAnalyticsReport)


def generate_instagram_analytics_report(
    data: InstagramReportInput,
    client: Optional[GenerativeClient] = None
) -> InstagramAnalyticsReport:
    client = client or get_client()
    return client.generate_json(prompts.instagram_report(data), InstagramAnalyticsReport)


# ============================================
# Data flows
# ============================================

def _youtube_client(db: Session) -> YouTubeAPI:
    api_key = get_api_key_value(db, SERVICE_YOUTUBE)
    if not api_key:
        raise FlowError("YouTube API key is not configured or could not be retrieved.")
    return YouTubeAPI(api_key)


def fetch_youtube_details(
    db: Session,
    video_ids: List[str],
    youtube: Optional[YouTubeAPI] = None
) -> List[YouTubeVideoDetails]:
    """
    Current statistics for the given videos.

    Raises:
        FlowError: If no video ids are given, the key is missing or the API call fails
    """
    if not video_ids:
        raise FlowError("At least one video ID is required.")

    youtube = youtube or _youtube_client(db)
    try:
        videos = youtube.get_video_statistics(video_ids)
    except PlatformAPIError as e:
        raise FlowError(str(e)) from e

    return [
        YouTubeVideoDetails(
            id=video.get("id") or "unknown_id",
            title=video.get("title") or "Untitled Video",
            description=video.get("description") or "",
            thumbnail_url=video.get("thumbnail_url") or YouTubeVideoDetails.model_fields["thumbnail_url"].default,
            views=video.get("views") or 0,
            likes=video.get("likes") or 0,
            comments=video.get("comments") or 0,
            published_at=video.get("published_at"),
        )
        for video in videos
    ]


def fetch_youtube_comments(
    db: Session,
    video_id: str,
    max_results: Optional[int] = None,
    youtube: Optional[YouTubeAPI] = None
) -> List[YouTubeComment]:
    """
    Most relevant comments for a video.

    Raises:
        FlowError: If the key is missing or the API call fails
    """
    youtube = youtube or _youtube_client(db)
    try:
        comments = youtube.get_video_comments(
            video_id,
            max_results=max_results or settings.YOUTUBE_COMMENTS_MAX_RESULTS
        )
    except PlatformAPIError as e:
        raise FlowError(f"Failed to fetch comments: {e}") from e

    return [YouTubeComment(**comment) for comment in comments if comment.get("id")]


def fetch_instagram_reel_stats(
    db: Session,
    reel_url: str,
    scraper: Optional[InstagramScraperAPI] = None
) -> InstagramReelStats:
    """Reel statistics; failures are reported in the result, never raised."""
    if scraper is None:
        scraper = InstagramScraperAPI(get_api_key_value(db, SERVICE_INSTAGRAM_SCRAPER))
    return scraper.fetch_reel_stats(reel_url)


def fetch_campaign_analytics(db: Session, property_id: str, campaign_name: str, service=None) -> CampaignAnalytics:
    credentials_json = get_api_key_value(db, SERVICE_GOOGLE_ANALYTICS)
    return ga_api.fetch_campaign_analytics(credentials_json, property_id, campaign_name, service=service)


def check_chat_usage(db: Session, user_id: str) -> ChatUsageDecision:
    return chat_usage_service.check_and_increment(db, user_id)


def get_chat_usage_status(db: Session, user_id: str) -> ChatUsageStatus:
    return chat_usage_service.get_status(db, user_id)
