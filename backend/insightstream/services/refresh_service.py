"""
Refresh stored analytics from the YouTube and Instagram APIs.

Users and their links are processed sequentially. Any per-user or per-link
failure is logged, reported to error tracking and skipped; earlier writes
are kept.
"""

from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional
import logging

from insightstream.models.user import User
from insightstream.models.api_key import SERVICE_YOUTUBE, SERVICE_INSTAGRAM_SCRAPER
from insightstream.models.links import COLLECTION_YOUTUBE, COLLECTION_INSTAGRAM
from insightstream.models.platform_schemas import RefreshResult, RefreshSummary
from insightstream.platforms.youtube.youtube_api import YouTubeAPI
from insightstream.platforms.instagram.instagram_api import InstagramScraperAPI
from insightstream.services import analytics_store
from insightstream.services.api_key_service import get_api_key_value
from insightstream.services.error_tracking import capture_exception
from insightstream.services.link_service import get_links
from insightstream.services.logging_service import app_logger
from insightstream.utils.link_parsers import extract_youtube_video_id

logger = logging.getLogger(__name__)


def refresh_user_youtube(db: Session, user_id: str, client: YouTubeAPI) -> RefreshResult:
    """Fetch statistics for every assigned YouTube video and merge them into snapshots."""
    result = RefreshResult(user_id=user_id, platform="youtube")

    links = get_links(db, user_id, COLLECTION_YOUTUBE)
    result.links = len(links)

    video_ids = []
    for link in links:
        video_id = extract_youtube_video_id(link)
        if video_id and video_id not in video_ids:
            video_ids.append(video_id)
        elif not video_id:
            result.errors.append(f"Not a YouTube video link: {link}")

    if not video_ids:
        return result

    try:
        videos = client.get_video_statistics(video_ids)
    except Exception as e:
        logger.error(f"YouTube statistics request failed for user {user_id}: {e}")
        capture_exception(e, context={"user_id": user_id}, tags={"platform": "youtube"})
        result.failed = len(video_ids)
        result.errors.append(str(e))
        return result

    records = []
    for video in videos:
        if not isinstance(video, dict) or not video.get("id"):
            result.failed += 1
            continue
        records.append({
            "video_id": video["id"],
            "title": video.get("title"),
            "description": video.get("description"),
            "thumbnail_url": video.get("thumbnail_url"),
            "published_at": video.get("published_at"),
            "views": video.get("views"),
            "likes": video.get("likes"),
            "comments": video.get("comments"),
        })

    returned_ids = {record["video_id"] for record in records}
    for video_id in video_ids:
        if video_id not in returned_ids:
            result.failed += 1
            result.errors.append(f"{video_id}: not returned by the YouTube API (deleted or private)")

    try:
        result.updated = analytics_store.batch_save_youtube_videos(db, user_id, records)
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to store YouTube snapshots for user {user_id}: {e}")
        capture_exception(e, context={"user_id": user_id}, tags={"platform": "youtube"})
        result.failed += len(records)
        result.errors.append(str(e))

    return result


def refresh_user_instagram(db: Session, user_id: str, client: InstagramScraperAPI) -> RefreshResult:
    """
    Fetch statistics for every assigned Instagram reel.

    A failed fetch only records error_message; previously stored stats stay.
    """
    result = RefreshResult(user_id=user_id, platform="instagram")

    links = get_links(db, user_id, COLLECTION_INSTAGRAM)
    result.links = len(links)

    for link in links:
        try:
            stats = client.fetch_reel_stats(link)

            if not stats.shortcode:
                result.failed += 1
                result.errors.append(stats.error_message or f"Invalid link: {link}")
                continue

            if not stats.fetched_successfully:
                analytics_store.save_instagram_post(db, user_id, stats.shortcode, {
                    "reel_url": link,
                    "error_message": stats.error_message,
                })
                result.failed += 1
                result.errors.append(f"{stats.shortcode}: {stats.error_message}")
                continue

            analytics_store.save_instagram_post(db, user_id, stats.shortcode, {
                "reel_url": link,
                "thumbnail_url": stats.thumbnail_url,
                "caption": stats.caption,
                "username": stats.username,
                "posted_at": stats.posted_at,
                "likes": stats.like_count,
                "comments": stats.comment_count,
                "views": stats.play_count,
            }, clear_error=True)
            result.updated += 1

        except Exception as e:
            db.rollback()
            logger.error(f"Failed to refresh Instagram link {link} for user {user_id}: {e}")
            capture_exception(e, context={"user_id": user_id, "link": link}, tags={"platform": "instagram"})
            result.failed += 1
            result.errors.append(str(e))

    return result


def run_daily_refresh(
    db: Session,
    youtube_client: Optional[YouTubeAPI] = None,
    instagram_client: Optional[InstagramScraperAPI] = None
) -> RefreshSummary:
    """
    Refresh analytics for every user.

    Clients are built from the stored API keys unless passed in. A platform
    whose key is missing is skipped for all users.
    """
    summary = RefreshSummary(started_at=datetime.utcnow())
    app_logger.info("Daily data refresh job started")

    if youtube_client is None:
        youtube_key = get_api_key_value(db, SERVICE_YOUTUBE)
        if youtube_key:
            try:
                youtube_client = YouTubeAPI(youtube_key)
            except Exception as e:
                logger.error(f"Could not build YouTube client: {e}")
                capture_exception(e, tags={"platform": "youtube"})
                summary.errors.append(f"youtube: {e}")
        else:
            summary.errors.append("YouTube API key is not configured; skipping YouTube refresh.")

    if instagram_client is None:
        instagram_key = get_api_key_value(db, SERVICE_INSTAGRAM_SCRAPER)
        if instagram_key:
            instagram_client = InstagramScraperAPI(instagram_key)
        else:
            summary.errors.append("RapidAPI Instagram key is not configured; skipping Instagram refresh.")

    try:
        user_ids = [row.id for row in db.query(User.id).all()]
    except Exception as e:
        logger.error(f"Could not list users for daily refresh: {e}")
        capture_exception(e)
        summary.errors.append(str(e))
        summary.finished_at = datetime.utcnow()
        return summary

    for user_id in user_ids:
        try:
            if youtube_client is not None:
                youtube_result = refresh_user_youtube(db, user_id, youtube_client)
                summary.videos_updated += youtube_result.updated
                summary.errors.extend(f"{user_id}: {error}" for error in youtube_result.errors)

            if instagram_client is not None:
                instagram_result = refresh_user_instagram(db, user_id, instagram_client)
                summary.reels_updated += instagram_result.updated
                summary.reels_failed += instagram_result.failed
                summary.errors.extend(f"{user_id}: {error}" for error in instagram_result.errors)

        except Exception as e:
            db.rollback()
            logger.error(f"Daily refresh failed for user {user_id}: {e}")
            capture_exception(e, context={"user_id": user_id})
            summary.errors.append(f"{user_id}: {e}")

        summary.users_processed += 1

    summary.finished_at = datetime.utcnow()
    app_logger.info(
        "Daily data refresh job finished",
        users_processed=summary.users_processed,
        videos_updated=summary.videos_updated,
        reels_updated=summary.reels_updated,
        reels_failed=summary.reels_failed,
        error_count=len(summary.errors),
    )
    return summary
