"""
Stored snapshots of YouTube video and Instagram reel statistics.

Saves merge into the existing row: only fields that are passed (not None)
overwrite stored values, and `last_fetched` is always bumped.
"""

from sqlalchemy.orm import Session
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
import logging

from insightstream.models.analytics import YouTubeVideoSnapshot, InstagramPostSnapshot

logger = logging.getLogger(__name__)

YOUTUBE_FIELDS = ("title", "description", "thumbnail_url", "published_at", "views", "likes", "comments")
INSTAGRAM_FIELDS = (
    "reel_url", "thumbnail_url", "caption", "username", "posted_at",
    "likes", "comments", "views", "error_message",
)


def _merge(record, fields: Iterable[str], data: Dict[str, Any]):
    for field in fields:
        if field in data and data[field] is not None:
            setattr(record, field, data[field])
    record.last_fetched = datetime.utcnow()


# ============================================
# YouTube
# ============================================

def _upsert_youtube(db: Session, user_id: str, video_id: str, data: Dict[str, Any]) -> YouTubeVideoSnapshot:
    record = db.query(YouTubeVideoSnapshot).filter(
        YouTubeVideoSnapshot.user_id == user_id,
        YouTubeVideoSnapshot.video_id == video_id
    ).first()
    if record is None:
        record = YouTubeVideoSnapshot(user_id=user_id, video_id=video_id)
        db.add(record)
    _merge(record, YOUTUBE_FIELDS, data)
    return record


def save_youtube_video(db: Session, user_id: str, video_id: str, data: Dict[str, Any]) -> YouTubeVideoSnapshot:
    record = _upsert_youtube(db, user_id, video_id, data)
    db.commit()
    db.refresh(record)
    return record


def batch_save_youtube_videos(db: Session, user_id: str, videos: List[Dict[str, Any]]) -> int:
    """
    Save several videos in one transaction.

    Each dict needs a `video_id` key. Returns the number saved.
    """
    count = 0
    for data in videos:
        video_id = data.get("video_id")
        if not video_id:
            continue
        _upsert_youtube(db, user_id, video_id, data)
        count += 1
    db.commit()
    return count


def get_youtube_video(db: Session, user_id: str, video_id: str) -> Optional[YouTubeVideoSnapshot]:
    return db.query(YouTubeVideoSnapshot).filter(
        YouTubeVideoSnapshot.user_id == user_id,
        YouTubeVideoSnapshot.video_id == video_id
    ).first()


def list_youtube_videos_for_user(db: Session, user_id: str) -> List[YouTubeVideoSnapshot]:
    """Newest published first; videos without a publish date go last."""
    return db.query(YouTubeVideoSnapshot).filter(
        YouTubeVideoSnapshot.user_id == user_id
    ).order_by(
        YouTubeVideoSnapshot.published_at.is_(None),
        YouTubeVideoSnapshot.published_at.desc()
    ).all()


def delete_youtube_video(db: Session, user_id: str, video_id: str) -> bool:
    deleted = db.query(YouTubeVideoSnapshot).filter(
        YouTubeVideoSnapshot.user_id == user_id,
        YouTubeVideoSnapshot.video_id == video_id
    ).delete()
    db.commit()
    return deleted > 0


# ============================================
# Instagram
# ============================================

def _upsert_instagram(
    db: Session, user_id: str, shortcode: str, data: Dict[str, Any], clear_error: bool = False
) -> InstagramPostSnapshot:
    record = db.query(InstagramPostSnapshot).filter(
        InstagramPostSnapshot.user_id == user_id,
        InstagramPostSnapshot.shortcode == shortcode
    ).first()
    if record is None:
        record = InstagramPostSnapshot(
            user_id=user_id,
            shortcode=shortcode,
            reel_url=data.get("reel_url") or "",
        )
        db.add(record)
    _merge(record, INSTAGRAM_FIELDS, data)
    if clear_error:
        record.error_message = None
    return record


def save_instagram_post(
    db: Session, user_id: str, shortcode: str, data: Dict[str, Any], clear_error: bool = False
) -> InstagramPostSnapshot:
    """Merge and commit one reel. clear_error resets a stored error in the same write."""
    record = _upsert_instagram(db, user_id, shortcode, data, clear_error)
    db.commit()
    db.refresh(record)
    return record


def batch_save_instagram_posts(db: Session, user_id: str, posts: List[Dict[str, Any]]) -> int:
    """Each dict needs a `shortcode` key. Returns the number saved."""
    count = 0
    for data in posts:
        shortcode = data.get("shortcode")
        if not shortcode:
            continue
        _upsert_instagram(db, user_id, shortcode, data)
        count += 1
    db.commit()
    return count


def get_instagram_post(db: Session, user_id: str, shortcode: str) -> Optional[InstagramPostSnapshot]:
    return db.query(InstagramPostSnapshot).filter(
        InstagramPostSnapshot.user_id == user_id,
        InstagramPostSnapshot.shortcode == shortcode
    ).first()


def list_instagram_posts_for_user(db: Session, user_id: str) -> List[InstagramPostSnapshot]:
    """Most recently fetched first."""
    return db.query(InstagramPostSnapshot).filter(
        InstagramPostSnapshot.user_id == user_id
    ).order_by(InstagramPostSnapshot.last_fetched.desc()).all()


def delete_instagram_post(db: Session, user_id: str, shortcode: str) -> bool:
    deleted = db.query(InstagramPostSnapshot).filter(
        InstagramPostSnapshot.user_id == user_id,
        InstagramPostSnapshot.shortcode == shortcode
    ).delete()
    db.commit()
    return deleted > 0
