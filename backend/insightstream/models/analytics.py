"""Stored analytics snapshots for assigned videos and reels."""

from sqlalchemy import Column, String, Text, DateTime, BigInteger
from datetime import datetime

from insightstream.database import Base


class YouTubeVideoSnapshot(Base):
    """Latest known statistics for a YouTube video assigned to a user."""
    __tablename__ = "youtube_video_snapshots"

    user_id = Column(String(36), primary_key=True)
    video_id = Column(String(50), primary_key=True)  # YouTube video ID

    # Video content
    title = Column(Text)
    description = Column(Text)
    thumbnail_url = Column(String(500))
    published_at = Column(DateTime, index=True)

    # Engagement metrics
    views = Column(BigInteger, default=0)
    likes = Column(BigInteger, default=0)
    comments = Column(BigInteger, default=0)

    last_fetched = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<YouTubeVideoSnapshot(video_id='{self.video_id}', views={self.views})>"


class InstagramPostSnapshot(Base):
    """Latest known statistics for an Instagram reel assigned to a user."""
    __tablename__ = "instagram_post_snapshots"

    user_id = Column(String(36), primary_key=True)
    shortcode = Column(String(100), primary_key=True)

    reel_url = Column(String(500), nullable=False)
    thumbnail_url = Column(Text)
    caption = Column(Text)
    username = Column(String(255))
    posted_at = Column(DateTime)

    likes = Column(BigInteger, default=0)
    comments = Column(BigInteger, default=0)
    views = Column(BigInteger, default=0)  # play count

    last_fetched = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    error_message = Column(Text)

    def __repr__(self):
        return f"<InstagramPostSnapshot(shortcode='{self.shortcode}', views={self.views})>"
