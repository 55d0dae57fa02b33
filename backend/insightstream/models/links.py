"""Per-user link lists assigned by admins."""

from sqlalchemy import Column, String, DateTime, JSON
from datetime import datetime

from insightstream.database import Base


COLLECTION_YOUTUBE = "youtube"
COLLECTION_INSTAGRAM = "instagramReelLinks"
LINK_COLLECTIONS = (COLLECTION_YOUTUBE, COLLECTION_INSTAGRAM)


class AssignedLinks(Base):
    """Ordered list of unique URLs assigned to one user on one platform."""

    __tablename__ = "assigned_links"

    user_id = Column(String(36), primary_key=True)
    collection = Column(String(50), primary_key=True)  # 'youtube' or 'instagramReelLinks'

    links = Column(JSON, nullable=False, default=list)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<AssignedLinks(user_id={self.user_id}, collection={self.collection}, count={len(self.links or [])})>"
