"""UTM-tagged campaign links."""

from sqlalchemy import Column, String, Text, DateTime
from datetime import datetime

from insightstream.database import Base
from insightstream.models.user import new_id


class UtmLink(Base):
    """Campaign link with a short id served by the tracking redirect."""
    __tablename__ = "utm_links"

    id = Column(String(36), primary_key=True, default=new_id)
    short_id = Column(String(16), unique=True, nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)

    base_url = Column(Text, nullable=False)
    utm_source = Column(String(100), nullable=False)
    utm_medium = Column(String(100), nullable=False)
    utm_campaign = Column(String(100), nullable=False)
    generated_url = Column(Text, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<UtmLink(short_id={self.short_id}, campaign={self.utm_campaign})>"
