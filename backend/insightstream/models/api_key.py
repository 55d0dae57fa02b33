"""Third-party API key model."""

from sqlalchemy import Column, String, DateTime, Text
from datetime import datetime

from insightstream.database import Base
from insightstream.models.user import new_id


# Service names looked up by the platform clients
SERVICE_YOUTUBE = "youtube"
SERVICE_INSTAGRAM_SCRAPER = "RapidAPI-Instagram-Scraper"
SERVICE_GOOGLE_ANALYTICS = "google-analytics"
SERVICE_GOOGLE_ANALYTICS_MP = "google-analytics-mp"


class ApiKey(Base):
    """Credential for an external service, managed by admins."""

    __tablename__ = "api_keys"

    id = Column(String(36), primary_key=True, default=new_id)
    service_name = Column(String(100), nullable=False, index=True)

    # Fernet-encrypted key value (see CredentialService)
    encrypted_value = Column(Text, nullable=False)
    description = Column(String(255), nullable=True)

    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<ApiKey(id={self.id}, service_name={self.service_name})>"
