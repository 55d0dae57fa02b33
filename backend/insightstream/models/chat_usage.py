"""Per-user AI chat usage counter."""

from sqlalchemy import Column, String, Integer, DateTime
from datetime import datetime

from insightstream.database import Base


class ChatUsage(Base):
    """Messages sent in the current rolling window."""
    __tablename__ = "chat_usage"

    user_id = Column(String(36), primary_key=True)
    message_count = Column(Integer, default=0, nullable=False)
    limit_start_date = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<ChatUsage(user_id={self.user_id}, count={self.message_count})>"
