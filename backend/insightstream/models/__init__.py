"""Database models."""

from insightstream.models.user import User, UserSession
from insightstream.models.api_key import ApiKey
from insightstream.models.links import AssignedLinks
from insightstream.models.analytics import YouTubeVideoSnapshot, InstagramPostSnapshot
from insightstream.models.chat_usage import ChatUsage
from insightstream.models.utm_link import UtmLink

__all__ = [
    "User",
    "UserSession",
    "ApiKey",
    "AssignedLinks",
    "YouTubeVideoSnapshot",
    "InstagramPostSnapshot",
    "ChatUsage",
    "UtmLink",
]
