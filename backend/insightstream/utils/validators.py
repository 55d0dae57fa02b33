"""Input normalisation helpers shared by services."""

from typing import Optional
from urllib.parse import urlparse


def normalize_email(email: Optional[str]) -> str:
    """Emails are stored and looked up trimmed and lower-cased."""
    return (email or "").strip().lower()


def is_valid_http_url(value: str) -> bool:
    """Return True for absolute http(s) URLs with a host."""
    if not value:
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
