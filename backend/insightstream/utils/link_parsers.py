"""Extract platform ids from assigned links."""

import re
from typing import Optional
from urllib.parse import urlparse, parse_qs

INSTAGRAM_SHORTCODE_PATTERN = re.compile(r"/(?:p|reel|reels)/([a-zA-Z0-9_-]+)")


def extract_youtube_video_id(url: str) -> Optional[str]:
    """
    Get the video id from a YouTube link.

    Supports youtu.be/<id>, youtube.com/watch?v=<id>, /embed/<id> and /shorts/<id>.

    Returns:
        Video id or None if the link is not a recognised YouTube video URL
    """
    if not url:
        return None
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None

    host = (parsed.hostname or "").lower()
    path = parsed.path or ""
    video_id = None

    if host == "youtu.be":
        video_id = path.lstrip("/").split("/")[0]
    elif "youtube.com" in host:
        if path.startswith("/embed/"):
            video_id = path[len("/embed/"):].split("/")[0]
        elif path.startswith("/watch"):
            video_id = (parse_qs(parsed.query).get("v") or [None])[0]
        elif path.startswith("/shorts/"):
            video_id = path[len("/shorts/"):].split("/")[0]

    if video_id:
        video_id = re.split(r"[?&]", video_id)[0]
    return video_id or None


def extract_instagram_shortcode(url: str) -> Optional[str]:
    """
    Get the shortcode from an Instagram post or reel link (/p/, /reel/ or /reels/).

    Returns:
        Shortcode or None
    """
    if not url:
        return None
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None

    match = INSTAGRAM_SHORTCODE_PATTERN.search(parsed.path)
    return match.group(1) if match else None
