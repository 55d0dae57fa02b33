"""Client for the RapidAPI Instagram scraper."""

from datetime import datetime
import logging
import requests

from insightstream.config import settings
from insightstream.models.platform_schemas import InstagramReelStats
from insightstream.utils.link_parsers import extract_instagram_shortcode

logger = logging.getLogger(__name__)


def _to_int(value):
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


class InstagramScraperAPI:
    """
    Fetch reel statistics through RapidAPI.

    fetch_reel_stats never raises; failures come back with
    fetched_successfully=False and an error_message.
    """

    def __init__(self, api_key, host=None, timeout=None, session=None):
        self.api_key = api_key
        self.host = host or settings.INSTAGRAM_SCRAPER_HOST
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def _headers(self):
        return {
            'X-RapidAPI-Key': self.api_key,
            'X-RapidAPI-Host': self.host,
        }

    def fetch_reel_stats(self, reel_url: str) -> InstagramReelStats:
        if not self.api_key:
            return InstagramReelStats(
                original_url=reel_url,
                fetched_successfully=False,
                error_message="RapidAPI key for Instagram scraper is not configured."
            )

        shortcode = extract_instagram_shortcode(reel_url)
        if not shortcode:
            return InstagramReelStats(
                original_url=reel_url,
                fetched_successfully=False,
                error_message=f"Could not extract shortcode from URL: {reel_url}"
            )

        try:
            response = self.session.get(
                f"https://{self.host}/post",
                params={'shortcode': shortcode},
                headers=self._headers(),
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Error fetching stats for shortcode {shortcode}: {e}")
            return InstagramReelStats(
                shortcode=shortcode,
                original_url=reel_url,
                fetched_successfully=False,
                error_message=str(e) or "An unknown error occurred while fetching reel stats."
            )

        if not response.ok:
            body = response.text or ""
            logger.error(f"RapidAPI error for {shortcode} ({response.status_code}): {body[:500]}")
            return InstagramReelStats(
                shortcode=shortcode,
                original_url=reel_url,
                fetched_successfully=False,
                error_message=f"API request failed with status {response.status_code}. Details: {body[:200]}"
            )

        try:
            payload = response.json()
        except ValueError:
            payload = None

        data = payload.get('data') if isinstance(payload, dict) else None
        post = data[0] if isinstance(data, list) and data else None
        if not isinstance(post, dict):
            logger.error(f"Unexpected API response structure for {shortcode}")
            return InstagramReelStats(
                shortcode=shortcode,
                original_url=reel_url,
                fetched_successfully=False,
                error_message="Unexpected API response structure. Post data not found."
            )

        return self._parse_post(shortcode, reel_url, post)

    def _parse_post(self, shortcode, reel_url, post) -> InstagramReelStats:
        caption = None
        caption_edges = post.get('edge_media_to_caption')
        edges = caption_edges.get('edges') if isinstance(caption_edges, dict) else None
        if isinstance(edges, list) and edges and isinstance(edges[0], dict):
            node = edges[0].get('node')
            if isinstance(node, dict) and isinstance(node.get('text'), str) and node['text']:
                caption = node['text']

        posted_at = None
        if post.get('taken_at_timestamp'):
            try:
                posted_at = datetime.utcfromtimestamp(int(post['taken_at_timestamp']))
            except (TypeError, ValueError, OverflowError, OSError):
                logger.warning(f"Could not parse timestamp for {shortcode}: {post['taken_at_timestamp']}")

        owner = post.get('owner')
        username = owner.get('username') if isinstance(owner, dict) else None
        thumbnail_url = post.get('display_url')

        return InstagramReelStats(
            shortcode=shortcode,
            original_url=reel_url,
            comment_count=_to_int(post.get('comment_count')),
            like_count=_to_int(post.get('like_count')),
            play_count=_to_int(post.get('play_count')) or _to_int(post.get('video_view_count')),
            caption=caption,
            thumbnail_url=thumbnail_url if isinstance(thumbnail_url, str) else None,
            username=username if isinstance(username, str) else None,
            posted_at=posted_at,
            fetched_successfully=True
        )
