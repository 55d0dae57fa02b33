"""YouTube API client for fetching video statistics and comments."""

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from datetime import datetime
import logging

from insightstream.platforms.errors import PlatformAPIError

logger = logging.getLogger(__name__)

# videos.list accepts at most 50 ids per call
VIDEO_ID_CHUNK_SIZE = 50
PLACEHOLDER_THUMBNAIL = "https://placehold.co/320x180.png?text=No+Thumbnail"


def _to_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _parse_published_at(value):
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        logger.warning(f"Could not parse publishedAt value '{value}'")
        return None


def _best_thumbnail(thumbnails):
    for size in ("high", "medium", "default"):
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return PLACEHOLDER_THUMBNAIL


class YouTubeAPI:
    """Client for interacting with the YouTube Data API v3."""

    def __init__(self, api_key, youtube=None):
        """Initialize the YouTube API client.

        Args:
            api_key: YouTube Data API v3 key
            youtube: Prebuilt discovery resource, mainly for tests
        """
        if not api_key:
            raise ValueError("YouTube API key is required.")
        self.api_key = api_key
        self.youtube = youtube or build('youtube', 'v3', developerKey=api_key, cache_discovery=False)

    def get_video_statistics(self, video_ids):
        """Get snippet and statistics for videos.

        Args:
            video_ids: List of YouTube video IDs

        Returns:
            List of video dictionaries in API response order

        Raises:
            PlatformAPIError: If a request fails
        """
        video_ids = [video_id for video_id in video_ids if video_id]
        if not video_ids:
            return []

        videos = []
        for start in range(0, len(video_ids), VIDEO_ID_CHUNK_SIZE):
            chunk = video_ids[start:start + VIDEO_ID_CHUNK_SIZE]
            try:
                response = self.youtube.videos().list(
                    part='snippet,statistics',
                    id=','.join(chunk)
                ).execute()
            except HttpError as e:
                raise PlatformAPIError("youtube", str(e), status_code=e.resp.status) from e
            except Exception as e:
                raise PlatformAPIError("youtube", str(e)) from e

            for item in response.get('items') or []:
                snippet = item.get('snippet') or {}
                statistics = item.get('statistics') or {}
                videos.append({
                    'id': item.get('id'),
                    'title': snippet.get('title') or 'Untitled Video',
                    'description': snippet.get('description') or '',
                    'thumbnail_url': _best_thumbnail(snippet.get('thumbnails') or {}),
                    'views': _to_int(statistics.get('viewCount')),
                    'likes': _to_int(statistics.get('likeCount')),
                    'comments': _to_int(statistics.get('commentCount')),
                    'published_at': _parse_published_at(snippet.get('publishedAt')),
                })

        logger.debug(f"Fetched statistics for {len(videos)} of {len(video_ids)} videos")
        return videos

    def get_video_comments(self, video_id, max_results=10):
        """Get the most relevant top-level comments for a video.

        Args:
            video_id: YouTube video ID
            max_results: Maximum number of comments to fetch

        Returns:
            List of comment dictionaries

        Raises:
            PlatformAPIError: If the request fails
        """
        try:
            response = self.youtube.commentThreads().list(
                part='snippet',
                videoId=video_id,
                maxResults=max_results,
                order='relevance',
                textFormat='plainText'
            ).execute()
        except HttpError as e:
            raise PlatformAPIError("youtube", str(e), status_code=e.resp.status) from e
        except Exception as e:
            raise PlatformAPIError("youtube", str(e)) from e

        comments = []
        for item in response.get('items') or []:
            top_comment = ((item.get('snippet') or {}).get('topLevelComment') or {}).get('snippet') or {}
            comments.append({
                'id': item.get('id'),
                'author_display_name': top_comment.get('authorDisplayName') or 'Unknown',
                'author_profile_image_url': top_comment.get('authorProfileImageUrl') or '',
                'text_display': top_comment.get('textDisplay') or '',
                'published_at': top_comment.get('publishedAt') or '',
                'like_count': _to_int(top_comment.get('likeCount')),
                'total_reply_count': _to_int((item.get('snippet') or {}).get('totalReplyCount')),
            })

        return comments[:max_results]
