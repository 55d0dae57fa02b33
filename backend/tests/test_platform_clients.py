"""
Tests for the vendor API clients with mocked transports.
"""

import json
import pytest
import httplib2
import requests
from types import SimpleNamespace
from unittest.mock import Mock
from googleapiclient.errors import HttpError

from insightstream.platforms.errors import PlatformAPIError
from insightstream.platforms.youtube.youtube_api import YouTubeAPI, PLACEHOLDER_THUMBNAIL
from insightstream.platforms.instagram.instagram_api import InstagramScraperAPI
from insightstream.platforms.google_analytics.ga_api import (
    fetch_campaign_analytics,
    send_session_start_event,
    MEASUREMENT_PROTOCOL_URL,
)


def _video_item(video_id, thumbnails=None, **statistics):
    return {
        "id": video_id,
        "snippet": {
            "title": f"Video {video_id}",
            "description": "desc",
            "publishedAt": "2024-03-01T10:00:00Z",
            "thumbnails": thumbnails if thumbnails is not None else {
                "default": {"url": "https://i.ytimg.com/default.jpg"},
                "high": {"url": "https://i.ytimg.com/high.jpg"},
            },
        },
        "statistics": statistics,
    }


@pytest.mark.unit
@pytest.mark.platform
class TestYouTubeAPI:
    """Test YouTube Data API client."""

    def test_requires_key(self):
        with pytest.raises(ValueError):
            YouTubeAPI("", youtube=Mock())

    def test_video_statistics_parsing(self):
        youtube = Mock()
        youtube.videos.return_value.list.return_value.execute.return_value = {
            "items": [
                _video_item("v1", viewCount="1500", likeCount="30", commentCount="4"),
                _video_item("v2", thumbnails={"medium": {"url": "https://i.ytimg.com/medium.jpg"}}, viewCount="n/a"),
                _video_item("v3", thumbnails={}),
            ]
        }

        videos = YouTubeAPI("key", youtube=youtube).get_video_statistics(["v1", "v2", "v3"])

        assert [v["id"] for v in videos] == ["v1", "v2", "v3"]
        assert videos[0]["views"] == 1500
        assert videos[0]["likes"] == 30
        assert videos[0]["comments"] == 4
        assert videos[0]["thumbnail_url"] == "https://i.ytimg.com/high.jpg"
        assert videos[0]["published_at"].year == 2024
        assert videos[0]["published_at"].tzinfo is None
        assert videos[1]["views"] == 0
        assert videos[1]["thumbnail_url"] == "https://i.ytimg.com/medium.jpg"
        assert videos[2]["thumbnail_url"] == PLACEHOLDER_THUMBNAIL

    def test_ids_are_chunked(self):
        youtube = Mock()
        youtube.videos.return_value.list.return_value.execute.return_value = {"items": []}
        ids = [f"id{i}" for i in range(120)]

        YouTubeAPI("key", youtube=youtube).get_video_statistics(ids)

        calls = youtube.videos.return_value.list.call_args_list
        assert len(calls) == 3
        assert calls[0].kwargs["id"].count(",") == 49
        assert calls[2].kwargs["id"].split(",") == ids[100:]

    def test_empty_ids_make_no_request(self):
        youtube = Mock()
        assert YouTubeAPI("key", youtube=youtube).get_video_statistics(["", None]) == []
        youtube.videos.assert_not_called()

    def test_http_error_becomes_platform_error(self):
        youtube = Mock()
        youtube.videos.return_value.list.return_value.execute.side_effect = HttpError(
            httplib2.Response({"status": "403"}),
            json.dumps({"error": {"message": "quotaExceeded"}}).encode("utf-8"),
        )

        with pytest.raises(PlatformAPIError) as exc_info:
            YouTubeAPI("key", youtube=youtube).get_video_statistics(["v1"])

        assert exc_info.value.service == "youtube"
        assert exc_info.value.status_code == 403

    def test_comments(self):
        youtube = Mock()
        youtube.commentThreads.return_value.list.return_value.execute.return_value = {
            "items": [{
                "id": "c1",
                "snippet": {
                    "totalReplyCount": 2,
                    "topLevelComment": {"snippet": {
                        "authorDisplayName": "Viewer",
                        "textDisplay": "Great video",
                        "publishedAt": "2024-03-02T10:00:00Z",
                        "likeCount": 5,
                    }},
                },
            }]
        }

        comments = YouTubeAPI("key", youtube=youtube).get_video_comments("v1", max_results=5)

        assert comments == [{
            "id": "c1",
            "author_display_name": "Viewer",
            "author_profile_image_url": "",
            "text_display": "Great video",
            "published_at": "2024-03-02T10:00:00Z",
            "like_count": 5,
            "total_reply_count": 2,
        }]
        assert youtube.commentThreads.return_value.list.call_args.kwargs["maxResults"] == 5

    def test_comments_failure(self):
        youtube = Mock()
        youtube.commentThreads.return_value.list.return_value.execute.side_effect = RuntimeError("comments disabled")

        with pytest.raises(PlatformAPIError, match="comments disabled"):
            YouTubeAPI("key", youtube=youtube).get_video_comments("v1")


REEL_URL = "https://www.instagram.com/reel/C1a2B3c4D5e/"


def _response(ok=True, status_code=200, payload=None, text=""):
    response = Mock(ok=ok, status_code=status_code, text=text)
    response.json.return_value = payload
    return response


@pytest.mark.unit
@pytest.mark.platform
class TestInstagramScraperAPI:
    """Test the RapidAPI Instagram client."""

    def test_success(self):
        session = Mock()
        session.get.return_value = _response(payload={"data": [{
            "edge_media_to_caption": {"edges": [{"node": {"text": "My reel"}}]},
            "like_count": 120,
            "comment_count": "8",
            "video_view_count": 3400,
            "display_url": "https://cdn.example.com/reel.jpg",
            "owner": {"username": "creator"},
            "taken_at_timestamp": 1700000000,
        }]})

        stats = InstagramScraperAPI("key", host="scraper.example.com", session=session).fetch_reel_stats(REEL_URL)

        assert stats.fetched_successfully
        assert stats.shortcode == "C1a2B3c4D5e"
        assert stats.like_count == 120
        assert stats.comment_count == 8
        assert stats.play_count == 3400
        assert stats.caption == "My reel"
        assert stats.username == "creator"
        assert stats.posted_at is not None

        args, kwargs = session.get.call_args
        assert args[0] == "https://scraper.example.com/post"
        assert kwargs["params"] == {"shortcode": "C1a2B3c4D5e"}
        assert kwargs["headers"]["X-RapidAPI-Key"] == "key"
        assert kwargs["headers"]["X-RapidAPI-Host"] == "scraper.example.com"

    def test_non_2xx(self):
        session = Mock()
        session.get.return_value = _response(ok=False, status_code=429, text="x" * 500)

        stats = InstagramScraperAPI("key", session=session).fetch_reel_stats(REEL_URL)

        assert not stats.fetched_successfully
        assert stats.shortcode == "C1a2B3c4D5e"
        assert stats.error_message == f"API request failed with status 429. Details: {'x' * 200}"

    @pytest.mark.parametrize("payload", [{"data": []}, {"message": "ok"}, None, {"data": ["oops"]}])
    def test_missing_post_data(self, payload):
        session = Mock()
        session.get.return_value = _response(payload=payload)

        stats = InstagramScraperAPI("key", session=session).fetch_reel_stats(REEL_URL)

        assert not stats.fetched_successfully
        assert stats.error_message == "Unexpected API response structure. Post data not found."

    @pytest.mark.parametrize("post", [
        {"owner": "someone"},
        {"edge_media_to_caption": {"edges": ["x"]}},
        {"edge_media_to_caption": "x"},
        {"edge_media_to_caption": {"edges": [{"node": "x"}]}, "owner": ["creator"]},
        {"like_count": [1], "comment_count": {"n": 2}, "taken_at_timestamp": "soon", "display_url": 7},
    ])
    def test_malformed_post_fields(self, post):
        session = Mock()
        session.get.return_value = _response(payload={"data": [post]})

        stats = InstagramScraperAPI("key", session=session).fetch_reel_stats(REEL_URL)

        assert stats.fetched_successfully
        assert stats.caption is None
        assert stats.username is None
        assert stats.thumbnail_url is None
        assert stats.posted_at is None
        assert stats.like_count == 0

    def test_network_error(self):
        session = Mock()
        session.get.side_effect = requests.ConnectionError("connection refused")

        stats = InstagramScraperAPI("key", session=session).fetch_reel_stats(REEL_URL)

        assert not stats.fetched_successfully
        assert "connection refused" in stats.error_message

    def test_bad_url(self):
        session = Mock()

        stats = InstagramScraperAPI("key", session=session).fetch_reel_stats("https://example.com/video")

        assert not stats.fetched_successfully
        assert stats.shortcode == ""
        assert stats.error_message.startswith("Could not extract shortcode from URL")
        session.get.assert_not_called()

    def test_missing_key(self):
        stats = InstagramScraperAPI("", session=Mock()).fetch_reel_stats(REEL_URL)

        assert not stats.fetched_successfully
        assert stats.error_message == "RapidAPI key for Instagram scraper is not configured."


@pytest.mark.unit
@pytest.mark.platform
class TestGoogleAnalytics:
    """Test GA Data API reports and Measurement Protocol events."""

    def _service(self, response=None, error=None):
        service = Mock()
        execute = service.properties.return_value.runReport.return_value.execute
        if error:
            execute.side_effect = error
        else:
            execute.return_value = response
        return service

    def test_campaign_metrics(self):
        service = self._service({"rows": [{
            "dimensionValues": [{"value": "spring_sale"}],
            "metricValues": [
                {"value": "120"}, {"value": "150"}, {"value": "7"}, {"value": "0.42"}, {"value": "63.5"}
            ],
        }]})

        analytics = fetch_campaign_analytics(None, "123456", "spring_sale", service=service)

        assert analytics.error is None
        assert analytics.total_users == 120
        assert analytics.sessions == 150
        assert analytics.conversions == 7
        assert analytics.bounce_rate == pytest.approx(0.42)
        assert analytics.average_session_duration == pytest.approx(63.5)

        kwargs = service.properties.return_value.runReport.call_args.kwargs
        assert kwargs["property"] == "properties/123456"
        assert kwargs["body"]["dimensionFilter"]["filter"]["stringFilter"]["value"] == "spring_sale"

    def test_no_rows_is_zeros(self):
        analytics = fetch_campaign_analytics(None, "123456", "unknown", service=self._service({}))

        assert analytics.error is None
        assert analytics.total_users == 0
        assert analytics.sessions == 0

    def test_missing_credentials(self):
        analytics = fetch_campaign_analytics(None, "123456", "spring_sale")

        assert analytics.error
        assert analytics.sessions == 0

    def test_api_failure(self):
        analytics = fetch_campaign_analytics(
            None, "123456", "spring_sale", service=self._service(error=RuntimeError("permission denied"))
        )

        assert analytics.error == "Failed to fetch from Google Analytics: permission denied"

    def _utm_link(self):
        return SimpleNamespace(
            utm_source="newsletter",
            utm_medium="email",
            utm_campaign="spring_sale",
            generated_url="https://example.com/?utm_source=newsletter&utm_medium=email&utm_campaign=spring_sale",
        )

    def test_session_start_event(self):
        session = Mock()
        session.post.return_value = _response(ok=True, status_code=204)

        assert send_session_start_event(self._utm_link(), "secret", measurement_id="G-TEST", session=session)

        args, kwargs = session.post.call_args
        assert args[0] == MEASUREMENT_PROTOCOL_URL
        assert kwargs["params"] == {"measurement_id": "G-TEST", "api_secret": "secret"}
        event = kwargs["json"]["events"][0]
        assert event["name"] == "session_start"
        assert event["params"]["campaign_name"] == "spring_sale"
        assert kwargs["json"]["client_id"]

    def test_session_start_event_failures(self):
        session = Mock()
        session.post.return_value = _response(ok=False, status_code=400, text="bad")
        assert not send_session_start_event(self._utm_link(), "secret", measurement_id="G-TEST", session=session)

        session.post.side_effect = requests.Timeout("timed out")
        assert not send_session_start_event(self._utm_link(), "secret", measurement_id="G-TEST", session=session)

        assert not send_session_start_event(self._utm_link(), "", measurement_id="G-TEST", session=session)
