"""
Tests for the daily analytics refresh with mocked vendor clients.
"""

import pytest
from datetime import datetime
from unittest.mock import Mock, patch
from sqlalchemy.orm import Session

from insightstream.models.links import COLLECTION_YOUTUBE, COLLECTION_INSTAGRAM
from insightstream.models.platform_schemas import InstagramReelStats
from insightstream.models.user import User
from insightstream.platforms.errors import PlatformAPIError
from insightstream.services import analytics_store, link_service
from insightstream.services.refresh_service import (
    refresh_user_youtube,
    refresh_user_instagram,
    run_daily_refresh,
)

REEL_A = "https://www.instagram.com/reel/AAA111/"
REEL_B = "https://www.instagram.com/reel/BBB222/"


def _reel_stats(url, shortcode, likes=10, plays=100):
    return InstagramReelStats(
        shortcode=shortcode,
        original_url=url,
        like_count=likes,
        comment_count=2,
        play_count=plays,
        caption="A caption",
        username="creator",
        thumbnail_url="https://cdn.example.com/thumb.jpg",
        posted_at=datetime(2024, 5, 1, 12, 0, 0),
        fetched_successfully=True,
    )


@pytest.mark.unit
@pytest.mark.platform
class TestRefreshUserYouTube:
    """Test per-user YouTube refresh."""

    def test_stores_merged_snapshots(self, test_db: Session, test_user: User, mock_youtube_client: Mock):
        link_service.assign_links(test_db, test_user.id, COLLECTION_YOUTUBE, [
            "https://youtu.be/abc123",
            "https://www.youtube.com/watch?v=abc123",
            "https://www.youtube.com/watch?v=def456",
        ])
        analytics_store.save_youtube_video(test_db, test_user.id, "abc123", {
            "title": "Old title", "description": "Kept description", "views": 1
        })
        mock_youtube_client.get_video_statistics.return_value[0]["description"] = None

        result = refresh_user_youtube(test_db, test_user.id, mock_youtube_client)

        mock_youtube_client.get_video_statistics.assert_called_once_with(["abc123", "def456"])
        assert result.updated == 2
        assert result.failed == 0

        first = analytics_store.get_youtube_video(test_db, test_user.id, "abc123")
        assert first.title == "First Video"
        assert first.views == 1000
        assert first.description == "Kept description"
        assert analytics_store.get_youtube_video(test_db, test_user.id, "def456").likes == 50

    def test_malformed_items_are_skipped(self, test_db: Session, test_user: User):
        link_service.assign_links(test_db, test_user.id, COLLECTION_YOUTUBE, ["https://youtu.be/abc123"])
        client = Mock()
        client.get_video_statistics.return_value = [None, {"title": "no id"}, {"id": "abc123", "views": 7}]

        result = refresh_user_youtube(test_db, test_user.id, client)

        assert result.updated == 1
        assert result.failed == 2
        assert analytics_store.get_youtube_video(test_db, test_user.id, "abc123").views == 7

    def test_unreturned_videos_are_failures(self, test_db: Session, test_user: User):
        link_service.assign_links(test_db, test_user.id, COLLECTION_YOUTUBE, [
            "https://youtu.be/abc123", "https://youtu.be/gone999"
        ])
        client = Mock()
        client.get_video_statistics.return_value = [{"id": "abc123", "views": 7}]

        result = refresh_user_youtube(test_db, test_user.id, client)

        assert result.updated == 1
        assert result.failed == 1
        assert len(result.errors) == 1
        assert result.errors[0].startswith("gone999:")
        assert analytics_store.get_youtube_video(test_db, test_user.id, "gone999") is None

    def test_api_failure_is_reported_not_raised(self, test_db: Session, test_user: User):
        link_service.assign_links(test_db, test_user.id, COLLECTION_YOUTUBE, ["https://youtu.be/abc123"])
        client = Mock()
        client.get_video_statistics.side_effect = PlatformAPIError("youtube", "quota exceeded", status_code=403)

        result = refresh_user_youtube(test_db, test_user.id, client)

        assert result.updated == 0
        assert result.failed == 1
        assert "quota exceeded" in result.errors[0]

    def test_no_links_makes_no_calls(self, test_db: Session, test_user: User, mock_youtube_client: Mock):
        result = refresh_user_youtube(test_db, test_user.id, mock_youtube_client)

        assert result.links == 0
        mock_youtube_client.get_video_statistics.assert_not_called()


@pytest.mark.unit
@pytest.mark.platform
class TestRefreshUserInstagram:
    """Test per-user Instagram refresh."""

    def test_success_and_failure_per_link(self, test_db: Session, test_user: User):
        link_service.assign_links(test_db, test_user.id, COLLECTION_INSTAGRAM, [REEL_A, REEL_B])
        analytics_store.save_instagram_post(test_db, test_user.id, "BBB222", {
            "reel_url": REEL_B, "likes": 40, "views": 4000
        })

        client = Mock()
        client.fetch_reel_stats.side_effect = [
            _reel_stats(REEL_A, "AAA111"),
            InstagramReelStats(
                shortcode="BBB222",
                original_url=REEL_B,
                fetched_successfully=False,
                error_message="API request failed with status 429. Details: rate limited",
            ),
        ]

        result = refresh_user_instagram(test_db, test_user.id, client)

        assert result.updated == 1
        assert result.failed == 1

        reel_a = analytics_store.get_instagram_post(test_db, test_user.id, "AAA111")
        assert reel_a.likes == 10
        assert reel_a.views == 100
        assert reel_a.username == "creator"
        assert reel_a.error_message is None

        reel_b = analytics_store.get_instagram_post(test_db, test_user.id, "BBB222")
        assert reel_b.likes == 40
        assert reel_b.views == 4000
        assert "429" in reel_b.error_message

    def test_success_clears_previous_error(self, test_db: Session, test_user: User):
        link_service.assign_links(test_db, test_user.id, COLLECTION_INSTAGRAM, [REEL_A])
        analytics_store.save_instagram_post(test_db, test_user.id, "AAA111", {
            "reel_url": REEL_A, "error_message": "old failure"
        })
        client = Mock()
        client.fetch_reel_stats.return_value = _reel_stats(REEL_A, "AAA111")

        with patch.object(test_db, "commit", wraps=test_db.commit) as commit:
            refresh_user_instagram(test_db, test_user.id, client)

        assert commit.call_count == 1
        assert analytics_store.get_instagram_post(test_db, test_user.id, "AAA111").error_message is None

    def test_client_exception_does_not_stop_loop(self, test_db: Session, test_user: User):
        link_service.assign_links(test_db, test_user.id, COLLECTION_INSTAGRAM, [REEL_A, REEL_B])
        client = Mock()
        client.fetch_reel_stats.side_effect = [RuntimeError("unexpected"), _reel_stats(REEL_B, "BBB222")]

        result = refresh_user_instagram(test_db, test_user.id, client)

        assert result.failed == 1
        assert result.updated == 1
        assert analytics_store.get_instagram_post(test_db, test_user.id, "BBB222") is not None


@pytest.mark.integration
class TestRunDailyRefresh:
    """Test the full batch loop."""

    def test_processes_all_users(
        self, test_db: Session, test_user: User, test_user2: User, mock_youtube_client: Mock
    ):
        link_service.assign_links(test_db, test_user.id, COLLECTION_YOUTUBE, ["https://youtu.be/abc123"])
        link_service.assign_links(test_db, test_user2.id, COLLECTION_INSTAGRAM, [REEL_A])

        instagram = Mock()
        instagram.fetch_reel_stats.return_value = _reel_stats(REEL_A, "AAA111")

        summary = run_daily_refresh(test_db, youtube_client=mock_youtube_client, instagram_client=instagram)

        assert summary.users_processed == 2
        assert summary.videos_updated == 2
        assert summary.reels_updated == 1
        assert summary.reels_failed == 0
        assert summary.finished_at is not None

    def test_one_user_failing_does_not_stop_others(
        self, test_db: Session, test_user: User, test_user2: User
    ):
        link_service.assign_links(test_db, test_user.id, COLLECTION_YOUTUBE, ["https://youtu.be/abc123"])
        link_service.assign_links(test_db, test_user2.id, COLLECTION_YOUTUBE, ["https://youtu.be/def456"])

        youtube = Mock()
        youtube.get_video_statistics.side_effect = [
            ValueError("malformed payload"),
            [{"id": "def456", "views": 3}],
        ]

        summary = run_daily_refresh(test_db, youtube_client=youtube, instagram_client=Mock(fetch_reel_stats=Mock()))

        assert summary.users_processed == 2
        assert summary.videos_updated == 1
        assert any("malformed payload" in error for error in summary.errors)

    def test_missing_keys_skip_platforms(self, test_db: Session, test_user: User):
        link_service.assign_links(test_db, test_user.id, COLLECTION_YOUTUBE, ["https://youtu.be/abc123"])

        summary = run_daily_refresh(test_db)

        assert summary.users_processed == 1
        assert summary.videos_updated == 0
        assert any("YouTube API key is not configured" in error for error in summary.errors)
        assert any("Instagram key is not configured" in error for error in summary.errors)
