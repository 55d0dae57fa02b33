"""
Unit tests for link parsing and input validators.
"""

import pytest

from insightstream.utils.link_parsers import extract_youtube_video_id, extract_instagram_shortcode
from insightstream.utils.validators import is_valid_http_url, normalize_email


@pytest.mark.unit
class TestYouTubeVideoId:
    """Test YouTube video id extraction."""

    @pytest.mark.parametrize("url,expected", [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://youtube.com/watch?feature=share&v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://youtu.be/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://youtu.be/dQw4w9WgXcQ?t=42", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/embed/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/shorts/abcDEF12345", "abcDEF12345"),
        ("https://m.youtube.com/watch?v=dQw4w9WgXcQ&list=PL123", "dQw4w9WgXcQ"),
    ])
    def test_supported_formats(self, url, expected):
        assert extract_youtube_video_id(url) == expected

    @pytest.mark.parametrize("url", [
        "",
        None,
        "not a url",
        "https://vimeo.com/12345",
        "https://www.youtube.com/channel/UC123",
        "https://www.youtube.com/watch",
    ])
    def test_unsupported_returns_none(self, url):
        assert extract_youtube_video_id(url) is None


@pytest.mark.unit
class TestInstagramShortcode:
    """Test Instagram shortcode extraction."""

    @pytest.mark.parametrize("url,expected", [
        ("https://www.instagram.com/reel/C1a2B3c4D5e/", "C1a2B3c4D5e"),
        ("https://www.instagram.com/reels/C1a2B3c4D5e/", "C1a2B3c4D5e"),
        ("https://www.instagram.com/p/Cx_y-Z9/?igshid=abc", "Cx_y-Z9"),
    ])
    def test_supported_formats(self, url, expected):
        assert extract_instagram_shortcode(url) == expected

    @pytest.mark.parametrize("url", [
        "",
        "instagram.com/reel/C1a2B3c4D5e",
        "https://www.instagram.com/someuser/",
        "https://www.instagram.com/stories/someuser/123/",
    ])
    def test_unsupported_returns_none(self, url):
        assert extract_instagram_shortcode(url) is None


@pytest.mark.unit
class TestValidators:
    """Test input helpers."""

    def test_http_urls(self):
        assert is_valid_http_url("https://example.com/path")
        assert is_valid_http_url("http://example.com")
        assert not is_valid_http_url("ftp://example.com")
        assert not is_valid_http_url("example.com")
        assert not is_valid_http_url("")

    def test_normalize_email(self):
        assert normalize_email("  User@Example.COM ") == "user@example.com"
        assert normalize_email(None) == ""
