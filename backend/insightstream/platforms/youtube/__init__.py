"""YouTube Data API client."""
