"""Instagram scraper client."""
