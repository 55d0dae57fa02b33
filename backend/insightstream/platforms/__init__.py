"""Third-party platform clients."""
