"""Google Analytics clients."""
