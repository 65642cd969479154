"""Image hosting and deduplication."""
