"""WordPress taxonomy service: resolves category/tag names for auto-published posts."""
