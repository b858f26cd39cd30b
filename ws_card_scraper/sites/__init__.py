"""Site-specific page extractors."""
