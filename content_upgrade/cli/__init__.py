"""Command line interface for content_upgrade."""
