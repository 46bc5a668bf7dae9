"""Backfill full article content for stored records missing a body."""

__version__ = "0.1.0"
