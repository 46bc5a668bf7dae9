"""
Error taxonomy for the content backfill pipeline.

NetworkError and ParseError are absorbed by the content resolver and turned
into fallback content. StorageError is fatal when raised while selecting a
batch and recorded per-record when raised while writing content.
"""

from typing import Optional


class ArticleFillError(Exception):
    """Base class for pipeline errors."""
    pass


class NetworkError(ArticleFillError):
    """Raised when a URL could not be fetched after all retry attempts."""

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to fetch {url}{detail}")


class ParseError(ArticleFillError):
    """Raised when fetched markup cannot be parsed at all."""
    pass


class StorageError(ArticleFillError):
    """Raised when the article store cannot be read or written."""
    pass
