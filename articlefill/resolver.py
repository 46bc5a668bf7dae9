"""
Resolve the full content for one article id.

Fetch and parse failures never escape: the caller always gets a Resolution
carrying either the sanitized fragment or the fallback text, plus the error
that caused the fallback.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from .config import DEFAULT_FALLBACK_TEXT, DEFAULT_URL_TEMPLATE
from .errors import NetworkError, ParseError
from .fetcher import Fetcher
from .logger import StructuredLogger, get_logger
from .sanitizer import sanitize


@dataclass(frozen=True)
class Resolution:
    article_id: str
    url: str
    content: str
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ContentResolver:
    def __init__(
        self,
        fetcher: Fetcher,
        sanitize_html: Callable[[str], str] = sanitize,
        url_template: str = DEFAULT_URL_TEMPLATE,
        fallback_text: str = DEFAULT_FALLBACK_TEXT,
        logger: Optional[StructuredLogger] = None,
    ):
        self.fetcher = fetcher
        self.sanitize_html = sanitize_html
        self.url_template = url_template
        self.fallback_text = fallback_text
        self.logger = logger or get_logger()

    def build_url(self, article_id: str) -> str:
        return self.url_template.format(id=article_id)

    def _fallback(self, article_id: str, url: str, error: Exception) -> Resolution:
        return Resolution(article_id=article_id, url=url, content=self.fallback_text, error=error)

    def resolve(self, article_id: str) -> Resolution:
        """Fetch and sanitize the article page for article_id."""
        url = self.build_url(article_id)
        try:
            html = self.fetcher.fetch(url)
            self.logger.debug("Cleaning HTML", article_id=article_id, bytes=len(html))
            content = self.sanitize_html(html)
        except NetworkError as e:
            self.logger.error(
                "Failed to fetch article content",
                article_id=article_id, url=url, error=str(e.cause or e),
            )
            return self._fallback(article_id, url, e)
        except ParseError as e:
            self.logger.error(
                "Failed to parse article content",
                article_id=article_id, url=url, error=str(e),
            )
            return self._fallback(article_id, url, e)
        except Exception as e:
            self.logger.error(
                "Unexpected error resolving article content",
                article_id=article_id, url=url,
                error_type=type(e).__name__, error=str(e),
            )
            return self._fallback(article_id, url, e)

        return Resolution(article_id=article_id, url=url, content=content)
