"""
HTTP fetching of upstream article pages.

Requests go out with a browser-like header profile, an 8 second timeout and
up to three attempts spaced by a linearly growing delay.
"""

from typing import Callable, Optional

import requests

from .errors import NetworkError
from .logger import StructuredLogger, get_logger
from .retry import RetryError, linear_backoff

DEFAULT_TIMEOUT = 8.0
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 2.0

BROWSER_HEADERS = {
    "accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,"
        "image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.9"
    ),
    "accept-encoding": "gzip, deflate",
    "accept-language": "en-US,en;q=0.9",
    "cache-control": "max-age=0",
    "sec-ch-ua": '" Not A;Brand";v="99", "Chromium";v="101", "Google Chrome";v="101"',
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": '"macOS"',
    "sec-fetch-dest": "document",
    "sec-fetch-mode": "navigate",
    "sec-fetch-site": "none",
    "sec-fetch-user": "?1",
    "upgrade-insecure-requests": "1",
    "user-agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/101.0.4951.64 Safari/537.36"
    ),
}


class Fetcher:
    """Fetch raw HTML for a URL, retrying transient failures."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
        sleep: Optional[Callable[[float], Optional[bool]]] = None,
        on_retry: Optional[Callable] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            session: HTTP session to use; one is created (and owned) if omitted
            timeout: Per-request timeout in seconds
            max_attempts: Total attempts per URL, including the first
            base_delay: Backoff unit; retry N waits base_delay * N seconds
            sleep: Pause function for backoff (e.g. Pacer.sleep)
            on_retry: Callback(attempt, exception, delay) before each retry;
                defaults to logging a warning
            logger: Logger for retry notices and metrics
        """
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.logger = logger or get_logger()
        self._current_url: Optional[str] = None

        retry_kwargs = {}
        if sleep is not None:
            retry_kwargs["sleep"] = sleep
        self._get_with_retry = linear_backoff(
            max_attempts=max_attempts,
            base_delay=base_delay,
            exceptions=(requests.exceptions.RequestException,),
            on_retry=on_retry or self._log_retry,
            **retry_kwargs,
        )(self._get_once)

    def _log_retry(self, attempt: int, exception: Exception, delay: float) -> None:
        self.logger.record_retry()
        self.logger.warning(
            f"Retrying {self._current_url}",
            attempt=attempt,
            delay=delay,
            error=str(exception),
        )

    def _get_once(self, url: str) -> str:
        resp = self.session.get(url, headers=BROWSER_HEADERS, timeout=self.timeout)
        resp.raise_for_status()
        # requests falls back to ISO-8859-1 for text/* without a charset
        if "charset" not in resp.headers.get("content-type", "").lower():
            resp.encoding = resp.apparent_encoding
        return resp.text

    def fetch(self, url: str) -> str:
        """
        Fetch a page and return its body as text.

        Raises:
            NetworkError: When every attempt failed (timeout, connection
                error or a 4xx/5xx status)
        """
        self.logger.record_fetch_attempt()
        self._current_url = url
        self.logger.debug("Fetching URL", url=url)
        try:
            html = self._get_with_retry(url)
        except RetryError as e:
            cause = e.last_exception
            self.logger.record_fetch_failure(type(cause).__name__ if cause else "RetryError")
            raise NetworkError(url, cause) from e
        finally:
            self._current_url = None
        self.logger.record_fetch_success()
        return html

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
