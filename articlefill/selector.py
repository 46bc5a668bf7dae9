"""Pick the next batch of articles that still need their content."""

import time
from typing import Callable, List, Optional

from .config import MAX_BATCH_LIMIT
from .logger import StructuredLogger, get_logger
from .storage import ArticleStore, ArticleSummary

SECONDS_PER_DAY = 86400


class BatchSelector:
    def __init__(
        self,
        store: ArticleStore,
        clock: Callable[[], float] = time.time,
        logger: Optional[StructuredLogger] = None,
    ):
        self.store = store
        self.clock = clock
        self.logger = logger or get_logger()

    def cutoff(self, since_days: Optional[float]) -> Optional[int]:
        """Epoch seconds that publish_time must exceed, or None for no window."""
        if since_days is None:
            return None
        return int(self.clock() - since_days * SECONDS_PER_DAY)

    def select(self, limit: int, since_days: Optional[float] = None) -> List[ArticleSummary]:
        """
        Articles with no content, newest first, at most limit of them.

        Raises:
            StorageError: If the store cannot be queried
        """
        bounded = max(1, min(limit, MAX_BATCH_LIMIT))
        if bounded != limit:
            self.logger.warning("Batch limit out of range, clamped", requested=limit, limit=bounded)

        published_after = self.cutoff(since_days)
        self.logger.info(
            "Selecting articles without content",
            limit=bounded, since_days=since_days, published_after=published_after,
        )
        return self.store.find_missing_content(bounded, published_after=published_after)
