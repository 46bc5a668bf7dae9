"""
Backfill driver: one finite run over one batch of articles.

Articles are handled strictly one at a time. After every Nth successful
write the run pauses so the sustained request rate stays low enough not
to get the crawler blocked upstream.
"""

from dataclasses import dataclass
from typing import Optional

from .config import ON_FAILURE_PERSIST, ON_FAILURE_POLICIES, ON_FAILURE_RETAIN
from .errors import StorageError
from .logger import StructuredLogger, get_logger
from .pacing import Pacer
from .resolver import ContentResolver
from .selector import BatchSelector
from .storage import ArticleStore, ArticleSummary

# Per-record outcomes
WRITTEN = "written"     # sanitized content stored
FALLBACK = "fallback"   # fallback text stored
RETAINED = "retained"   # resolution failed, content left NULL for a later run
FAILED = "failed"       # storage write failed
INTERRUPTED = "interrupted"  # shutdown during the fetch, content left NULL


@dataclass
class BatchRun:
    limit: int
    total: int = 0
    success_count: int = 0
    fail_count: int = 0
    fallback_count: int = 0
    skipped_count: int = 0
    pauses: int = 0
    interrupted: bool = False

    @property
    def processed(self) -> int:
        return self.success_count + self.fail_count + self.skipped_count

    @property
    def may_have_more(self) -> bool:
        """A full batch means more candidates may be waiting."""
        return self.total > 0 and self.total >= self.limit


class BackfillDriver:
    def __init__(
        self,
        selector: BatchSelector,
        resolver: ContentResolver,
        store: ArticleStore,
        pacer: Pacer,
        limit: int = 100,
        since_days: Optional[float] = None,
        pause_every: int = 5,
        pause_seconds: float = 30.0,
        on_failure: str = ON_FAILURE_PERSIST,
        logger: Optional[StructuredLogger] = None,
    ):
        if pause_every < 1:
            raise ValueError("pause_every must be at least 1")
        if on_failure not in ON_FAILURE_POLICIES:
            raise ValueError(f"Unknown failure policy: {on_failure}")
        self.selector = selector
        self.resolver = resolver
        self.store = store
        self.pacer = pacer
        self.limit = limit
        self.since_days = since_days
        self.pause_every = pause_every
        self.pause_seconds = pause_seconds
        self.on_failure = on_failure
        self.logger = logger or get_logger()

    def process(self, article: ArticleSummary) -> str:
        """Resolve and store content for one article; returns the outcome."""
        resolution = self.resolver.resolve(article.id)

        # A shutdown cuts retries short; the fetch never really gave up
        if not resolution.ok and self.pacer.cancelled:
            self.logger.warning(
                "Fetch interrupted by shutdown, leaving content empty",
                article_id=article.id, url=resolution.url,
            )
            return INTERRUPTED

        if not resolution.ok and self.on_failure == ON_FAILURE_RETAIN:
            self.logger.warning(
                "Leaving content empty for a later run",
                article_id=article.id, url=resolution.url,
            )
            return RETAINED

        try:
            self.store.write_content(article.id, resolution.content)
        except StorageError as e:
            self.logger.error(
                "Failed to store article content",
                article_id=article.id, url=resolution.url, error=str(e),
            )
            return FAILED

        return WRITTEN if resolution.ok else FALLBACK

    def run(self) -> BatchRun:
        """
        Select a batch and process it.

        Raises:
            StorageError: If the batch cannot be selected
        """
        articles = self.selector.select(self.limit, self.since_days)
        run = BatchRun(limit=self.limit, total=len(articles))
        self.logger.info(f"Found {run.total} articles without content")

        if not articles:
            self.logger.info("Nothing to fill, done")
            return run

        for index, article in enumerate(articles, start=1):
            if self.pacer.cancelled:
                run.interrupted = True
                self.logger.warning(
                    "Run interrupted",
                    processed=run.processed, remaining=run.total - index + 1,
                )
                break

            self.logger.info(f"Processing article [{index}/{run.total}]: {article.title} ({article.id})")
            outcome = self.process(article)

            if outcome == INTERRUPTED:
                run.interrupted = True
                self.logger.warning(
                    "Run interrupted",
                    processed=run.processed, remaining=run.total - index + 1,
                )
                break
            if outcome == FAILED:
                run.fail_count += 1
                continue
            if outcome == RETAINED:
                run.skipped_count += 1
                continue

            run.success_count += 1
            if outcome == FALLBACK:
                run.fallback_count += 1
            self.logger.info(f"Article stored: {article.title}", article_id=article.id, outcome=outcome)

            if run.success_count % self.pause_every == 0 and index < run.total:
                run.pauses += 1
                self.logger.info(
                    f"Stored {run.success_count} articles, pausing {self.pause_seconds:g}s..."
                )
                self.pacer.sleep(self.pause_seconds)

        self.report(run)
        return run

    def report(self, run: BatchRun) -> None:
        self.logger.info(
            f"=== Done! success: {run.success_count}, failed: {run.fail_count} ===",
            total=run.total,
            processed=run.processed,
            fallback=run.fallback_count,
            skipped=run.skipped_count,
            pauses=run.pauses,
            interrupted=run.interrupted,
        )
        if run.may_have_more:
            self.logger.info("More articles may need content, run again")
