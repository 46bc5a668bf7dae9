"""
Article store.

Responsibilities:
- Filtered, ordered, limited read of articles with no content.
- Point write of content keyed by article id, one transaction per write.

Non-Responsibilities:
- No fetching or cleaning.
- No schema migration.

Invariant:
Content written by this store is never NULL.
"""

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from .database import Article, create_db_engine, get_session
from .errors import StorageError


@dataclass(frozen=True)
class ArticleSummary:
    id: str
    title: str
    publish_time: int


class ArticleStore:
    """Access to the articles table for one backfill run."""

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        if database_url is None and engine is None:
            raise ValueError("database_url or engine is required")
        self.database_url = database_url
        self._owns_engine = engine is None
        self._engine = engine

    def open(self) -> "ArticleStore":
        if self._engine is None:
            try:
                self._engine = create_db_engine(self.database_url)
            except (SQLAlchemyError, OSError) as e:
                raise StorageError(f"Cannot open database: {e}") from e
        return self

    def close(self) -> None:
        if self._engine is not None and self._owns_engine:
            self._engine.dispose()
            self._engine = None

    def __enter__(self) -> "ArticleStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _session(self):
        if self._engine is None:
            raise StorageError("Article store is not open")
        return get_session(self._engine)

    def find_missing_content(self, limit: int, published_after: Optional[int] = None) -> List[ArticleSummary]:
        """
        Articles with NULL content, newest first.

        Args:
            limit: Maximum number of rows
            published_after: Only articles with publish_time strictly greater

        Raises:
            StorageError: If the query fails
        """
        session = self._session()
        try:
            query = (
                session.query(Article.id, Article.title, Article.publish_time)
                .filter(Article.content.is_(None))
            )
            if published_after is not None:
                query = query.filter(Article.publish_time > published_after)
            rows = (
                query.order_by(Article.publish_time.desc(), Article.id.asc())
                .limit(limit)
                .all()
            )
            return [ArticleSummary(id=r.id, title=r.title, publish_time=r.publish_time) for r in rows]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to query articles: {e}") from e
        finally:
            session.close()

    def write_content(self, article_id: str, content: str) -> None:
        """
        Store content for one article.

        Raises:
            ValueError: If content is None
            StorageError: If the write fails or the article no longer exists
        """
        if content is None:
            raise ValueError("content must not be None")
        session = self._session()
        try:
            updated = (
                session.query(Article)
                .filter(Article.id == article_id)
                .update({Article.content: content}, synchronize_session=False)
            )
            if updated == 0:
                session.rollback()
                raise StorageError(f"Article not found: {article_id}")
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to write content for {article_id}: {e}") from e
        finally:
            session.close()
