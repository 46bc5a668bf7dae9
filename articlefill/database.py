"""
Database schema and connection management.

Uses SQLAlchemy; any URL works (SQLite by default, MySQL/Postgres in
production).
"""

from datetime import datetime
from pathlib import Path

from sqlalchemy import create_engine, Column, Integer, String, Text, DateTime
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class Article(Base):
    """Article record; content stays NULL until the backfill fills it in."""

    __tablename__ = "articles"

    id = Column(String, primary_key=True)
    mp_id = Column(String, nullable=False)  # source account the article came from
    title = Column(String, nullable=False)
    pic_url = Column(String, nullable=False, default="")
    publish_time = Column(Integer, nullable=False, index=True)  # epoch seconds
    content = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


def create_db_engine(database_url: str) -> Engine:
    """
    Create an engine, making the parent directory for SQLite files.

    Args:
        database_url: SQLAlchemy database URL
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url)


def init_database(database_url: str) -> Engine:
    """
    Initialize database and create tables.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        Engine bound to the database
    """
    engine = create_db_engine(database_url)
    Base.metadata.create_all(engine)
    return engine


def get_session(engine: Engine):
    """
    Get database session.

    Args:
        engine: Engine from create_db_engine/init_database

    Returns:
        SQLAlchemy session
    """
    Session = sessionmaker(bind=engine)
    return Session()
