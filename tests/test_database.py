"""
Tests for database.py - schema and connection management.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from articlefill.database import Article, get_session, init_database

from conftest import sqlite_url


class TestDatabaseInit:
    """Test database initialization."""

    def test_init_creates_database_file(self, tmp_path):
        """init_database creates the database file."""
        db_path = tmp_path / "test.db"
        assert not db_path.exists()

        init_database(sqlite_url(db_path)).dispose()

        assert db_path.exists()

    def test_init_creates_parent_directories(self, tmp_path):
        """init_database creates parent directories if missing."""
        db_path = tmp_path / "nested" / "dir" / "test.db"

        init_database(sqlite_url(db_path)).dispose()

        assert db_path.exists()

    def test_init_creates_tables(self, tmp_path):
        engine = init_database(sqlite_url(tmp_path / "test.db"))
        session = get_session(engine)

        assert session.query(Article).count() == 0

        session.close()
        engine.dispose()


class TestArticleModel:

    @pytest.fixture
    def db_session(self, tmp_path):
        """Create a temporary database and return a session."""
        engine = init_database(sqlite_url(tmp_path / "test.db"))
        session = get_session(engine)
        yield session
        session.close()
        engine.dispose()

    def test_content_defaults_to_null(self, db_session):
        db_session.add(Article(id="abc123", mp_id="MP_WXS_1", title="Weekly", publish_time=100))
        db_session.commit()

        article = db_session.query(Article).filter_by(id="abc123").one()
        assert article.content is None
        assert article.pic_url == ""
        assert article.created_at is not None

    def test_required_fields(self, db_session):
        db_session.add(Article(id="abc123"))

        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_duplicate_id_fails(self, db_session):
        db_session.add(Article(id="abc123", mp_id="MP_WXS_1", title="One", publish_time=100))
        db_session.commit()

        db_session.add(Article(id="abc123", mp_id="MP_WXS_2", title="Two", publish_time=200))
        with pytest.raises(IntegrityError):
            db_session.commit()
