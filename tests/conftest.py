"""
Pytest configuration and shared fixtures.
"""

import pytest
import requests
from typing import List

from articlefill.database import Article, get_session, init_database
from articlefill.logger import get_logger, reset_logger
from articlefill.pacing import Pacer
from articlefill.storage import ArticleStore


def sqlite_url(db_path) -> str:
    return f"sqlite:///{db_path}"


def make_response(status: int = 200, body: str = "", url: str = "https://mp.weixin.qq.com/s/x") -> requests.Response:
    """Build a real requests.Response without touching the network."""
    resp = requests.Response()
    resp.status_code = status
    resp._content = body.encode("utf-8")
    resp.headers["content-type"] = "text/html; charset=utf-8"
    resp.encoding = "utf-8"
    resp.url = url
    resp.reason = "OK" if status < 400 else "Error"
    return resp


class FakeSession(requests.Session):
    """Session that replays scripted outcomes instead of making requests.

    Each outcome is either an exception instance (raised), a Response
    (returned) or a string (returned as a 200 response body). The last
    outcome repeats once the script runs out.
    """

    def __init__(self, outcomes):
        super().__init__()
        self.outcomes = list(outcomes)
        self.calls: List[dict] = []

    def get(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        index = min(len(self.calls) - 1, len(self.outcomes) - 1)
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, str):
            return make_response(200, outcome, url=url)
        return outcome


class RecordingPacer(Pacer):
    """Pacer that records requested pauses instead of sleeping."""

    def __init__(self):
        super().__init__()
        self.sleeps: List[float] = []

    def sleep(self, seconds: float) -> bool:
        self.sleeps.append(seconds)
        return not self.cancelled


@pytest.fixture(autouse=True)
def quiet_logger():
    """Give every test a fresh console-only logger."""
    reset_logger()
    logger = get_logger(name="articlefill-test", level="DEBUG")
    yield logger
    reset_logger()


@pytest.fixture
def sample_article_html() -> str:
    """Upstream article page with a lazily loaded, hidden body."""
    return """
    <html>
    <head><title>Weekly notes</title></head>
    <body>
        <div id="js_top_ad_area"><p>Advertisement</p></div>
        <div class="rich_media_content" id="js_content" style="visibility: hidden;">
            <p style="opacity: 0 !important;">First paragraph</p>
            <p><img data-src="https://mmbiz.qpic.cn/a.png" style="opacity: 0;"></p>
            <p>Second   paragraph</p>
        </div>
        <div class="rich_media_tool"><a href="#">Read more</a></div>
    </body>
    </html>
    """


@pytest.fixture
def db_url(tmp_path) -> str:
    """Initialized, empty SQLite database URL."""
    url = sqlite_url(tmp_path / "articles.db")
    init_database(url).dispose()
    return url


def add_articles(db_url: str, rows) -> None:
    """Insert (id, publish_time, content) rows."""
    engine = init_database(db_url)
    session = get_session(engine)
    for article_id, publish_time, content in rows:
        session.add(Article(
            id=article_id,
            mp_id="MP_WXS_1",
            title=f"Title {article_id}",
            pic_url="https://mmbiz.qpic.cn/cover.png",
            publish_time=publish_time,
            content=content,
        ))
    session.commit()
    session.close()
    engine.dispose()


def read_content(db_url: str, article_id: str):
    engine = init_database(db_url)
    session = get_session(engine)
    try:
        return session.query(Article).filter_by(id=article_id).one().content
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def store(db_url):
    with ArticleStore(db_url) as s:
        yield s
