"""
Runtime settings for the backfill job.

All knobs come from environment variables (optionally loaded from .env)
and can be overridden per invocation on the command line.
"""

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

MAX_BATCH_LIMIT = 1000

DEFAULT_DATABASE_URL = "sqlite:///data/articles.db"
DEFAULT_URL_TEMPLATE = "https://mp.weixin.qq.com/s/{id}"
DEFAULT_FALLBACK_TEXT = "获取全文失败，请重试~"

# Failure policies for records whose content could not be resolved
ON_FAILURE_PERSIST = "persist"  # write the fallback text; record is done
ON_FAILURE_RETAIN = "retain"    # leave content null; a later run retries
ON_FAILURE_POLICIES = (ON_FAILURE_PERSIST, ON_FAILURE_RETAIN)


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    batch_limit: int = 100
    window_days: Optional[float] = None
    pause_seconds: float = 30.0
    pause_every: int = 5
    on_failure: str = ON_FAILURE_PERSIST
    url_template: str = DEFAULT_URL_TEMPLATE
    fallback_text: str = DEFAULT_FALLBACK_TEXT
    request_timeout: float = 8.0
    max_attempts: int = 3
    retry_base_delay: float = 2.0
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied, then validated."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        updated = replace(self, **changes)
        validate_settings(updated)
        return updated


# Settings that match the scheduled job: bigger batches over recent articles
# with a longer cool-down between groups of requests.
CRON_PRESET = {
    "batch_limit": MAX_BATCH_LIMIT,
    "window_days": 3.0,
    "pause_seconds": 40.0,
}


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _get_float(env: Mapping[str, str], name: str, default: Optional[float]) -> Optional[float]:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def validate_settings(settings: Settings) -> None:
    """Raise ValueError if any setting is out of range."""
    if not 1 <= settings.batch_limit <= MAX_BATCH_LIMIT:
        raise ValueError(f"batch limit must be between 1 and {MAX_BATCH_LIMIT}")
    if settings.window_days is not None and settings.window_days <= 0:
        raise ValueError("window days must be positive")
    if settings.pause_seconds < 0:
        raise ValueError("pause seconds must not be negative")
    if settings.pause_every < 1:
        raise ValueError("pause every must be at least 1")
    if settings.on_failure not in ON_FAILURE_POLICIES:
        raise ValueError(
            f"on_failure must be one of {', '.join(ON_FAILURE_POLICIES)}, got {settings.on_failure!r}"
        )
    if "{id}" not in settings.url_template:
        raise ValueError("url template must contain an {id} placeholder")


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env: Mapping to read from (defaults to os.environ)

    Returns:
        Validated Settings

    Raises:
        ValueError: If a variable has an invalid value
    """
    if env is None:
        env = os.environ

    settings = Settings(
        database_url=env.get("ARTICLEFILL_DATABASE_URL") or DEFAULT_DATABASE_URL,
        batch_limit=_get_int(env, "ARTICLEFILL_BATCH_LIMIT", 100),
        window_days=_get_float(env, "ARTICLEFILL_WINDOW_DAYS", None),
        pause_seconds=_get_float(env, "ARTICLEFILL_PAUSE_SECONDS", 30.0),
        pause_every=_get_int(env, "ARTICLEFILL_PAUSE_EVERY", 5),
        on_failure=(env.get("ARTICLEFILL_ON_FAILURE") or ON_FAILURE_PERSIST).strip().lower(),
        url_template=env.get("ARTICLEFILL_URL_TEMPLATE") or DEFAULT_URL_TEMPLATE,
        fallback_text=env.get("ARTICLEFILL_FALLBACK_TEXT") or DEFAULT_FALLBACK_TEXT,
        log_level=(env.get("ARTICLEFILL_LOG_LEVEL") or "INFO").upper(),
        log_dir=env.get("ARTICLEFILL_LOG_DIR") or None,
    )
    validate_settings(settings)
    return settings
