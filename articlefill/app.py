import argparse
from typing import Optional

from . import __version__
from .backfill import BackfillDriver, BatchRun
from .config import CRON_PRESET, ON_FAILURE_POLICIES, Settings, load_settings
from .database import init_database
from .env import load_env
from .errors import StorageError
from .fetcher import Fetcher
from .logger import get_logger, reset_logger
from .pacing import Pacer
from .resolver import ContentResolver
from .selector import BatchSelector
from .storage import ArticleStore


def run_backfill(settings: Settings, pacer: Optional[Pacer] = None, session=None) -> BatchRun:
    """
    Run one backfill over one batch.

    The HTTP session and database engine are opened here and released
    when the run ends, whatever the outcome.

    Raises:
        StorageError: If the database cannot be opened or queried
    """
    logger = get_logger()
    pacer = pacer or Pacer()

    with ArticleStore(settings.database_url) as store, Fetcher(
        session=session,
        timeout=settings.request_timeout,
        max_attempts=settings.max_attempts,
        base_delay=settings.retry_base_delay,
        sleep=pacer.sleep,
        logger=logger,
    ) as fetcher:
        resolver = ContentResolver(
            fetcher,
            url_template=settings.url_template,
            fallback_text=settings.fallback_text,
            logger=logger,
        )
        driver = BackfillDriver(
            selector=BatchSelector(store, logger=logger),
            resolver=resolver,
            store=store,
            pacer=pacer,
            limit=settings.batch_limit,
            since_days=settings.window_days,
            pause_every=settings.pause_every,
            pause_seconds=settings.pause_seconds,
            on_failure=settings.on_failure,
            logger=logger,
        )
        run = driver.run()

    logger.log_metrics_summary()
    return run


def _settings_from_args(args: argparse.Namespace, base: Settings) -> Settings:
    return base.with_overrides(
        database_url=getattr(args, "database_url", None),
        batch_limit=getattr(args, "limit", None),
        window_days=getattr(args, "days", None),
        pause_seconds=getattr(args, "pause", None),
        pause_every=getattr(args, "pause_every", None),
        on_failure=getattr(args, "on_failure", None),
    )


def _start_run(settings: Settings) -> None:
    logger = get_logger()
    pacer = Pacer()
    pacer.install_signal_handlers()
    logger.info("=== Starting article content backfill ===")
    try:
        run_backfill(settings, pacer=pacer)
    except StorageError as e:
        logger.critical("Backfill aborted", error=str(e))
        raise SystemExit(1)
    finally:
        logger.info("Backfill finished")


def cmd_fill(args: argparse.Namespace, settings: Settings) -> None:
    _start_run(_settings_from_args(args, settings))


def cmd_cron(args: argparse.Namespace, settings: Settings) -> None:
    _start_run(_settings_from_args(args, settings.with_overrides(**CRON_PRESET)))


def cmd_resolve(args: argparse.Namespace, settings: Settings) -> None:
    with Fetcher(
        timeout=settings.request_timeout,
        max_attempts=settings.max_attempts,
        base_delay=settings.retry_base_delay,
    ) as fetcher:
        resolver = ContentResolver(
            fetcher,
            url_template=settings.url_template,
            fallback_text=settings.fallback_text,
        )
        resolution = resolver.resolve(args.id)
    print(resolution.content)
    if not resolution.ok:
        raise SystemExit(2)


def cmd_init_db(args: argparse.Namespace, settings: Settings) -> None:
    settings = _settings_from_args(args, settings)
    engine = init_database(settings.database_url)
    engine.dispose()
    print(f"Initialized {settings.database_url}")


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--limit", type=int, help="Maximum articles per run (1-1000)")
    parser.add_argument("--days", type=float, help="Only articles published in the last N days")
    parser.add_argument("--pause", type=float, help="Seconds to pause after every group of successes")
    parser.add_argument("--pause-every", type=int, help="Successful writes between pauses (default 5)")
    parser.add_argument("--on-failure", choices=ON_FAILURE_POLICIES,
                        help="persist: store the fallback text; retain: leave content empty for a later run")
    parser.add_argument("--database-url", help="SQLAlchemy database URL (or set ARTICLEFILL_DATABASE_URL)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="articlefill", description="Fill in full content for stored articles")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    fill = subparsers.add_parser("fill", help="Fill content for up to 100 articles (any age)")
    _add_run_options(fill)
    fill.set_defaults(func=cmd_fill)

    cron = subparsers.add_parser("cron", help="Scheduled run: up to 1000 articles from the last 3 days")
    _add_run_options(cron)
    cron.set_defaults(func=cmd_cron)

    res = subparsers.add_parser("resolve", help="Print the cleaned content for one article id without storing it")
    res.add_argument("--id", required=True, help="Article id")
    res.set_defaults(func=cmd_resolve)

    idb = subparsers.add_parser("init-db", help="Create the articles table")
    idb.add_argument("--database-url", help="SQLAlchemy database URL")
    idb.set_defaults(func=cmd_init_db)

    return parser


def main(argv=None):
    load_env()
    args = build_parser().parse_args(argv)

    if args.version:
        print(__version__)
        return

    try:
        settings = load_settings()
    except ValueError as e:
        raise SystemExit(f"Invalid configuration: {e}")

    reset_logger()
    get_logger(level=settings.log_level, log_dir=settings.log_dir)

    if hasattr(args, "func"):
        try:
            args.func(args, settings)
        except ValueError as e:
            raise SystemExit(f"Invalid option: {e}")
        return

    build_parser().print_help()


if __name__ == "__main__":
    main()
