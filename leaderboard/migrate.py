"""Command line entry point for the one-time schema migration."""

from __future__ import annotations

import argparse

from .core import Database, configure_logging, load_settings, run_migrations


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Create leaderboard tables.")
    parser.add_argument("--database-url", default=settings.database_url)
    parser.add_argument(
        "--reset",
        action="store_true",
        default=settings.db_reset,
        help="drop existing tables first (development only)",
    )
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)
    database = Database(args.database_url, pool_size=1, pool_timeout=settings.pool_timeout)
    try:
        run_migrations(database.engine, reset=args.reset)
    finally:
        database.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
