#!/usr/bin/env python3
"""
Backfill catalog (BoardGameGeek) box art for games missing images.

Usage:
  scripts/backfill_catalog_art.py
  scripts/backfill_catalog_art.py --limit 5
  scripts/backfill_catalog_art.py --dry-run
  scripts/backfill_catalog_art.py --delay 2000

Picks every game whose resolution status is disabled/missing/ambiguous/error
or that has no image yet, ordered by name, and resolves them one at a time.
Requires BGG_API_TOKEN (or catalog.api_token in settings.yaml) unless --dry-run.
"""

import sys
import argparse
import os

# Ensure the app/ directory is importable when the script is executed directly
# from the repository root or from cron.
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
APP_DIR = os.path.join(ROOT, "app")
if APP_DIR not in sys.path:
    sys.path.insert(0, APP_DIR)

from app import create_app
from repositories.games_repository import GamesRepository
from repositories.artbackfilllog_repository import ArtBackfillLogRepository
from services.art_resolution import ArtResolver
from services.art_backfill import ArtBackfillOrchestrator, FixedIntervalPacer
from settings import CatalogConfig, load_settings
from constants import CATALOG_TOKEN_ENV
from exceptions import SettingsException


def build_parser(settings):
    parser = argparse.ArgumentParser(description="Fetch catalog box art for games missing images")
    parser.add_argument("--dry-run", action="store_true", help="Only list the games that would be processed")
    parser.add_argument("--limit", type=int, default=settings["backfill"]["limit"], help="Process at most N games")
    parser.add_argument(
        "--delay",
        type=int,
        default=settings["backfill"]["delay_ms"],
        help="Milliseconds to wait between games (default: %(default)s)",
    )
    return parser


def main(argv=None):
    try:
        settings = load_settings()
    except SettingsException as e:
        print(f"ERROR: {e.message}")
        return 2
    args = build_parser(settings).parse_args(argv)

    if args.limit is not None and args.limit < 1:
        print("ERROR: --limit must be a positive number.")
        return 2
    if args.delay < 0:
        print("ERROR: --delay must be >= 0.")
        return 2

    config = CatalogConfig.from_settings(settings)
    if not args.dry_run and not config.enabled:
        print(f"ERROR: {CATALOG_TOKEN_ENV} is not set. Cannot backfill without a token.")
        print("Set it in your environment or in settings.yaml (catalog.api_token), then re-run.")
        return 1

    print("Catalog Art Backfill")
    print(f"  dry-run: {args.dry_run}")
    print(f"  limit:   {args.limit or 'all'}")
    print(f"  delay:   {args.delay}ms between games")
    print("")

    app = create_app(catalog_config=config)
    with app.app_context():
        orchestrator = ArtBackfillOrchestrator(
            ArtResolver(config, GamesRepository),
            GamesRepository,
            pacer=FixedIntervalPacer(args.delay),
            log_repository=ArtBackfillLogRepository,
            progress=print,
        )
        stats = orchestrator.run(dry_run=args.dry_run, limit=args.limit)

    if stats.selected:
        print("")
        for line in stats.summary_lines():
            print(line)

    if stats.interrupted:
        return 130

    print("\nDone!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
