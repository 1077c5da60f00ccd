import sys
import os

# Add app directory to path BEFORE any imports
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

import structlog

from celery_app import celery
from exceptions import GameNotFoundException, CatalogDisabledException
from repositories.games_repository import GamesRepository
from repositories.artbackfilllog_repository import ArtBackfillLogRepository
from services.art_resolution import ArtResolver
from services.art_backfill import ArtBackfillOrchestrator, FixedIntervalPacer
from settings import load_settings
from utils import configure_logging

configure_logging()
logger = structlog.get_logger("main")

_flask_app = None


def get_flask_app():
    """Get or create the Flask app context lazily"""
    global _flask_app
    if _flask_app is None:
        from app import create_app

        logger.info("Creating Flask app context (lazy initialization)...")
        _flask_app = create_app()
    return _flask_app


@celery.task(name="tasks.resolve_game_art_async")
def resolve_game_art_async(game_id, name_override=None):
    """Resolve catalog art for one game after it was created or renamed"""
    app = get_flask_app()
    with app.app_context():
        logger.info("resolve_game_art_started", game_id=game_id, name_override=name_override)
        resolver = ArtResolver(app.config["CATALOG_CONFIG"], GamesRepository)
        try:
            outcome = resolver.resolve(game_id, name_override)
        except GameNotFoundException:
            logger.error("game_not_found", game_id=game_id)
            return False

        logger.info("resolve_game_art_finished", game_id=game_id, status=outcome.status)
        return outcome.to_dict()


@celery.task(name="tasks.backfill_catalog_art_async")
def backfill_catalog_art_async(limit=None, delay_ms=None):
    """Run the art backfill on a worker"""
    app = get_flask_app()
    with app.app_context():
        settings = load_settings()
        if delay_ms is None:
            delay_ms = settings["backfill"]["delay_ms"]
        if limit is None:
            limit = settings["backfill"]["limit"]

        resolver = ArtResolver(app.config["CATALOG_CONFIG"], GamesRepository)
        orchestrator = ArtBackfillOrchestrator(
            resolver,
            GamesRepository,
            pacer=FixedIntervalPacer(delay_ms),
            log_repository=ArtBackfillLogRepository,
        )
        try:
            stats = orchestrator.run(limit=limit)
        except CatalogDisabledException:
            return False
        return stats.to_dict()
