"""
BoardShelf - board game collection with catalog art enrichment
Application factory
"""
import structlog
from flask import Flask

from constants import BOARDSHELF_DB
from db import init_db
from exceptions import register_exception_handlers
from settings import CatalogConfig, load_settings
from utils import configure_logging, sanitize_sensitive_data
from routes.games import games_bp

logger = structlog.get_logger('main')


def create_app(config_overrides=None, catalog_config=None):
    """
    Build the Flask app.

    catalog_config defaults to the one described by settings.yaml and
    BGG_API_TOKEN; pass one explicitly to run without touching the settings file.
    """
    configure_logging()

    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = BOARDSHELF_DB
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    if config_overrides:
        app.config.update(config_overrides)

    if catalog_config is None:
        catalog_config = CatalogConfig.from_settings(load_settings())
    app.config["CATALOG_CONFIG"] = catalog_config

    logger.info("catalog_config", **sanitize_sensitive_data(catalog_config.to_dict()))
    if not catalog_config.enabled:
        logger.warning("No catalog API token configured - catalog art resolution is disabled")

    init_db(app)
    register_exception_handlers(app)
    app.register_blueprint(games_bp)

    return app


if __name__ == '__main__':
    create_app().run(host='0.0.0.0', port=8465)
