from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine
import sqlite3
import logging
from constants import BOARDSHELF_DB
from utils import now_utc

# Retrieve main logger
logger = logging.getLogger("main")

db = SQLAlchemy()


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas for better performance"""
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return

    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def init_db(app, database_uri=None):
    """Bind the SQLAlchemy extension to the app and make sure tables exist"""
    app.config.setdefault("SQLALCHEMY_DATABASE_URI", database_uri or BOARDSHELF_DB)
    app.config.setdefault("SQLALCHEMY_TRACK_MODIFICATIONS", False)
    db.init_app(app)

    # Register models on the metadata before create_all
    import models  # noqa: F401

    with app.app_context():
        db.create_all()
        logger.info(f"Database ready: {app.config['SQLALCHEMY_DATABASE_URI']}")
