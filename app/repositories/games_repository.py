"""
Repository for Games database operations

The resolution pipeline only talks to the narrow get_record / write_resolution /
get_needing_resolution surface, so it can run against an in-memory store in tests.
"""

import logging
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from db import db
from models.games import Games
from constants import BACKFILL_STATUSES
from exceptions import GameNotFoundException

logger = logging.getLogger("main")

RESOLUTION_FIELDS = (
    "catalog_id",
    "image_url",
    "thumbnail_url",
    "image_source",
    "resolution_status",
    "status_updated_at",
)


class GamesRepository:
    """Repository for Games database operations"""

    @staticmethod
    def get_by_id(id):
        """Get Games by primary key ID"""
        return db.session.get(Games, id)

    @staticmethod
    def get_record(id):
        """Get a game or raise GameNotFoundException"""
        try:
            item = db.session.get(Games, id)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to read game {id}: {e}")
            raise e

        if not item:
            raise GameNotFoundException(id)
        return item

    @staticmethod
    def create(name, **kwargs):
        """Create new Games record"""
        try:
            item = Games(name=name, **kwargs)
            db.session.add(item)
            db.session.commit()
            db.session.refresh(item)
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def rename(id, name):
        """Rename a game. Resolution fields are left for the next pipeline run."""
        item = db.session.get(Games, id)
        if not item:
            return None

        try:
            item.name = name
            db.session.commit()
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def write_resolution(id, fields):
        """
        Persist resolution fields for one game in a single commit.

        Only keys from RESOLUTION_FIELDS are accepted; anything not passed is
        left untouched on the row.
        """
        unknown = set(fields) - set(RESOLUTION_FIELDS)
        if unknown:
            raise ValueError(f"Not a resolution field: {', '.join(sorted(unknown))}")

        item = GamesRepository.get_record(id)

        try:
            for key, value in fields.items():
                setattr(item, key, value)
            db.session.commit()
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to write resolution for game {id}: {e}")
            raise e

    @staticmethod
    def get_needing_resolution(limit=None):
        """Games with a non-ok status or no image yet, ordered by name"""
        query = Games.query.filter(
            or_(
                Games.resolution_status.in_(BACKFILL_STATUSES),
                Games.image_url.is_(None),
            )
        ).order_by(Games.name.asc())

        if limit:
            query = query.limit(limit)

        return query.all()
