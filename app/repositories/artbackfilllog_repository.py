"""
Repository for ArtBackfillLog database operations
"""

from sqlalchemy.exc import SQLAlchemyError
from db import db
from models.artbackfilllog import ArtBackfillLog


class ArtBackfillLogRepository:
    """Repository for ArtBackfillLog database operations"""

    @staticmethod
    def get_latest():
        """Most recently started backfill run"""
        return ArtBackfillLog.query.order_by(ArtBackfillLog.started_at.desc(), ArtBackfillLog.id.desc()).first()

    @staticmethod
    def create(**kwargs):
        """Create new ArtBackfillLog record"""
        try:
            item = ArtBackfillLog(**kwargs)
            db.session.add(item)
            db.session.commit()
            db.session.refresh(item)
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def update(id, **kwargs):
        """Update ArtBackfillLog record"""
        item = db.session.get(ArtBackfillLog, id)
        if not item:
            return None

        try:
            for key, value in kwargs.items():
                if hasattr(item, key):
                    setattr(item, key, value)
            db.session.commit()
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e
