"""
Model: Games
One row per board game owned by the group, plus the catalog art fields
written by the resolution pipeline.
"""

from db import db, now_utc
from utils import ensure_utc


class Games(db.Model):
    """A locally-owned game record enriched from the board-game catalog"""

    __tablename__ = "games"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)

    # === CATALOG RESOLUTION ===
    catalog_id = db.Column(db.Integer)  # BGG thing id, set only on a match
    image_url = db.Column(db.String(512))
    thumbnail_url = db.Column(db.String(512))
    image_source = db.Column(db.String(50))  # "bgg" while image_url came from the catalog
    resolution_status = db.Column(db.String(20), index=True)  # NULL until the first run
    status_updated_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=now_utc)
    updated_at = db.Column(db.DateTime, default=now_utc, onupdate=now_utc)

    def resolution_fields(self):
        return {
            "catalog_id": self.catalog_id,
            "image_url": self.image_url,
            "thumbnail_url": self.thumbnail_url,
            "image_source": self.image_source,
            "resolution_status": self.resolution_status,
            "status_updated_at": ensure_utc(self.status_updated_at).isoformat() if self.status_updated_at else None,
        }

    def __repr__(self):
        return f"<Games {self.id} {self.name!r} status={self.resolution_status}>"
