"""
Model: ArtBackfillLog
"""

from db import db, now_utc


class ArtBackfillLog(db.Model):
    """Execution log for catalog art backfill runs"""

    __tablename__ = "art_backfill_log"

    id = db.Column(db.Integer, primary_key=True)
    started_at = db.Column(db.DateTime, nullable=False, default=now_utc)
    completed_at = db.Column(db.DateTime)
    status = db.Column(db.String(20))  # 'running', 'completed', 'interrupted', 'failed'
    record_limit = db.Column(db.Integer)

    games_selected = db.Column(db.Integer, default=0)
    games_ok = db.Column(db.Integer, default=0)
    games_missing = db.Column(db.Integer, default=0)
    games_ambiguous = db.Column(db.Integer, default=0)
    games_error = db.Column(db.Integer, default=0)

    error_message = db.Column(db.Text)
