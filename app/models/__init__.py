"""
Models package

- games.py: Games (record store for the catalog art pipeline)
- artbackfilllog.py: ArtBackfillLog (one row per live backfill run)
"""

from .games import Games
from .artbackfilllog import ArtBackfillLog

__all__ = [
    "Games",
    "ArtBackfillLog",
]
