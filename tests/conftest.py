"""
Pytest fixtures and configuration for BoardShelf tests
"""
import os
import sys
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from unittest.mock import MagicMock

# Add app directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'app')))

from constants import BACKFILL_STATUSES
from exceptions import GameNotFoundException
from settings import CatalogConfig


FIXED_NOW = datetime(2026, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


SEARCH_XML_CATAN = """<?xml version="1.0" encoding="utf-8"?>
<items total="4" termsofuse="https://boardgamegeek.com/xmlapi/termsofuse">
  <item type="boardgame" id="13">
    <name type="primary" value="Catan"/>
    <yearpublished value="1995"/>
  </item>
  <item type="boardgame" id="278">
    <name type="primary" value="Catan Card Game"/>
    <yearpublished value="1996"/>
  </item>
  <item type="boardgameexpansion" id="325">
    <name type="primary" value="Catan: Seafarers"/>
    <yearpublished value="1997"/>
  </item>
  <item type="videogame" id="9999">
    <name type="primary" value="Catan"/>
  </item>
</items>
"""

THING_XML_CATAN = """<?xml version="1.0" encoding="utf-8"?>
<items termsofuse="https://boardgamegeek.com/xmlapi/termsofuse">
  <item type="boardgame" id="13">
    <thumbnail>https://cf.geekdo-images.com/catan_thumb.jpg</thumbnail>
    <image>https://cf.geekdo-images.com/catan.jpg</image>
    <name type="primary" sortindex="1" value="Catan"/>
    <name type="alternate" sortindex="1" value="Die Siedler von Catan"/>
  </item>
</items>
"""

THING_XML_NO_IMAGE = """<?xml version="1.0" encoding="utf-8"?>
<items>
  <item type="boardgame" id="7">
    <name type="primary" value="Obscure Game"/>
  </item>
</items>
"""


class FakeGameRepository:
    """In-memory stand-in for GamesRepository"""

    def __init__(self, games=None):
        self.games = {}
        self.writes = []
        for game in games or []:
            self.add(**game)

    def add(self, id, name, **fields):
        record = SimpleNamespace(
            id=id,
            name=name,
            catalog_id=fields.get("catalog_id"),
            image_url=fields.get("image_url"),
            thumbnail_url=fields.get("thumbnail_url"),
            image_source=fields.get("image_source"),
            resolution_status=fields.get("resolution_status"),
            status_updated_at=fields.get("status_updated_at"),
        )
        self.games[id] = record
        return record

    def get_record(self, id):
        if id not in self.games:
            raise GameNotFoundException(id)
        return self.games[id]

    def write_resolution(self, id, fields):
        record = self.get_record(id)
        self.writes.append((id, dict(fields)))
        for key, value in fields.items():
            setattr(record, key, value)
        return record

    def get_needing_resolution(self, limit=None):
        selected = [
            g for g in self.games.values()
            if g.resolution_status in BACKFILL_STATUSES or g.image_url is None
        ]
        selected.sort(key=lambda g: g.name)
        return selected[:limit] if limit else selected


class RecordingSleeper:
    """Callable replacing time.sleep; remembers every requested delay"""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


def make_response(status_code, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.ok = 200 <= status_code < 300
    return response


@pytest.fixture
def catalog_config():
    return CatalogConfig(api_token="test-token")


@pytest.fixture
def disabled_config():
    return CatalogConfig(api_token=None)


@pytest.fixture
def fake_repository():
    return FakeGameRepository([
        {"id": 1, "name": "Catan"},
        {"id": 2, "name": "Azul"},
    ])


@pytest.fixture
def sleeper():
    return RecordingSleeper()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def app(catalog_config):
    """Flask app bound to a fresh in-memory SQLite database"""
    from app import create_app

    _app = create_app(
        {"TESTING": True, "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:"},
        catalog_config=catalog_config,
    )
    with _app.app_context():
        yield _app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client
