import os

APP_DIR = os.path.dirname(os.path.abspath(__file__))
CONFIG_DIR = os.path.join(APP_DIR, 'config')
DB_FILE = os.path.join(CONFIG_DIR, 'boardshelf.db')
CONFIG_FILE = os.path.join(CONFIG_DIR, 'settings.yaml')

BOARDSHELF_DB = os.environ.get('BOARDSHELF_DB', 'sqlite:///' + DB_FILE)

# BoardGameGeek XML API2
CATALOG_SEARCH_URL = 'https://boardgamegeek.com/xmlapi2/search'
CATALOG_THING_URL = 'https://boardgamegeek.com/xmlapi2/thing'
CATALOG_SOURCE_NAME = 'bgg'
CATALOG_ITEM_TYPE = 'boardgame'
CATALOG_TOKEN_ENV = 'BGG_API_TOKEN'
CATALOG_USER_AGENT = 'BoardShelf Catalog Art Resolver'

DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKFILL_DELAY_MS = 1500

# Resolution status values persisted on games.resolution_status
STATUS_DISABLED = 'disabled'
STATUS_MISSING = 'missing'
STATUS_AMBIGUOUS = 'ambiguous'
STATUS_ERROR = 'error'
STATUS_OK = 'ok'

# Statuses picked up again by the backfill (plus anything without an image)
BACKFILL_STATUSES = [
    STATUS_DISABLED,
    STATUS_MISSING,
    STATUS_AMBIGUOUS,
    STATUS_ERROR,
]

DEFAULT_SETTINGS = {
    "catalog": {
        "api_token": "",
        "search_url": CATALOG_SEARCH_URL,
        "thing_url": CATALOG_THING_URL,
        "source_name": CATALOG_SOURCE_NAME,
        "max_retries": DEFAULT_MAX_RETRIES,
        "user_agent": CATALOG_USER_AGENT,
    },
    "backfill": {
        "delay_ms": DEFAULT_BACKFILL_DELAY_MS,
        "limit": None,
    },
}
