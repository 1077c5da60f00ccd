from constants import *
import copy
import yaml
import os

import logging

from exceptions import SettingsException

# Retrieve main logger
logger = logging.getLogger("main")


# Cache variable
_cached_settings = None


def _merge_with_defaults(settings):
    # Deep merge with defaults to ensure new keys (like backfill) are present
    merged_settings = copy.deepcopy(DEFAULT_SETTINGS)
    for section, values in (settings or {}).items():
        if isinstance(values, dict) and section in merged_settings and isinstance(merged_settings[section], dict):
            merged_settings[section].update(values)
        else:
            merged_settings[section] = values
    return merged_settings


def load_settings(force=False, config_file=CONFIG_FILE):
    global _cached_settings

    if _cached_settings and not force:
        return _cached_settings

    if os.path.exists(config_file):
        logger.debug(f"Reading configuration file: {config_file}")
        with open(config_file, "r") as yaml_file:
            settings = yaml.safe_load(yaml_file) or {}
        settings = _merge_with_defaults(settings)
    else:
        settings = copy.deepcopy(DEFAULT_SETTINGS)
        os.makedirs(os.path.dirname(config_file), exist_ok=True)
        with open(config_file, "w") as yaml_file:
            yaml.dump(settings, yaml_file)

    # BGG_API_TOKEN overrides catalog.api_token from the file
    env_token = os.environ.get(CATALOG_TOKEN_ENV)
    if env_token:
        settings["catalog"]["api_token"] = env_token

    errors = []
    for section in ("catalog", "backfill"):
        errors.extend(verify_settings(section, settings[section])[1])
    if errors:
        raise SettingsException(errors)

    _cached_settings = settings
    return settings


def reset_settings_cache():
    global _cached_settings
    _cached_settings = None


def _value_or_default(section, key, default):
    value = section.get(key)
    return default if value is None else value


class CatalogConfig:
    """Connection settings for the remote board-game catalog.

    Built once and handed to the resolver; whether the catalog integration is
    enabled is derived from the token held here, never from process state.
    """

    def __init__(
        self,
        api_token=None,
        search_url=CATALOG_SEARCH_URL,
        thing_url=CATALOG_THING_URL,
        source_name=CATALOG_SOURCE_NAME,
        max_retries=DEFAULT_MAX_RETRIES,
        user_agent=CATALOG_USER_AGENT,
    ):
        self.api_token = api_token if isinstance(api_token, str) and api_token else None
        self.search_url = search_url
        self.thing_url = thing_url
        self.source_name = source_name
        if not isinstance(max_retries, int) or max_retries < 1:
            raise ValueError("max_retries must be a positive integer")
        self.max_retries = max_retries
        self.user_agent = user_agent

    @property
    def enabled(self) -> bool:
        return self.api_token is not None

    @classmethod
    def from_settings(cls, settings=None):
        if settings is None:
            settings = load_settings()
        catalog = settings.get("catalog", {})
        success, errors = verify_settings("catalog", catalog)
        if not success:
            raise SettingsException(errors)
        return cls(
            api_token=catalog.get("api_token"),
            search_url=catalog.get("search_url") or CATALOG_SEARCH_URL,
            thing_url=catalog.get("thing_url") or CATALOG_THING_URL,
            source_name=catalog.get("source_name") or CATALOG_SOURCE_NAME,
            max_retries=_value_or_default(catalog, "max_retries", DEFAULT_MAX_RETRIES),
            user_agent=catalog.get("user_agent") or CATALOG_USER_AGENT,
        )

    def to_dict(self):
        return {
            "api_token": self.api_token,
            "search_url": self.search_url,
            "thing_url": self.thing_url,
            "source_name": self.source_name,
            "max_retries": self.max_retries,
            "user_agent": self.user_agent,
        }

    def __repr__(self):
        return f"CatalogConfig(enabled={self.enabled}, search_url={self.search_url!r}, max_retries={self.max_retries})"


def verify_settings(section, data):
    success = True
    errors = []
    if section == "catalog":
        retries = data.get("max_retries")
        if retries is not None and (not isinstance(retries, int) or retries < 1):
            success = False
            errors.append({"path": "catalog/max_retries", "error": "max_retries must be a positive integer."})
    elif section == "backfill":
        delay = data.get("delay_ms", DEFAULT_BACKFILL_DELAY_MS)
        if not isinstance(delay, int) or delay < 0:
            success = False
            errors.append({"path": "backfill/delay_ms", "error": "delay_ms must be a non-negative integer."})
        limit = data.get("limit")
        if limit is not None and (not isinstance(limit, int) or limit < 1):
            success = False
            errors.append({"path": "backfill/limit", "error": "limit must be a positive integer or empty."})
    return success, errors
