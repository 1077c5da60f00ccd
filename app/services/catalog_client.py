"""
HTTP client for the BoardGameGeek XML API2 (search + thing endpoints)
"""
import time
from typing import List, Optional
from urllib.parse import quote

import requests
import structlog

from constants import CATALOG_ITEM_TYPE
from services.catalog_matching import CandidateMatch
from services.catalog_names import normalize_game_name
from services.catalog_xml import CatalogImages, parse_search_xml, parse_thing_xml

logger = structlog.get_logger("catalog")

# BGG answers 202 while a request is queued server-side and 429 when throttling
TRANSIENT_STATUS_CODES = (202, 429)


class CatalogClient:
    """Client for the board-game catalog.

    Every request goes through fetch_with_retry, which returns the body text
    or None; callers treat None as a hard failure for that step.
    """

    def __init__(self, config, session=None, sleep=time.sleep, timeout=None):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": config.user_agent
        })
        if config.api_token:
            self.session.headers["Authorization"] = f"Bearer {config.api_token}"
        self.sleep = sleep
        self.timeout = timeout

    def fetch_with_retry(self, url: str, max_retries: Optional[int] = None) -> Optional[str]:
        """
        GET url, retrying queued/throttled responses and network errors.

        202/429 back off 2s, 4s, 8s... (2 ** (attempt + 1)); network errors back
        off 1s, 2s, 4s... (2 ** attempt). Any other non-2xx status is terminal.
        """
        if max_retries is None:
            max_retries = self.config.max_retries
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")

        for attempt in range(max_retries):
            is_last = attempt == max_retries - 1
            try:
                response = self.session.get(url, timeout=self.timeout)
            except requests.RequestException as e:
                if is_last:
                    logger.error(f"Catalog request failed after {max_retries} attempts: {url} ({e})")
                    return None
                wait = 2 ** attempt
                logger.warning(f"Catalog network error on attempt {attempt + 1}/{max_retries}, retrying in {wait}s: {e}")
                self.sleep(wait)
                continue

            if response.status_code in TRANSIENT_STATUS_CODES:
                if is_last:
                    logger.error(f"Catalog still answering {response.status_code} after {max_retries} attempts: {url}")
                    return None
                wait = 2 ** (attempt + 1)
                logger.warning(f"Catalog returned {response.status_code} on attempt {attempt + 1}/{max_retries}, retrying in {wait}s")
                self.sleep(wait)
                continue

            if response.ok:
                return response.text

            logger.error(f"Catalog returned HTTP {response.status_code} for {url}, not retrying")
            return None

        return None

    def build_search_url(self, name: str) -> str:
        query = quote(normalize_game_name(name), safe="")
        return f"{self.config.search_url}?type={CATALOG_ITEM_TYPE}&query={query}"

    def build_thing_url(self, external_id: int) -> str:
        return f"{self.config.thing_url}?id={int(external_id)}"

    def search(self, name: str) -> Optional[List[CandidateMatch]]:
        """Search the catalog by name.

        Returns None when the request itself failed. A malformed or empty
        payload is indistinguishable from "no results" and yields [].
        """
        xml = self.fetch_with_retry(self.build_search_url(name))
        if xml is None:
            return None

        result = parse_search_xml(xml)
        if result.is_failed:
            logger.warning(f"Unreadable catalog search response for '{name}': {result.error}")
        return result.value_or([])

    def fetch_details(self, external_id: int) -> Optional[CatalogImages]:
        """Fetch image URLs for a catalog id, or None when the request failed"""
        xml = self.fetch_with_retry(self.build_thing_url(external_id))
        if xml is None:
            return None

        result = parse_thing_xml(xml)
        if result.is_failed:
            logger.warning(f"Unreadable catalog thing response for id {external_id}: {result.error}")
        return result.value_or(CatalogImages())
