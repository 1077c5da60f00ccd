"""
Catalog art resolution for a single game

ArtResolver runs search -> match -> detail fetch for one record and hands the
result to ResolutionStatusMachine, the only code that writes the resolution
fields (catalog_id, image_url, thumbnail_url, image_source, resolution_status,
status_updated_at) back to the record store.
"""
from dataclasses import dataclass
from typing import Optional

import structlog

from constants import (
    STATUS_AMBIGUOUS,
    STATUS_DISABLED,
    STATUS_ERROR,
    STATUS_MISSING,
    STATUS_OK,
)
from exceptions import GameNotFoundException
from services.catalog_client import CatalogClient
from services.catalog_matching import MatchOutcome, pick_best_match
from services.catalog_xml import CatalogImages
from utils import now_utc

logger = structlog.get_logger("catalog")

REASON_SEARCH_FAILED = "catalog search failed"
REASON_THING_FAILED = "catalog thing fetch failed"
REASON_UNEXPECTED = "unexpected error"

CLEARED_ART = {
    "catalog_id": None,
    "image_url": None,
    "thumbnail_url": None,
    "image_source": None,
}


@dataclass(frozen=True)
class ResolutionOutcome:
    """Terminal result of one pipeline run, as reported to the caller"""
    status: str
    catalog_id: Optional[int] = None
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self):
        data = {"status": self.status}
        if self.catalog_id is not None:
            data["catalogId"] = self.catalog_id
            data["imageUrl"] = self.image_url
            data["thumbnailUrl"] = self.thumbnail_url
        if self.reason:
            data["reason"] = self.reason
        return data


class ResolutionStatusMachine:
    """
    Maps pipeline outcomes onto record mutations.

    Any status may follow any other; each transition has a fixed effect:

        disabled / missing / ambiguous  -> art fields and catalog_id cleared
        error                           -> only status and timestamp change
        matched, no image               -> missing, catalog_id kept, art cleared
        matched, image                  -> ok, catalog_id, art and source set

    status_updated_at is stamped on every write, including repeats of the
    same status.
    """

    def __init__(self, repository, source_name, clock=now_utc):
        self.repository = repository
        self.source_name = source_name
        self.clock = clock

    def _write(self, game_id, status, fields=None):
        update = dict(fields or {})
        update["resolution_status"] = status
        update["status_updated_at"] = self.clock()
        self.repository.write_resolution(game_id, update)

    def mark_disabled(self, game_id) -> ResolutionOutcome:
        self._write(game_id, STATUS_DISABLED, CLEARED_ART)
        return ResolutionOutcome(STATUS_DISABLED)

    def mark_missing(self, game_id) -> ResolutionOutcome:
        self._write(game_id, STATUS_MISSING, CLEARED_ART)
        return ResolutionOutcome(STATUS_MISSING)

    def mark_ambiguous(self, game_id) -> ResolutionOutcome:
        self._write(game_id, STATUS_AMBIGUOUS, CLEARED_ART)
        return ResolutionOutcome(STATUS_AMBIGUOUS)

    def mark_error(self, game_id, reason=None) -> ResolutionOutcome:
        # Last known good art survives a failed run
        self._write(game_id, STATUS_ERROR)
        return ResolutionOutcome(STATUS_ERROR, reason=reason)

    def mark_matched(self, game_id, catalog_id: int, images: CatalogImages) -> ResolutionOutcome:
        if images.image:
            self._write(game_id, STATUS_OK, {
                "catalog_id": catalog_id,
                "image_url": images.image,
                "thumbnail_url": images.thumbnail,
                "image_source": self.source_name,
            })
            return ResolutionOutcome(STATUS_OK, catalog_id, images.image, images.thumbnail)

        self._write(game_id, STATUS_MISSING, dict(CLEARED_ART, catalog_id=catalog_id))
        return ResolutionOutcome(STATUS_MISSING, catalog_id)


class ArtResolver:
    """Resolve catalog id and box art for one game at a time"""

    def __init__(self, config, repository, client=None, status_machine=None):
        self.config = config
        self.repository = repository
        self.client = client or CatalogClient(config)
        self.status_machine = status_machine or ResolutionStatusMachine(repository, config.source_name)

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def resolve(self, game_id, name_override: Optional[str] = None) -> ResolutionOutcome:
        """
        Run the pipeline for one game and persist the outcome.

        Raises GameNotFoundException when the record does not exist; every
        other failure, including a failing record read, ends as an 'error'
        outcome.
        """
        try:
            record = self.repository.get_record(game_id)

            if not self.enabled:
                logger.debug(f"Catalog disabled, marking game {game_id} as disabled")
                return self.status_machine.mark_disabled(game_id)

            search_name = name_override if name_override is not None else record.name
            return self._resolve_enabled(game_id, search_name)
        except GameNotFoundException:
            raise
        except Exception as e:
            logger.error(f"Unexpected error resolving art for game {game_id}: {e}", exc_info=True)
            return self.mark_error_safely(game_id, reason=REASON_UNEXPECTED)

    def _resolve_enabled(self, game_id, search_name: str) -> ResolutionOutcome:
        candidates = self.client.search(search_name)
        if candidates is None:
            return self.status_machine.mark_error(game_id, reason=REASON_SEARCH_FAILED)

        match = pick_best_match(candidates, search_name)

        if match.status == MatchOutcome.MISSING:
            logger.info(f"No catalog results for '{search_name}'")
            return self.status_machine.mark_missing(game_id)

        if match.status == MatchOutcome.AMBIGUOUS:
            logger.info(f"Ambiguous catalog results for '{search_name}' ({len(candidates)} candidates)")
            return self.status_machine.mark_ambiguous(game_id)

        images = self.client.fetch_details(match.external_id)
        if images is None:
            return self.status_machine.mark_error(game_id, reason=REASON_THING_FAILED)

        return self.status_machine.mark_matched(game_id, match.external_id, images)

    def mark_error_safely(self, game_id, reason=None) -> ResolutionOutcome:
        """Record an error outcome; a failing write is logged, not raised"""
        try:
            return self.status_machine.mark_error(game_id, reason=reason)
        except Exception as e:
            logger.error(f"Could not record error status for game {game_id}: {e}")
            return ResolutionOutcome(STATUS_ERROR, reason=reason)
