"""
Batch backfill of catalog art

Games are resolved strictly one after another with a fixed pause between
them; the catalog's rate budget is shared by everything we send, so no two
catalog requests are ever in flight at once.
"""
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import structlog

from constants import (
    DEFAULT_BACKFILL_DELAY_MS,
    STATUS_AMBIGUOUS,
    STATUS_ERROR,
    STATUS_MISSING,
    STATUS_OK,
)
from exceptions import CatalogDisabledException
from utils import now_utc

logger = structlog.get_logger("backfill")


class FixedIntervalPacer:
    """Sleeps a fixed delay each time wait() is called"""

    def __init__(self, delay_ms: int = DEFAULT_BACKFILL_DELAY_MS, sleep=time.sleep):
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        self.delay_ms = delay_ms
        self.sleep = sleep

    def wait(self):
        if self.delay_ms > 0:
            self.sleep(self.delay_ms / 1000.0)


@dataclass
class BackfillStats:
    selected: int = 0
    ok: int = 0
    missing: int = 0
    ambiguous: int = 0
    error: int = 0
    skipped: int = 0
    interrupted: bool = False
    dry_run: bool = False
    outcomes: List = field(default_factory=list)

    def record(self, game, outcome):
        self.outcomes.append((game.id, outcome))
        if outcome.status in (STATUS_OK, STATUS_MISSING, STATUS_AMBIGUOUS, STATUS_ERROR):
            setattr(self, outcome.status, getattr(self, outcome.status) + 1)
        else:
            logger.warning(f"Unexpected outcome '{outcome.status}' for game {game.id}, counting as error")
            self.error += 1

    @property
    def processed(self) -> int:
        return self.ok + self.missing + self.ambiguous + self.error

    def to_dict(self):
        return {
            "selected": self.selected,
            "ok": self.ok,
            "missing": self.missing,
            "ambiguous": self.ambiguous,
            "error": self.error,
            "skipped": self.skipped,
            "interrupted": self.interrupted,
            "dry_run": self.dry_run,
        }

    def summary_lines(self) -> List[str]:
        lines = [
            "--- Summary ---",
            f"  OK:        {self.ok}",
            f"  Missing:   {self.missing}",
            f"  Ambiguous: {self.ambiguous}",
            f"  Errors:    {self.error}",
        ]
        if self.dry_run:
            lines.append(f"  Skipped:   {self.skipped} (dry run)")
        if self.interrupted:
            lines.append(f"  Interrupted after {self.processed + self.skipped} of {self.selected} game(s)")
        return lines


def describe_outcome(outcome) -> str:
    """Short human-readable progress text for one game"""
    if outcome.status == STATUS_OK:
        return f"OK (catalog id: {outcome.catalog_id})"
    if outcome.status == STATUS_MISSING and outcome.catalog_id is not None:
        return f"matched but no image (catalog id: {outcome.catalog_id})"
    if outcome.status == STATUS_MISSING:
        return "no results in catalog"
    if outcome.status == STATUS_AMBIGUOUS:
        return "ambiguous"
    if outcome.status == STATUS_ERROR:
        return f"error ({outcome.reason or 'unknown'})"
    return outcome.status


class ArtBackfillOrchestrator:
    """Runs ArtResolver over every game that still needs catalog art"""

    def __init__(self, resolver, repository, pacer=None, log_repository=None, progress: Optional[Callable[[str], None]] = None):
        self.resolver = resolver
        self.repository = repository
        self.pacer = pacer or FixedIntervalPacer()
        self.log_repository = log_repository
        self.progress = progress or (lambda message: logger.info(message))

    def select_games(self, limit=None):
        return self.repository.get_needing_resolution(limit)

    def run(self, dry_run: bool = False, limit: Optional[int] = None) -> BackfillStats:
        """
        Process the selected games and return the counters.

        A dry run only reports what would be processed: no catalog calls, no
        writes, every game counted as skipped. Ctrl-C stops the loop at once and
        still returns the counters so far; the game being resolved at that
        moment is not counted and may be left without a status write.
        """
        if not dry_run and not self.resolver.enabled:
            raise CatalogDisabledException("Cannot backfill without a catalog API token")

        stats = BackfillStats(dry_run=dry_run)
        games = self.select_games(limit)
        stats.selected = len(games)

        if not games:
            self.progress("No games need backfilling. All done!")
            return stats

        self.progress(f"Found {len(games)} game(s) to process.")

        run_log = None
        if not dry_run and self.log_repository is not None:
            run_log = self.log_repository.create(
                started_at=now_utc(), status="running", record_limit=limit, games_selected=len(games)
            )

        try:
            self._process_all(games, stats, dry_run)
        except KeyboardInterrupt:
            stats.interrupted = True
            logger.warning(f"Backfill interrupted after {stats.processed + stats.skipped} of {stats.selected} game(s)")
        except Exception as e:
            self._finish_log(run_log, stats, "failed", error_message=str(e))
            raise

        self._finish_log(run_log, stats, "interrupted" if stats.interrupted else "completed")
        logger.info(f"Backfill finished: {stats.to_dict()}")
        return stats

    def _process_all(self, games, stats, dry_run):
        total = len(games)
        for i, game in enumerate(games):
            prefix = f"[{i + 1}/{total}]"

            if dry_run:
                self.progress(f"{prefix} {game.name} (status: {game.resolution_status}) - would process")
                stats.skipped += 1
                continue

            if i > 0:
                self.pacer.wait()

            outcome = self._process_one(game)
            stats.record(game, outcome)
            self.progress(f"{prefix} {game.name}... {describe_outcome(outcome)}")

    def _process_one(self, game):
        try:
            return self.resolver.resolve(game.id)
        except Exception as e:
            logger.error(f"Failed to process game {game.id} ('{game.name}'): {e}")
            return self.resolver.mark_error_safely(game.id, reason=str(e))

    def _finish_log(self, run_log, stats, status, error_message=None):
        if run_log is None:
            return
        try:
            self.log_repository.update(
                run_log.id,
                completed_at=now_utc(),
                status=status,
                games_ok=stats.ok,
                games_missing=stats.missing,
                games_ambiguous=stats.ambiguous,
                games_error=stats.error,
                error_message=error_message,
            )
        except Exception as e:
            logger.error(f"Could not update backfill log {run_log.id}: {e}")
