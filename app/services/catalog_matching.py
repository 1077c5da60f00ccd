"""
Deterministic selection of the catalog entry for a game name

No fuzzy matching: a candidate is either an exact match after name
normalization, the only result returned, or the search is ambiguous.
"""

from dataclasses import dataclass
from typing import List, Optional

from services.catalog_names import normalize_game_name


@dataclass(frozen=True)
class CandidateMatch:
    """One search result from the catalog, not yet confirmed"""
    external_id: int
    name: str
    year_published: Optional[int] = None


@dataclass(frozen=True)
class MatchOutcome:
    status: str  # 'matched' | 'ambiguous' | 'missing'
    external_id: Optional[int] = None

    MATCHED = "matched"
    AMBIGUOUS = "ambiguous"
    MISSING = "missing"

    @classmethod
    def matched(cls, external_id: int) -> "MatchOutcome":
        return cls(cls.MATCHED, external_id)

    @classmethod
    def ambiguous(cls) -> "MatchOutcome":
        return cls(cls.AMBIGUOUS)

    @classmethod
    def missing(cls) -> "MatchOutcome":
        return cls(cls.MISSING)

    @property
    def is_matched(self) -> bool:
        return self.status == self.MATCHED


def _newest_first(candidate: CandidateMatch):
    # Unknown year sorts as year 0; equal years fall back to the lowest id
    return (-(candidate.year_published or 0), candidate.external_id)


def pick_best_match(candidates: List[CandidateMatch], original_name: str) -> MatchOutcome:
    """
    Given catalog search results and the game name, pick the best match.

    1. No candidates -> missing.
    2. Exactly one exact (normalized) name match -> that one.
    3. Several exact matches -> most recent year_published, then lowest id.
    4. No exact match but a single result overall -> trust it (abbreviations, retitles).
    5. Otherwise -> ambiguous.
    """
    if not candidates:
        return MatchOutcome.missing()

    normalized = normalize_game_name(original_name)
    exact_matches = [c for c in candidates if normalize_game_name(c.name) == normalized]

    if len(exact_matches) == 1:
        return MatchOutcome.matched(exact_matches[0].external_id)

    if len(exact_matches) > 1:
        best = sorted(exact_matches, key=_newest_first)[0]
        return MatchOutcome.matched(best.external_id)

    if len(candidates) == 1:
        return MatchOutcome.matched(candidates[0].external_id)

    return MatchOutcome.ambiguous()
