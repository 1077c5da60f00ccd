"""
Game name canonicalization shared by catalog query building and match comparison
"""
import re

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_game_name(name: str) -> str:
    """Collapse whitespace runs to one space, trim, lowercase."""
    return _WHITESPACE_RUN.sub(" ", name).strip().lower()
