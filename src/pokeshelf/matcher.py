"""Typo-tolerant ranking of a fixed name list against free-text queries.

Each candidate gets a score in the same spirit as bitap-style fuzzy search:

    score = (1 - similarity of the best aligned substring)
            + unmatched query characters / query length
            + offset / distance

where *similarity* comes from ``rapidfuzz.fuzz.partial_ratio_alignment``
(0.0 for an exact substring hit) and *offset* is where that substring starts
in the name. A name shorter than the query only covers part of it, so the
uncovered share counts as error. A candidate matches when its score is at or
below the mode's threshold. Lower is better; an exact name beats any other
zero score, and remaining ties keep index order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rapidfuzz import fuzz

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pokeshelf.config import MatchSettings


def normalize_query(query: str) -> str:
    return query.strip().lower()


def normalize_names(names: Iterable[str]) -> tuple[str, ...]:
    """Lower-case ``names``; duplicates collapse onto their first position."""
    return tuple(dict.fromkeys(name.lower() for name in names))


def score_name(query: str, name: str, distance: int) -> tuple[float, int]:
    """Return ``(score, matched_length)`` of a normalized query against ``name``."""
    if query == name:
        return 0.0, len(name)
    alignment = fuzz.partial_ratio_alignment(query, name)
    if alignment is None or alignment.score == 0:
        return 1.0, 0
    matched = alignment.dest_end - alignment.dest_start
    error = 1.0 - alignment.score / 100.0
    if matched < len(query):
        error += (len(query) - matched) / len(query)
    offset = alignment.dest_start
    if distance:
        proximity = offset / distance
    else:
        proximity = 1.0 if offset else 0.0
    return error + proximity, matched


class FuzzyMatcher:
    """Index built once over a name sequence and queried many times."""

    def __init__(self, names: Iterable[str]) -> None:
        self._names = normalize_names(names)

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    def __len__(self) -> int:
        return len(self._names)

    def search(
        self, query: str, options: MatchSettings, limit: int | None = None
    ) -> list[str]:
        """Up to ``limit`` (default ``options.limit``) names, best match first."""
        needle = normalize_query(query)
        if not needle or not self._names:
            return []
        if limit is None:
            limit = options.limit
        if limit <= 0:
            return []

        scored: list[tuple[float, bool, int, str]] = []
        for position, name in enumerate(self._names):
            score, matched = score_name(needle, name, options.distance)
            if score <= options.threshold and matched >= options.min_match_char_length:
                scored.append((score, name != needle, position, name))
        scored.sort()
        return [name for _, _, _, name in scored[:limit]]
