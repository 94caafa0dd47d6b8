"""Candidate display filtering: focus, category, search, score ordering.

Order of operations:
  1. Focused candidate:   detail view, overrides everything else
  2. Category filter:     all / starred / processed / unprocessed
  3. Search filter:       case-insensitive, name OR strengths OR weaknesses
  4. Sort:                overall score descending, stable for ties
"""

import logging
from collections.abc import Callable, Sequence

from src.core.schemas import Candidate, FilterCategory, FilterCriteria

logger = logging.getLogger(__name__)

_CATEGORY_PREDICATES: dict[str, Callable[[Candidate], bool]] = {
    "all": lambda c: True,
    "starred": lambda c: c.is_starred,
    "processed": lambda c: c.is_processed,
    "unprocessed": lambda c: not c.is_processed,
}


def filter_candidates(
    candidates: Sequence[Candidate],
    criteria: FilterCriteria,
    focused_candidate_id: str | None = None,
) -> list[Candidate]:
    """Derive the display list for a roster. Never mutates ``candidates``."""
    if focused_candidate_id is not None:
        return [c for c in candidates if c.id == focused_candidate_id][:1]

    result = filter_by_category(candidates, criteria.category)
    result = search_candidates(result, criteria.search_query)
    # sorted() is stable, and reverse=True keeps ties in their original order.
    return sorted(result, key=lambda c: c.overall_score, reverse=True)


def filter_by_category(
    candidates: Sequence[Candidate],
    category: FilterCategory,
) -> list[Candidate]:
    predicate = _CATEGORY_PREDICATES.get(category)
    if predicate is None:
        msg = f"Unknown filter category '{category}'"
        raise ValueError(msg)
    return [c for c in candidates if predicate(c)]


def search_candidates(candidates: Sequence[Candidate], query: str) -> list[Candidate]:
    """Keep candidates whose name, strengths or weaknesses contain ``query``.

    An empty or blank query is a no-op.
    """
    needle = query.strip().lower()
    if not needle:
        return list(candidates)
    result = [c for c in candidates if _matches(c, needle)]
    logger.debug("Search '%s': %d of %d candidates match", needle, len(result), len(candidates))
    return result


def _matches(candidate: Candidate, needle: str) -> bool:
    if needle in candidate.name.lower():
        return True
    return any(needle in s.lower() for s in candidate.strengths) or any(
        needle in w.lower() for w in candidate.weaknesses
    )


def category_counts(candidates: Sequence[Candidate]) -> dict[str, int]:
    """Number of candidates in each filter category."""
    return {
        name: sum(1 for c in candidates if predicate(c))
        for name, predicate in _CATEGORY_PREDICATES.items()
    }
