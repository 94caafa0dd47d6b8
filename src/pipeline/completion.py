"""Completion call-to-action: shown while a roster is part processed."""

from collections.abc import Iterable

from src.core.schemas import Candidate


def should_show_completion_cta(candidates: Iterable[Candidate]) -> bool:
    """Return True iff at least one candidate is processed and one is not.

    Empty, fully processed, and fully unprocessed rosters all return False.
    """
    has_processed = False
    has_unprocessed = False
    for c in candidates:
        if c.is_processed:
            has_processed = True
        else:
            has_unprocessed = True
        if has_processed and has_unprocessed:
            return True
    return False
