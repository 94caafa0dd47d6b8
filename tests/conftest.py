"""Shared fixtures for processing tests."""

import pytest

from src.pipeline.notifications import CollectingNotifier
from src.pipeline.processing_state import ProcessingState
from tests.helpers import FakeScorer, InMemoryRoster, make_candidate, make_job


@pytest.fixture
def roster() -> InMemoryRoster:
    """A (unprocessed), B (processed, starred), C (unprocessed)."""
    return InMemoryRoster(make_job([
        make_candidate("a"),
        make_candidate("b", processed=True, starred=True, overall_score=8.0),
        make_candidate("c"),
    ]))


@pytest.fixture
def scorer(roster: InMemoryRoster) -> FakeScorer:
    return FakeScorer(roster)


@pytest.fixture
def state() -> ProcessingState:
    return ProcessingState()


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()
