"""Shared pytest fixtures for token-manager tests.

Provides silent configurations, tables under both lock strategies and a
recording observer.
"""

from __future__ import annotations

import pytest

from token_manager.config import TokenManagerConfig
from token_manager.observers.types import TokenEvent
from token_manager.table.locking import GlobalLockStrategy, PerTokenLockStrategy
from token_manager.table.table import TokenTable


class RecordingObserver:
    """Observer that keeps every event it sees."""

    def __init__(self) -> None:
        self.events: list[TokenEvent] = []

    def on_token_event(self, event: TokenEvent) -> None:
        self.events.append(event)


@pytest.fixture
def silent_config() -> TokenManagerConfig:
    """Return a config with no dump output, isolated from env files."""
    return TokenManagerConfig(_env_file=None, dump_level="none")  # type: ignore[call-arg]


@pytest.fixture
def recorder() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture(params=["global", "per_token"])
def table(request: pytest.FixtureRequest, recorder: RecordingObserver) -> TokenTable:
    """A fresh table under each lock strategy, with a recording observer."""
    strategy = GlobalLockStrategy() if request.param == "global" else PerTokenLockStrategy()
    return TokenTable(lock_strategy=strategy, observers=[recorder])
