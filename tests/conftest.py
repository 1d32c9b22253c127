"""Pytest configuration for local package import resolution and shared fixtures."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    # Ensure tests can import `count_reconciler` without package installation.
    sys.path.insert(0, project_root_str)

from count_reconciler import ReconcilerConfig, ReconciliationEngine  # noqa: E402

START_TIME = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: datetime = START_TIME) -> None:
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(clock: FakeClock) -> ReconciliationEngine:
    """Engine with a fake clock so scan timestamps are predictable."""
    return ReconciliationEngine(ReconcilerConfig(clock=clock))
