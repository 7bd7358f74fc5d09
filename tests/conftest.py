"""Pytest fixtures for backend tests."""

from __future__ import annotations

import os
from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient


def _set_default_env() -> None:
    os.environ.setdefault("DATA_FILE", "")
    os.environ.setdefault("ENABLE_SCHEDULER", "false")
    os.environ.setdefault("SEED_SAMPLE_DATA", "false")


_set_default_env()

from contudo.services.common import LedgerStore  # noqa: E402
from contudo.services.ledger_service import LedgerService  # noqa: E402
from contudo.services.recurrence_service import RecurrenceService  # noqa: E402
from contudo.utils.time import FixedClock  # noqa: E402


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen at 2025-01-10 12:00 UTC."""
    return FixedClock(datetime(2025, 1, 10, 12, 0, tzinfo=UTC))


@pytest.fixture
def store() -> LedgerStore:
    """Empty in-memory store."""
    return LedgerStore()


@pytest.fixture
def ledger(store: LedgerStore, clock: FixedClock) -> LedgerService:
    return LedgerService(store, clock)


@pytest.fixture
def recurrence(store: LedgerStore, clock: FixedClock) -> RecurrenceService:
    return RecurrenceService(store, clock)


@pytest.fixture
def client(store: LedgerStore, clock: FixedClock) -> TestClient:
    """Create a FastAPI test client around an isolated store."""
    from contudo.main import create_app

    return TestClient(create_app(store=store, clock=clock))
