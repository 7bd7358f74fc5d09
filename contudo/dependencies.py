"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from contudo.services.common import LedgerStore
from contudo.utils.time import Clock


def get_store(request: Request) -> LedgerStore:
    """Return the ledger store owned by the running application."""
    return request.app.state.store


def get_clock(request: Request) -> Clock:
    """Return the clock used for dates, due checks and timestamps."""
    return request.app.state.clock
