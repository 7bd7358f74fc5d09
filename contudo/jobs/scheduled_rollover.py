"""Periodic scheduled-transaction rollover job."""

from __future__ import annotations

import logging

from contudo.services.common import LedgerStore
from contudo.services.ledger_service import LedgerService
from contudo.services.recurrence_service import RecurrenceService
from contudo.utils.time import Clock

logger = logging.getLogger(__name__)


async def scheduled_rollover(store: LedgerStore, clock: Clock) -> None:
    """Materialize due scheduled transactions and refresh overdue flags."""
    created = RecurrenceService(store, clock).run_due()
    changed = LedgerService(store, clock).refresh_overdue()
    logger.info(
        "scheduled_rollover completed with %s new transactions, %s overdue flags changed",
        len(created),
        changed,
    )
