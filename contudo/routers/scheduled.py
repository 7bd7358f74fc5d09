"""Scheduled transaction endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from contudo.dependencies import get_clock, get_store
from contudo.schemas.scheduled import ScheduledTransaction, ScheduledTransactionCreate
from contudo.schemas.transaction import Transaction
from contudo.services.common import LedgerStore
from contudo.services.recurrence_service import RecurrenceService
from contudo.utils.time import Clock

router = APIRouter()


@router.get("", response_model=list[ScheduledTransaction])
def list_scheduled(
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> list[ScheduledTransaction]:
    """Return scheduled transactions by next trigger date."""
    return RecurrenceService(store, clock).list_scheduled()


@router.post("", response_model=ScheduledTransaction, status_code=status.HTTP_201_CREATED)
def create_scheduled(
    payload: ScheduledTransactionCreate,
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> ScheduledTransaction:
    """Schedule a one-off or repeating transaction."""
    return RecurrenceService(store, clock).create(payload)


@router.get("/due", response_model=list[ScheduledTransaction])
def list_due(
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> list[ScheduledTransaction]:
    """Return scheduled transactions whose date has arrived."""
    return RecurrenceService(store, clock).check_due()


@router.post("/run", response_model=list[Transaction])
def run_due(
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> list[Transaction]:
    """Materialize every due scheduled transaction now."""
    return RecurrenceService(store, clock).run_due()


@router.post("/{scheduled_id}/execute", response_model=Transaction)
def execute_scheduled(
    scheduled_id: int,
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> Transaction:
    """Materialize one scheduled transaction immediately."""
    return RecurrenceService(store, clock).execute(scheduled_id)


@router.delete("/{scheduled_id}")
def delete_scheduled(
    scheduled_id: int,
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Remove a scheduled transaction."""
    removed = RecurrenceService(store, clock).delete(scheduled_id)
    return {
        "message": "Transação agendada removida com sucesso",
        "scheduled": removed.model_dump(mode="json"),
    }
