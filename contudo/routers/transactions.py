"""Transaction endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from contudo.config import settings
from contudo.dependencies import get_clock, get_store
from contudo.schemas.common import Category, TransactionType
from contudo.schemas.transaction import (
    CategoryTotal,
    MonthTotals,
    Totals,
    Transaction,
    TransactionCreate,
    TransactionFilter,
    TransactionSummary,
    TransactionUpdate,
)
from contudo.services.common import LedgerStore
from contudo.services.ledger_service import LedgerService
from contudo.utils.time import Clock

router = APIRouter()


@router.get("", response_model=list[Transaction])
def list_transactions(
    search: str | None = Query(default=None),
    type: TransactionType | None = Query(default=None),
    category: Category | None = Query(default=None),
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> list[Transaction]:
    """Return transactions, most recent first."""
    filters = TransactionFilter(search=search, type=type, category=category)
    return LedgerService(store, clock).list_transactions(filters)


@router.post("", response_model=Transaction, status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: TransactionCreate,
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> Transaction:
    """Record a new income or expense."""
    return LedgerService(store, clock).create(payload)


@router.get("/stats/summary", response_model=TransactionSummary)
def get_summary(
    year: int | None = Query(default=None, ge=1900),
    month: int | None = Query(default=None, ge=1, le=12),
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> TransactionSummary:
    """Return dashboard totals and counts."""
    return LedgerService(store, clock).summary(year=year, month=month)


@router.get("/stats/totals", response_model=Totals)
def get_totals(
    year: int | None = Query(default=None, ge=1900),
    month: int | None = Query(default=None, ge=1, le=12),
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> Totals:
    """Return income, expense and balance."""
    return LedgerService(store, clock).totals(year=year, month=month)


@router.get("/stats/monthly", response_model=list[MonthTotals])
def get_monthly_totals(
    year: int | None = Query(default=None, ge=1900),
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> list[MonthTotals]:
    """Return per-month totals for a year (current year by default)."""
    return LedgerService(store, clock).monthly_totals(year or clock.today().year)


@router.get("/stats/categories", response_model=list[CategoryTotal])
def get_category_breakdown(
    year: int | None = Query(default=None, ge=1900),
    month: int | None = Query(default=None, ge=1, le=12),
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> list[CategoryTotal]:
    """Return expenses grouped by category."""
    return LedgerService(store, clock).category_breakdown(year=year, month=month)


@router.get("/overdue", response_model=list[Transaction])
def list_overdue(
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> list[Transaction]:
    """Return unpaid expenses past their due date."""
    return LedgerService(store, clock).overdue()


@router.get("/upcoming", response_model=list[Transaction])
def list_upcoming(
    days: int | None = Query(default=None, ge=0, le=366),
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> list[Transaction]:
    """Return unpaid expenses due in the next few days."""
    window = settings.upcoming_window_days if days is None else days
    return LedgerService(store, clock).upcoming(window)


@router.post(
    "/copy-previous-month",
    response_model=list[Transaction],
    status_code=status.HTTP_201_CREATED,
)
def copy_previous_month(
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> list[Transaction]:
    """Copy last month's fixed expenses into the current month."""
    return LedgerService(store, clock).copy_previous_month_fixed()


@router.get("/{transaction_id}", response_model=Transaction)
def get_transaction(
    transaction_id: int,
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> Transaction:
    """Return one transaction."""
    return LedgerService(store, clock).get(transaction_id)


@router.put("/{transaction_id}", response_model=Transaction)
def update_transaction(
    transaction_id: int,
    payload: TransactionUpdate,
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> Transaction:
    """Change some fields of a transaction."""
    return LedgerService(store, clock).update(transaction_id, payload)


@router.delete("/{transaction_id}")
def delete_transaction(
    transaction_id: int,
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Remove a transaction."""
    removed = LedgerService(store, clock).delete(transaction_id)
    return {
        "message": "Transação removida com sucesso",
        "transaction": removed.model_dump(mode="json"),
    }


@router.post("/{transaction_id}/pay", response_model=Transaction)
def pay_transaction(
    transaction_id: int,
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> Transaction:
    """Mark a transaction as paid."""
    return LedgerService(store, clock).mark_paid(transaction_id)
