"""Transaction ledger service."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta
from decimal import Decimal
from typing import Any

from contudo.schemas.common import Category, TransactionType, category_label
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
from contudo.services.common import (
    LedgerStore,
    parse_category,
    parse_description,
    parse_type,
    signed_amount,
    to_money,
)
from contudo.utils.errors import ValidationError
from contudo.utils.time import Clock, in_month, previous_month

logger = logging.getLogger(__name__)

SAMPLE_TRANSACTIONS = (
    ("Salário Mensal", Decimal("5000.00"), TransactionType.RECEITA, Category.SALARIO),
    ("Aluguel", Decimal("1500.00"), TransactionType.DESPESA, Category.MORADIA),
    ("Supermercado", Decimal("450.50"), TransactionType.DESPESA, Category.ALIMENTACAO),
)


def resolve_period(year: int | None, month: int | None) -> tuple[int, int] | None:
    """Validate an optional (year, month) pair; both or neither must be given."""
    if year is None and month is None:
        return None
    if year is None or month is None:
        raise ValidationError("Informe ano e mês juntos")
    if not 1 <= month <= 12:
        raise ValidationError("Mês deve estar entre 1 e 12")
    return year, month


def compute_totals(rows: list[Transaction]) -> Totals:
    """Sum positive amounts as income and negative magnitudes as expense."""
    income = sum((row.amount for row in rows if row.amount > 0), Decimal("0"))
    expense = sum((-row.amount for row in rows if row.amount < 0), Decimal("0"))
    return Totals(income=income, expense=expense, balance=income - expense)


def is_overdue(record: Transaction, today: date) -> bool:
    """Return whether an unpaid expense is past its due date."""
    return (
        record.type is TransactionType.DESPESA
        and not record.is_paid
        and record.due_date is not None
        and record.due_date < today
    )


class LedgerService:
    """Create, change and aggregate ledger transactions."""

    def __init__(self, store: LedgerStore, clock: Clock) -> None:
        self.store = store
        self.clock = clock

    def add(
        self,
        description: str | None,
        amount: Any,
        entry_type: Any,
        category: Any = None,
        entry_date: date | None = None,
        due_date: date | None = None,
        is_fixed: bool | None = None,
    ) -> Transaction:
        """Validate input, normalize the sign and append a transaction.

        ``is_fixed`` marks a recurring monthly bill; when omitted, entries with
        a due date are treated as fixed.
        """
        text = parse_description(description)
        magnitude = to_money(amount)
        resolved_type = parse_type(entry_type)
        resolved_category = parse_category(category)
        now = self.clock.now()

        with self.store.lock:
            record = Transaction(
                id=self.store.allocate_id(),
                description=text,
                amount=signed_amount(magnitude, resolved_type),
                type=resolved_type,
                category=resolved_category,
                date=entry_date or self.clock.today(),
                due_date=due_date,
                is_fixed=due_date is not None if is_fixed is None else is_fixed,
                created_at=now,
            )
            record.is_overdue = is_overdue(record, self.clock.today())
            self.store.transactions[record.id] = record
            self.store.persist()

        logger.info("Transaction %s created: %s %s", record.id, record.description, record.amount)
        return record

    def create(self, payload: TransactionCreate) -> Transaction:
        """Create a transaction from an API payload."""
        return self.add(
            description=payload.description,
            amount=payload.amount,
            entry_type=payload.type,
            category=payload.category,
            entry_date=payload.date,
            due_date=payload.due_date,
            is_fixed=payload.is_fixed,
        )

    def get(self, transaction_id: int) -> Transaction:
        """Return one transaction."""
        return self.store.get_transaction(transaction_id)

    def update(self, transaction_id: int, payload: TransactionUpdate) -> Transaction:
        """Apply a partial update, re-deriving sign and overdue state."""
        fields = payload.model_fields_set
        with self.store.lock:
            current = self.store.get_transaction(transaction_id)
            changes: dict[str, Any] = {}

            if "description" in fields:
                changes["description"] = parse_description(payload.description)
            if "category" in fields:
                changes["category"] = parse_category(payload.category)
            if "date" in fields:
                if payload.date is None:
                    raise ValidationError("Data é obrigatória")
                changes["date"] = payload.date
            if "due_date" in fields:
                changes["due_date"] = payload.due_date
            if "is_fixed" in fields and payload.is_fixed is not None:
                changes["is_fixed"] = payload.is_fixed

            final_type = parse_type(payload.type) if "type" in fields else current.type
            magnitude = to_money(payload.amount) if "amount" in fields else abs(current.amount)
            changes["type"] = final_type
            changes["amount"] = signed_amount(magnitude, final_type)

            if "is_paid" in fields and payload.is_paid is not None:
                changes["is_paid"] = payload.is_paid
                if payload.is_paid and not current.is_paid:
                    changes["paid_at"] = self.clock.now()
                elif not payload.is_paid:
                    changes["paid_at"] = None

            changes["updated_at"] = self.clock.now()
            record = current.model_copy(update=changes)
            record.is_overdue = is_overdue(record, self.clock.today())
            self.store.transactions[transaction_id] = record
            self.store.persist()

        logger.info("Transaction %s updated", transaction_id)
        return record

    def delete(self, transaction_id: int) -> Transaction:
        """Remove a transaction and return it."""
        with self.store.lock:
            self.store.get_transaction(transaction_id)
            record = self.store.transactions.pop(transaction_id)
            self.store.persist()

        logger.info("Transaction %s removed: %s", transaction_id, record.description)
        return record

    def mark_paid(self, transaction_id: int) -> Transaction:
        """Mark a transaction paid; repeated calls keep the first payment stamp."""
        with self.store.lock:
            current = self.store.get_transaction(transaction_id)
            now = self.clock.now()
            record = current.model_copy(
                update={
                    "is_paid": True,
                    "is_overdue": False,
                    "paid_at": current.paid_at or now,
                    "updated_at": now,
                }
            )
            self.store.transactions[transaction_id] = record
            self.store.persist()
        return record

    def list_transactions(self, filters: TransactionFilter | None = None) -> list[Transaction]:
        """Return matching transactions, most recent id first."""
        filters = filters or TransactionFilter()
        search = (filters.search or "").strip().lower()
        with self.store.lock:
            rows = list(self.store.transactions.values())

        matched = [
            row
            for row in rows
            if (not search or search in row.description.lower())
            and (filters.type is None or row.type is filters.type)
            and (filters.category is None or row.category is filters.category)
        ]
        return sorted(matched, key=lambda row: row.id, reverse=True)

    def _rows_in_period(self, period: tuple[int, int] | None) -> list[Transaction]:
        with self.store.lock:
            rows = list(self.store.transactions.values())
        if period is None:
            return rows
        year, month = period
        return [row for row in rows if in_month(row.date, year, month)]

    def totals(self, year: int | None = None, month: int | None = None) -> Totals:
        """Return income, expense and balance, optionally for one month."""
        return compute_totals(self._rows_in_period(resolve_period(year, month)))

    def summary(self, year: int | None = None, month: int | None = None) -> TransactionSummary:
        """Return dashboard figures in the public summary shape."""
        rows = self._rows_in_period(resolve_period(year, month))
        totals = compute_totals(rows)
        return TransactionSummary(
            receitas=totals.income,
            despesas=totals.expense,
            saldo=totals.balance,
            total_transactions=len(rows),
            receitas_count=sum(1 for row in rows if row.type is TransactionType.RECEITA),
            despesas_count=sum(1 for row in rows if row.type is TransactionType.DESPESA),
        )

    def monthly_totals(self, year: int) -> list[MonthTotals]:
        """Return totals for each month of ``year``."""
        buckets: dict[int, list[Transaction]] = defaultdict(list)
        for row in self._rows_in_period(None):
            if row.date.year == year:
                buckets[row.date.month].append(row)

        result: list[MonthTotals] = []
        for month in range(1, 13):
            totals = compute_totals(buckets[month])
            result.append(MonthTotals(month=month, **totals.model_dump()))
        return result

    def category_breakdown(
        self, year: int | None = None, month: int | None = None
    ) -> list[CategoryTotal]:
        """Return expense magnitude per category, largest first."""
        totals: dict[Category, Decimal] = defaultdict(lambda: Decimal("0"))
        counts: dict[Category, int] = defaultdict(int)
        for row in self._rows_in_period(resolve_period(year, month)):
            if row.amount < 0:
                totals[row.category] += -row.amount
                counts[row.category] += 1

        breakdown = [
            CategoryTotal(
                category=category,
                label=category_label(category),
                total=total,
                count=counts[category],
            )
            for category, total in totals.items()
        ]
        return sorted(breakdown, key=lambda item: item.total, reverse=True)

    def overdue(self) -> list[Transaction]:
        """Return unpaid expenses whose due date is before today."""
        today = self.clock.today()
        with self.store.lock:
            rows = list(self.store.transactions.values())
        return [row for row in rows if is_overdue(row, today)]

    def upcoming(self, window_days: int = 7) -> list[Transaction]:
        """Return unpaid expenses due between today and ``window_days`` ahead."""
        if window_days < 0:
            raise ValidationError("Janela de dias deve ser positiva")
        today = self.clock.today()
        limit = today + timedelta(days=window_days)
        with self.store.lock:
            rows = list(self.store.transactions.values())
        return [
            row
            for row in rows
            if row.type is TransactionType.DESPESA
            and not row.is_paid
            and row.due_date is not None
            and today <= row.due_date <= limit
        ]

    def refresh_overdue(self) -> int:
        """Recompute overdue flags for every transaction; returns how many changed."""
        today = self.clock.today()
        changed = 0
        with self.store.lock:
            for transaction_id, row in list(self.store.transactions.items()):
                flag = is_overdue(row, today)
                if row.is_overdue != flag:
                    self.store.transactions[transaction_id] = row.model_copy(
                        update={"is_overdue": flag}
                    )
                    changed += 1
            if changed:
                self.store.persist()
        return changed

    def copy_previous_month_fixed(self) -> list[Transaction]:
        """Copy last month's fixed expenses into the current month, unpaid."""
        today = self.clock.today()
        prev_year, prev_month = previous_month(today)
        copies: list[Transaction] = []

        with self.store.lock:
            sources = [
                row
                for row in self.store.transactions.values()
                if row.type is TransactionType.DESPESA
                and row.is_fixed
                and in_month(row.date, prev_year, prev_month)
            ]
            now = self.clock.now()
            for source in sources:
                record = source.model_copy(
                    update={
                        "id": self.store.allocate_id(),
                        "date": source.date + relativedelta(months=1),
                        "due_date": (
                            source.due_date + relativedelta(months=1)
                            if source.due_date
                            else None
                        ),
                        "is_paid": False,
                        "paid_at": None,
                        "created_at": now,
                        "updated_at": None,
                    }
                )
                record.is_overdue = is_overdue(record, today)
                self.store.transactions[record.id] = record
                copies.append(record)
            if copies:
                self.store.persist()

        logger.info("Copied %s fixed expenses from %s-%02d", len(copies), prev_year, prev_month)
        return copies

    def seed_sample_data(self) -> list[Transaction]:
        """Insert the demo transactions when the ledger is empty."""
        if self.store.transactions:
            return []
        return [
            self.add(description, amount, entry_type, category)
            for description, amount, entry_type, category in SAMPLE_TRANSACTIONS
        ]
