"""Scheduled transaction service and due-date rollover."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from contudo.schemas.scheduled import RepeatRule, ScheduledTransaction, ScheduledTransactionCreate
from contudo.schemas.transaction import Transaction
from contudo.services.common import (
    LedgerStore,
    parse_category,
    parse_description,
    parse_type,
    signed_amount,
    to_money,
)
from contudo.services.ledger_service import LedgerService
from contudo.utils.errors import AppError, ValidationError
from contudo.utils.time import Clock

logger = logging.getLogger(__name__)


def next_occurrence(current: date, repeat: RepeatRule) -> date | None:
    """Return the date after ``current`` for a repeat rule, or None for one-shots."""
    if repeat is RepeatRule.WEEKLY:
        return current + timedelta(days=7)
    if repeat is RepeatRule.MONTHLY:
        return current + relativedelta(months=1)
    if repeat is RepeatRule.YEARLY:
        return current + relativedelta(years=1)
    return None


def parse_repeat(value: str | RepeatRule | None) -> RepeatRule:
    """Validate a repeat rule; omitted means ``once``."""
    if value is None or value == "":
        return RepeatRule.ONCE
    try:
        return RepeatRule(value)
    except ValueError as exc:
        raise ValidationError("Repetição deve ser once, weekly, monthly ou yearly") from exc


class RecurrenceService:
    """Manage scheduled transactions and materialize the due ones."""

    def __init__(self, store: LedgerStore, clock: Clock) -> None:
        self.store = store
        self.clock = clock
        self.ledger = LedgerService(store, clock)

    def create(self, payload: ScheduledTransactionCreate) -> ScheduledTransaction:
        """Schedule a transaction for today or a later date."""
        text = parse_description(payload.description)
        magnitude = to_money(payload.amount)
        entry_type = parse_type(payload.type)
        category = parse_category(payload.category)
        repeat = parse_repeat(payload.repeat)
        if payload.scheduled_date is None:
            raise ValidationError("Data agendada é obrigatória")
        if payload.scheduled_date < self.clock.today():
            raise ValidationError("A data deve ser hoje ou no futuro")

        with self.store.lock:
            entry = ScheduledTransaction(
                id=self.store.allocate_id(),
                description=text,
                amount=signed_amount(magnitude, entry_type),
                type=entry_type,
                category=category,
                scheduled_date=payload.scheduled_date,
                repeat=repeat,
                created_at=self.clock.now(),
            )
            self.store.scheduled[entry.id] = entry
            self.store.persist()

        logger.info(
            "Scheduled transaction %s created for %s (%s)",
            entry.id,
            entry.scheduled_date,
            entry.repeat.value,
        )
        return entry

    def list_scheduled(self) -> list[ScheduledTransaction]:
        """Return scheduled transactions ordered by next trigger date."""
        with self.store.lock:
            rows = list(self.store.scheduled.values())
        return sorted(rows, key=lambda row: (row.scheduled_date, row.id))

    def get(self, scheduled_id: int) -> ScheduledTransaction:
        return self.store.get_scheduled(scheduled_id)

    def delete(self, scheduled_id: int) -> ScheduledTransaction:
        """Remove a scheduled transaction and return it."""
        with self.store.lock:
            self.store.get_scheduled(scheduled_id)
            entry = self.store.scheduled.pop(scheduled_id)
            self.store.persist()
        logger.info("Scheduled transaction %s removed", scheduled_id)
        return entry

    def check_due(self, now: datetime | None = None) -> list[ScheduledTransaction]:
        """Return entries whose scheduled date is on or before ``now``'s date."""
        today = (now or self.clock.now()).date()
        with self.store.lock:
            rows = list(self.store.scheduled.values())
        return [row for row in rows if row.scheduled_date <= today]

    def execute(self, scheduled_id: int, now: datetime | None = None) -> Transaction:
        """Materialize one entry, then advance or retire it."""
        now = now or self.clock.now()
        with self.store.lock:
            entry = self.store.get_scheduled(scheduled_id)
            transaction = self.ledger.add(
                description=entry.description,
                amount=abs(entry.amount),
                entry_type=entry.type,
                category=entry.category,
                entry_date=now.date(),
            )

            following = next_occurrence(entry.scheduled_date, entry.repeat)
            if following is None:
                del self.store.scheduled[scheduled_id]
                logger.info("Scheduled transaction %s retired", scheduled_id)
            else:
                self.store.scheduled[scheduled_id] = entry.model_copy(
                    update={"scheduled_date": following}
                )
                logger.info("Scheduled transaction %s rescheduled to %s", scheduled_id, following)
            self.store.persist()

        return transaction

    def run_due(self, now: datetime | None = None) -> list[Transaction]:
        """Execute every due entry once, as a single critical section.

        An entry that fails validation is logged and left in place; the rest
        of the pass still runs.
        """
        now = now or self.clock.now()
        created: list[Transaction] = []
        with self.store.lock:
            for entry in self.check_due(now):
                try:
                    created.append(self.execute(entry.id, now))
                except AppError:
                    logger.exception("Skipping scheduled transaction %s", entry.id)
        if created:
            logger.info("Materialized %s scheduled transactions", len(created))
        return created
