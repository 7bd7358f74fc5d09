"""Scheduled transaction rollover tests."""

from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from contudo.schemas.common import Category, TransactionType
from contudo.schemas.scheduled import RepeatRule, ScheduledTransaction, ScheduledTransactionCreate
from contudo.services.common import LedgerStore
from contudo.services.recurrence_service import RecurrenceService, next_occurrence
from contudo.utils.errors import NotFoundError, ValidationError
from contudo.utils.time import FixedClock


def _schedule(
    recurrence: RecurrenceService,
    scheduled_date: date,
    repeat: str = "monthly",
    entry_type: str = "despesa",
) -> int:
    entry = recurrence.create(
        ScheduledTransactionCreate(
            description="Internet",
            amount=Decimal("89.90"),
            type=entry_type,
            category="outros",
            scheduled_date=scheduled_date,
            repeat=repeat,
        )
    )
    return entry.id


@pytest.mark.parametrize(
    ("repeat", "expected"),
    [
        (RepeatRule.WEEKLY, date(2025, 2, 7)),
        (RepeatRule.MONTHLY, date(2025, 2, 28)),
        (RepeatRule.YEARLY, date(2026, 1, 31)),
        (RepeatRule.ONCE, None),
    ],
)
def test_next_occurrence(repeat: RepeatRule, expected: date | None) -> None:
    """Repeat rules should advance by their interval, clamping month ends."""
    assert next_occurrence(date(2025, 1, 31), repeat) == expected


def test_create_rejects_past_date(recurrence: RecurrenceService, store: LedgerStore) -> None:
    """A scheduled date before today should be refused."""
    with pytest.raises(ValidationError):
        _schedule(recurrence, date(2025, 1, 9))
    assert store.scheduled == {}


def test_create_rejects_unknown_repeat(recurrence: RecurrenceService) -> None:
    """Only the four repeat rules should be accepted."""
    with pytest.raises(ValidationError):
        _schedule(recurrence, date(2025, 1, 12), repeat="daily")


def test_create_normalizes_sign(recurrence: RecurrenceService) -> None:
    """Scheduled expenses should carry a negative amount like ledger entries."""
    entry_id = _schedule(recurrence, date(2025, 1, 10))
    assert recurrence.get(entry_id).amount == Decimal("-89.90")


def test_monthly_entry_materializes_and_advances(store: LedgerStore, clock: FixedClock) -> None:
    """A monthly entry due on the 5th run on the 10th should move to the 5th of next month."""
    clock.current = datetime(2025, 1, 1, 9, 0, tzinfo=UTC)
    recurrence = RecurrenceService(store, clock)
    entry_id = _schedule(recurrence, date(2025, 1, 5))

    run_at = datetime(2025, 1, 10, 8, 30, tzinfo=UTC)
    assert [entry.id for entry in recurrence.check_due(run_at)] == [entry_id]

    transaction = recurrence.execute(entry_id, run_at)

    assert transaction.date == date(2025, 1, 10)
    assert transaction.amount == Decimal("-89.90")
    assert transaction.description == "Internet"
    assert store.transactions[transaction.id] == transaction
    assert recurrence.get(entry_id).scheduled_date == date(2025, 2, 5)
    assert recurrence.check_due(run_at) == []


def test_once_entry_is_retired(recurrence: RecurrenceService, store: LedgerStore) -> None:
    """One-shot entries should be removed after running."""
    entry_id = _schedule(recurrence, date(2025, 1, 10), repeat="once", entry_type="receita")

    created = recurrence.run_due()

    assert len(created) == 1
    assert created[0].amount == Decimal("89.90")
    assert entry_id not in store.scheduled
    with pytest.raises(NotFoundError):
        recurrence.execute(entry_id)


def test_check_due_ignores_time_of_day(recurrence: RecurrenceService) -> None:
    """Any time on the scheduled date should count as due."""
    entry_id = _schedule(recurrence, date(2025, 1, 11))

    assert recurrence.check_due(datetime(2025, 1, 10, 23, 59, tzinfo=UTC)) == []
    due = recurrence.check_due(datetime(2025, 1, 11, 0, 1, tzinfo=UTC))
    assert [entry.id for entry in due] == [entry_id]


def test_missed_windows_fire_once_per_pass(
    recurrence: RecurrenceService, store: LedgerStore, clock: FixedClock
) -> None:
    """A long-missed weekly entry should catch up one occurrence per pass."""
    entry_id = _schedule(recurrence, date(2025, 1, 10), repeat="weekly")
    clock.advance(days=15)

    assert len(recurrence.run_due()) == 1
    assert recurrence.get(entry_id).scheduled_date == date(2025, 1, 17)
    assert len(recurrence.run_due()) == 1
    assert recurrence.get(entry_id).scheduled_date == date(2025, 1, 24)
    assert len(recurrence.run_due()) == 1
    assert recurrence.run_due() == []
    assert len(store.transactions) == 3


def test_ids_are_shared_with_ledger(recurrence: RecurrenceService, store: LedgerStore) -> None:
    """Materialized transactions should take fresh ids from the shared counter."""
    entry_id = _schedule(recurrence, date(2025, 1, 10))
    transaction = recurrence.execute(entry_id)
    assert transaction.id > entry_id
    assert store.next_id == transaction.id + 1


def test_delete_scheduled(recurrence: RecurrenceService) -> None:
    """Deleting should remove the entry; unknown ids raise NotFoundError."""
    entry_id = _schedule(recurrence, date(2025, 2, 1))
    assert recurrence.delete(entry_id).id == entry_id
    assert recurrence.list_scheduled() == []
    with pytest.raises(NotFoundError):
        recurrence.delete(entry_id)


def test_run_due_skips_unusable_entry(recurrence: RecurrenceService, store: LedgerStore) -> None:
    """One broken entry should not stop the rest of the pass."""
    store.scheduled[1] = ScheduledTransaction.model_construct(
        id=1,
        description="",
        amount=Decimal("0"),
        type=TransactionType.DESPESA,
        category=Category.OUTROS,
        scheduled_date=date(2025, 1, 5),
        repeat=RepeatRule.MONTHLY,
        created_at=None,
    )
    store.next_id = 2
    valid_id = _schedule(recurrence, date(2025, 1, 10))

    created = recurrence.run_due()

    assert [row.description for row in created] == ["Internet"]
    assert recurrence.get(valid_id).scheduled_date == date(2025, 2, 10)
    assert store.scheduled[1].scheduled_date == date(2025, 1, 5)


@pytest.mark.parametrize(
    ("start", "repeat", "expected"),
    [
        (date(2024, 1, 31), RepeatRule.MONTHLY, date(2024, 2, 29)),
        (date(2025, 12, 15), RepeatRule.MONTHLY, date(2026, 1, 15)),
        (date(2024, 2, 29), RepeatRule.YEARLY, date(2025, 2, 28)),
    ],
)
def test_next_occurrence_month_ends(start: date, repeat: RepeatRule, expected: date) -> None:
    """Month and year steps should clamp to the target month's length."""
    assert next_occurrence(start, repeat) == expected
