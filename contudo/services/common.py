"""In-memory ledger store shared by every service."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import ValidationError as SchemaError

from contudo.schemas.common import MAX_AMOUNT, Category, TransactionType
from contudo.schemas.preferences import Preferences
from contudo.schemas.scheduled import ScheduledTransaction
from contudo.schemas.transaction import Transaction
from contudo.utils.errors import NotFoundError, ValidationError
from contudo.utils.storage import JsonFileStorage, NullStorage

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


class LedgerStore:
    """Owner of the transaction and scheduled collections.

    Records are kept in insertion-ordered id maps. Every mutation and every
    due-check pass must hold ``lock``; ids come from one counter shared by
    both collections.
    """

    def __init__(self, storage: NullStorage | JsonFileStorage | None = None) -> None:
        self.storage = storage or NullStorage()
        self.lock = threading.RLock()
        self.transactions: dict[int, Transaction] = {}
        self.scheduled: dict[int, ScheduledTransaction] = {}
        self.preferences = Preferences()
        self.next_id = 1

    def allocate_id(self) -> int:
        """Return the next id and advance the counter."""
        with self.lock:
            value = self.next_id
            self.next_id += 1
            return value

    def get_transaction(self, transaction_id: int) -> Transaction:
        """Return a transaction or raise NotFoundError."""
        record = self.transactions.get(transaction_id)
        if record is None:
            raise NotFoundError("Transação")
        return record

    def get_scheduled(self, scheduled_id: int) -> ScheduledTransaction:
        """Return a scheduled transaction or raise NotFoundError."""
        record = self.scheduled.get(scheduled_id)
        if record is None:
            raise NotFoundError("Transação agendada")
        return record

    def snapshot(self) -> dict[str, Any]:
        """Return the JSON-ready persisted document."""
        with self.lock:
            return {
                "transactions": [
                    row.model_dump(mode="json") for row in self.transactions.values()
                ],
                "scheduled_transactions": [
                    row.model_dump(mode="json") for row in self.scheduled.values()
                ],
                "settings": self.preferences.model_dump(mode="json"),
                "next_id": self.next_id,
            }

    def replace(
        self,
        transactions: Iterable[Transaction] | None = None,
        scheduled: Iterable[ScheduledTransaction] | None = None,
        preferences: Preferences | None = None,
    ) -> None:
        """Swap in whole collections; omitted ones are kept as they are."""
        with self.lock:
            if transactions is not None:
                self.transactions = {row.id: row for row in transactions}
            if scheduled is not None:
                self.scheduled = {row.id: row for row in scheduled}
            if preferences is not None:
                self.preferences = preferences
            self.recompute_next_id()

    def recompute_next_id(self, floor: int = 1) -> None:
        """Set the counter to one past the highest id in use."""
        ids = list(self.transactions) + list(self.scheduled)
        self.next_id = max([floor, *[value + 1 for value in ids]])

    def load(self) -> bool:
        """Load the persisted snapshot over the defaults (shallow merge)."""
        data = self.storage.load()
        if not data:
            return False

        transactions = data.get("transactions")
        scheduled = data.get("scheduled_transactions")
        preferences = data.get("settings")
        try:
            loaded_transactions = (
                [Transaction.model_validate(row) for row in transactions]
                if transactions is not None
                else None
            )
            loaded_scheduled = (
                [ScheduledTransaction.model_validate(row) for row in scheduled]
                if scheduled is not None
                else None
            )
            loaded_preferences = (
                Preferences.model_validate({**self.preferences.model_dump(), **preferences})
                if preferences is not None
                else None
            )
        except (SchemaError, TypeError):
            logger.exception("Ignoring invalid data file contents")
            return False

        if loaded_transactions is not None:
            loaded_transactions = [normalize_amount(row) for row in loaded_transactions]
        if loaded_scheduled is not None:
            loaded_scheduled = [normalize_amount(row) for row in loaded_scheduled]
        if has_duplicate_ids(loaded_transactions or [], loaded_scheduled or []):
            logger.error("Ignoring data file contents: duplicate ids")
            return False

        self.replace(
            transactions=loaded_transactions,
            scheduled=loaded_scheduled,
            preferences=loaded_preferences,
        )
        self.recompute_next_id(floor=int(data.get("next_id") or 1))
        logger.info(
            "Ledger loaded with %s transactions and %s scheduled entries",
            len(self.transactions),
            len(self.scheduled),
        )
        return True

    def persist(self) -> bool:
        """Write the full snapshot; a failed write leaves memory authoritative."""
        return self.storage.save(self.snapshot())


def to_money(value: Any) -> Decimal:
    """Parse a positive amount magnitude rounded to cents."""
    if value is None or isinstance(value, bool):
        raise ValidationError("Valor deve ser um número positivo")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError("Valor deve ser um número positivo") from exc
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Valor deve ser um número positivo")
    if amount >= MAX_AMOUNT:
        raise ValidationError("Valor muito alto")
    return amount.quantize(CENTS)


def signed_amount(magnitude: Decimal, entry_type: TransactionType) -> Decimal:
    """Apply the sign implied by the transaction type."""
    magnitude = abs(magnitude)
    return -magnitude if entry_type is TransactionType.DESPESA else magnitude


def parse_type(value: Any) -> TransactionType:
    """Validate a transaction type value."""
    try:
        return TransactionType(value)
    except ValueError as exc:
        raise ValidationError('Tipo deve ser "receita" ou "despesa"') from exc


def parse_category(value: Any) -> Category:
    """Validate a category value; omitted means ``outros``."""
    if value is None or value == "":
        return Category.OUTROS
    try:
        return Category(value)
    except ValueError as exc:
        raise ValidationError("Categoria inválida") from exc


def parse_description(value: str | None) -> str:
    """Return a stripped, non-empty description."""
    text = (value or "").strip()
    if not text:
        raise ValidationError("Descrição é obrigatória")
    return text


def normalize_amount(record: Transaction | ScheduledTransaction) -> Any:
    """Round the amount to cents and re-derive its sign from the record type."""
    amount = signed_amount(record.amount.quantize(CENTS), record.type)
    return record.model_copy(update={"amount": amount})


def has_duplicate_ids(
    transactions: Iterable[Transaction], scheduled: Iterable[ScheduledTransaction]
) -> bool:
    """Return True when an id appears twice across both collections."""
    ids = [row.id for row in transactions] + [row.id for row in scheduled]
    return len(ids) != len(set(ids))
