"""JSON backup export and import."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as SchemaError

from contudo.config import settings
from contudo.schemas.common import TransactionType
from contudo.schemas.preferences import Preferences
from contudo.schemas.scheduled import ScheduledTransaction
from contudo.schemas.transaction import Transaction
from contudo.services.common import LedgerStore, has_duplicate_ids, normalize_amount
from contudo.services.ledger_service import LedgerService, compute_totals
from contudo.utils.errors import ValidationError
from contudo.utils.time import Clock

logger = logging.getLogger(__name__)

# Record keys written by the browser and desktop builds of the app.
LEGACY_KEYS = {
    "dueDate": "due_date",
    "isPaid": "is_paid",
    "isOverdue": "is_overdue",
    "isFixed": "is_fixed",
    "paidAt": "paid_at",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "scheduledDate": "scheduled_date",
}
LEGACY_FIXED_TYPE = "fixo"
LEGACY_EXPENSE_TYPES = {LEGACY_FIXED_TYPE, "diverso"}
INVALID_BACKUP = "Dados inválidos para restauração"


def normalize_row(row: Any) -> dict[str, Any]:
    """Rename legacy keys and map legacy expense kinds to ``despesa``.

    ``fixo`` rows keep their kind as ``is_fixed``; rows without the flag are
    fixed when they carry a due date.
    """
    if not isinstance(row, Mapping):
        raise ValidationError(INVALID_BACKUP)
    normalized = {LEGACY_KEYS.get(key, key): value for key, value in row.items()}
    legacy_type = normalized.get("type")
    if legacy_type in LEGACY_EXPENSE_TYPES:
        normalized["type"] = TransactionType.DESPESA.value
        normalized["is_fixed"] = legacy_type == LEGACY_FIXED_TYPE
    normalized.setdefault("is_fixed", bool(normalized.get("due_date")))
    return normalized


class BackupService:
    """Build and restore the human-readable backup document."""

    def __init__(self, store: LedgerStore, clock: Clock) -> None:
        self.store = store
        self.clock = clock

    def export(self) -> dict[str, Any]:
        """Return the full backup document."""
        with self.store.lock:
            snapshot = self.store.snapshot()
            totals = compute_totals(list(self.store.transactions.values()))

        return {
            "transactions": snapshot["transactions"],
            "scheduled_transactions": snapshot["scheduled_transactions"],
            "settings": snapshot["settings"],
            "summary": {
                "receitas": float(totals.income),
                "despesas": float(totals.expense),
            },
            "metadata": {
                "version": settings.app_version,
                "total_transactions": len(snapshot["transactions"]),
            },
            "exportDate": self.clock.now().isoformat(),
        }

    def import_data(self, document: Any) -> dict[str, int]:
        """Replace the ledger with a backup document's contents."""
        if not isinstance(document, Mapping):
            raise ValidationError(INVALID_BACKUP)

        rows = document.get("transactions")
        if rows is None:
            rows = document.get("expenses")
        if not isinstance(rows, list):
            raise ValidationError(INVALID_BACKUP)
        scheduled_rows = document.get("scheduled_transactions")
        if scheduled_rows is None:
            scheduled_rows = document.get("scheduledTransactions", [])
        if not isinstance(scheduled_rows, list):
            raise ValidationError(INVALID_BACKUP)
        raw_preferences = document.get("settings")

        try:
            transactions = [
                normalize_amount(Transaction.model_validate(normalize_row(row)))
                for row in rows
            ]
            scheduled = [
                normalize_amount(ScheduledTransaction.model_validate(normalize_row(row)))
                for row in scheduled_rows
            ]
            preferences = (
                Preferences.model_validate(raw_preferences)
                if isinstance(raw_preferences, Mapping)
                else None
            )
        except SchemaError as exc:
            raise ValidationError(INVALID_BACKUP) from exc

        if has_duplicate_ids(transactions, scheduled):
            raise ValidationError("Backup contém ids duplicados")

        with self.store.lock:
            self.store.replace(
                transactions=transactions,
                scheduled=scheduled,
                preferences=preferences,
            )
            self.store.persist()
            LedgerService(self.store, self.clock).refresh_overdue()

        logger.info(
            "Backup restored with %s transactions and %s scheduled entries",
            len(transactions),
            len(scheduled),
        )
        return {"transactions": len(transactions), "scheduled_transactions": len(scheduled)}
