"""Snapshot persistence tests."""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from pathlib import Path

from contudo.schemas.preferences import PreferencesUpdate
from contudo.services.common import LedgerStore
from contudo.services.ledger_service import LedgerService
from contudo.services.preferences_service import PreferencesService
from contudo.utils.storage import JsonFileStorage, NullStorage, build_storage
from contudo.utils.time import FixedClock


def test_build_storage_without_file() -> None:
    """An empty data file setting should disable persistence."""
    assert isinstance(build_storage(""), NullStorage)
    assert isinstance(build_storage("ledger.json"), JsonFileStorage)


def test_every_mutation_is_persisted(tmp_path: Path, clock: FixedClock) -> None:
    """Adds, payments and deletes should rewrite the data file."""
    path = tmp_path / "contudo-data.json"
    store = LedgerStore(JsonFileStorage(path))
    ledger = LedgerService(store, clock)

    rent = ledger.add("Aluguel", 1500, "despesa", due_date=date(2025, 1, 15))
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["transactions"][0]["amount"] == -1500.0
    assert saved["next_id"] == 2

    ledger.mark_paid(rent.id)
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["transactions"][0]["is_paid"] is True

    ledger.delete(rent.id)
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["transactions"] == []
    assert saved["next_id"] == 2


def test_load_restores_snapshot(tmp_path: Path, clock: FixedClock) -> None:
    """A new store should pick up the saved ledger and preferences."""
    path = tmp_path / "data.json"
    first = LedgerStore(JsonFileStorage(path))
    LedgerService(first, clock).add("Salário", 5000, "receita")
    PreferencesService(first).update(PreferencesUpdate(theme="dark"))

    second = LedgerStore(JsonFileStorage(path))
    assert second.load() is True
    assert second.transactions[1].description == "Salário"
    assert second.preferences.theme == "dark"
    assert second.preferences.currency == "BRL"
    assert second.next_id == 2


def test_load_merges_partial_settings(tmp_path: Path) -> None:
    """Missing keys in the saved document should keep their defaults."""
    path = tmp_path / "data.json"
    path.write_text(json.dumps({"settings": {"language": "en-US"}}), encoding="utf-8")

    store = LedgerStore(JsonFileStorage(path))
    assert store.load() is True
    assert store.preferences.language == "en-US"
    assert store.preferences.theme == "light"
    assert store.transactions == {}


def test_unreadable_file_is_ignored(tmp_path: Path) -> None:
    """Corrupt data files should be logged and skipped."""
    path = tmp_path / "data.json"
    path.write_text("{not json", encoding="utf-8")

    store = LedgerStore(JsonFileStorage(path))
    assert store.load() is False
    assert store.next_id == 1


def test_write_failure_is_swallowed(tmp_path: Path, clock: FixedClock) -> None:
    """A failing write should not undo the in-memory change."""
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = LedgerStore(JsonFileStorage(blocker / "data.json"))

    record = LedgerService(store, clock).add("Salário", 5000, "receita")

    assert store.transactions[record.id] == record
    assert store.persist() is False


def test_load_resigns_hand_edited_amounts(tmp_path: Path) -> None:
    """Persisted amounts should follow their type and be rounded to cents."""
    path = tmp_path / "contudo-data.json"
    row = {"id": 1, "description": "Aluguel", "amount": 1500.004, "type": "despesa"}
    path.write_text(json.dumps({"transactions": [{**row, "date": "2025-01-05"}]}))

    store = LedgerStore(JsonFileStorage(path))

    assert store.load() is True
    assert store.transactions[1].amount == Decimal("-1500.00")


def test_load_rejects_duplicate_ids(tmp_path: Path) -> None:
    """A data file reusing an id across collections should be ignored."""
    path = tmp_path / "contudo-data.json"
    data = {
        "transactions": [
            {
                "id": 1,
                "description": "Aluguel",
                "amount": -10,
                "type": "despesa",
                "date": "2025-01-05",
            }
        ],
        "scheduled_transactions": [
            {
                "id": 1,
                "description": "Internet",
                "amount": -89.9,
                "type": "despesa",
                "scheduled_date": "2025-02-01",
            }
        ],
    }
    path.write_text(json.dumps(data))

    store = LedgerStore(JsonFileStorage(path))

    assert store.load() is False
    assert store.transactions == {}
    assert store.scheduled == {}
