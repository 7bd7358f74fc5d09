"""Service package exports with lazy loading."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    "BackupService": "contudo.services.backup_service",
    "LedgerService": "contudo.services.ledger_service",
    "LedgerStore": "contudo.services.common",
    "PreferencesService": "contudo.services.preferences_service",
    "RecurrenceService": "contudo.services.recurrence_service",
}

__all__ = sorted(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(_EXPORTS[name])
    return getattr(module, name)
