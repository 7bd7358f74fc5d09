"""Backup and restore endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from contudo.dependencies import get_clock, get_store
from contudo.services.backup_service import BackupService
from contudo.services.common import LedgerStore
from contudo.utils.time import Clock

router = APIRouter()


@router.post("/backup")
def create_backup(
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Return a full JSON backup of the ledger."""
    return BackupService(store, clock).export()


@router.post("/restore")
def restore_backup(
    document: Any = Body(...),
    store: LedgerStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Replace all data with the contents of a backup document."""
    counts = BackupService(store, clock).import_data(document)
    return {"message": "Dados restaurados com sucesso", **counts}
