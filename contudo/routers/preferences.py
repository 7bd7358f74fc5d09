"""Preferences endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from contudo.dependencies import get_store
from contudo.schemas.preferences import Preferences, PreferencesUpdate
from contudo.services.common import LedgerStore
from contudo.services.preferences_service import PreferencesService

router = APIRouter()


@router.get("", response_model=Preferences)
def get_preferences(store: LedgerStore = Depends(get_store)) -> Preferences:
    """Return the stored preferences."""
    return PreferencesService(store).get()


@router.put("", response_model=Preferences)
def update_preferences(
    payload: PreferencesUpdate,
    store: LedgerStore = Depends(get_store),
) -> Preferences:
    """Merge new values into the preferences."""
    return PreferencesService(store).update(payload)
