"""Application preferences service."""

from __future__ import annotations

from contudo.schemas.preferences import Preferences, PreferencesUpdate
from contudo.services.common import LedgerStore


class PreferencesService:
    """Read and merge the stored preferences document."""

    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def get(self) -> Preferences:
        return self.store.preferences

    def update(self, payload: PreferencesUpdate) -> Preferences:
        """Merge the provided fields over the current preferences."""
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        with self.store.lock:
            self.store.preferences = self.store.preferences.model_copy(update=changes)
            self.store.persist()
        return self.store.preferences
