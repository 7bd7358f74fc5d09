"""API router package."""

from contudo.routers import backup, preferences, scheduled, transactions

__all__ = [
    "backup",
    "preferences",
    "scheduled",
    "transactions",
]
