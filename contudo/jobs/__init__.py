"""Background job modules for periodic Contudo tasks."""

from contudo.jobs.scheduled_rollover import scheduled_rollover

__all__ = [
    "scheduled_rollover",
]
