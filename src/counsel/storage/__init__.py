"""Storage adapters for the history log."""

from .sqlite_store import HistoryStore, PlanAlreadyCommittedError, RecordNotFoundError

__all__ = ["HistoryStore", "PlanAlreadyCommittedError", "RecordNotFoundError"]
