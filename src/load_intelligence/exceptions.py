"""Custom exception hierarchy for the intelligence engine."""

from __future__ import annotations


class LoadIntelligenceError(Exception):
    """Base exception for all load_intelligence errors."""


class HistoryUnavailableError(LoadIntelligenceError):
    """The workout history collaborator could not supply a snapshot."""

    def __init__(self, message: str, user_id: str | None = None) -> None:
        super().__init__(message)
        self.user_id = user_id


class CatalogUnavailableError(LoadIntelligenceError):
    """The exercise catalog collaborator could not supply metadata."""


class InvalidRecordError(LoadIntelligenceError):
    """A raw record is structurally unusable (missing id, bad timestamp)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
