"""Exception hierarchy shared by the store, pipelines and persistence layer."""

from __future__ import annotations

from typing import List, Optional, Sequence


class Bucks2BarError(Exception):
    """Base class for all errors surfaced to the presentation layer."""


class ValidationError(Bucks2BarError):
    """Raised when records fail field-level validation.

    ``issues`` holds the per-record diagnostics (``"Row 3: invalid amount"``).
    """

    def __init__(self, message: str, issues: Optional[Sequence[str]] = None) -> None:
        super().__init__(message)
        self.issues: List[str] = list(issues or [])


class FormatError(Bucks2BarError):
    """Raised for unsupported or unparseable import files."""


class NotFoundError(Bucks2BarError, LookupError):
    """Raised when a transaction id is not present in the store."""


class StorageError(Bucks2BarError):
    """Raised when the persistence layer cannot save or load data."""
