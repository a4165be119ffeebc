"""Exception hierarchy shared by the report pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .validation import ValidationResult


class SalesInsightsError(Exception):
    """Base class for every error raised by this package."""


class InputError(SalesInsightsError, ValueError):
    """The request payload cannot be processed (empty or malformed rows)."""


class InvalidColumnsError(InputError):
    """The header list lacks one of the canonical sales fields."""

    def __init__(self, validation: "ValidationResult"):
        super().__init__(validation.message)
        self.validation = validation


class NarrativeUnavailable(SalesInsightsError):
    """The text-generation collaborator failed or returned unusable content."""


class InternalError(SalesInsightsError):
    """Unexpected fault while aggregating; no partial report is produced."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
