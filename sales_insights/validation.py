"""Header pre-check run before any row is aggregated."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from .fields import CanonicalField, clean_column_name, matches_field

VALID_MESSAGE = "CSV válido! Colunas suficientes encontradas para gerar insights."


@dataclass
class ValidationResult:
    is_valid: bool
    missing_columns: List[str] = field(default_factory=list)
    available_columns: List[str] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "missingColumns": list(self.missing_columns),
            "availableColumns": list(self.available_columns),
            "message": self.message,
        }


def _missing_message(missing: List[str]) -> str:
    expected = ", ".join(f.value for f in CanonicalField)
    return (
        f"Colunas insuficientes para gerar insights. Faltam: {', '.join(missing)}. "
        f"Certifique-se de que seu CSV contém colunas com nomes similares a: {expected}."
    )


def validate_columns(columns: Iterable[Any]) -> ValidationResult:
    """Check that every canonical field is present under some alias.

    ``missing_columns`` lists the primary names of the absent fields in
    canonical order; ``available_columns`` echoes the original headers.
    """

    available = [str(col) for col in columns]
    missing = [
        canonical.value
        for canonical in CanonicalField
        if not any(matches_field(col, canonical) for col in available)
    ]
    is_valid = not missing
    return ValidationResult(
        is_valid=is_valid,
        missing_columns=missing,
        available_columns=available,
        message=VALID_MESSAGE if is_valid else _missing_message(missing),
    )


def normalize_column_name(name: Any) -> str:
    """Map a header onto its canonical primary name when one matches."""

    for canonical in CanonicalField:
        if matches_field(name, canonical):
            return canonical.value
    return clean_column_name(name)
