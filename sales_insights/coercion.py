"""Extraction and type coercion of the canonical fields of raw rows."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

import numpy as np
import pandas as pd

from .fields import CanonicalField, resolve_field

COERCED_COLUMNS = ("amount", "date", "product", "customer")

_FIELD_COLUMNS = {
    CanonicalField.AMOUNT: "amount",
    CanonicalField.DATE: "date",
    CanonicalField.PRODUCT: "product",
    CanonicalField.CUSTOMER: "customer",
}

# numeric prefix of a text amount: "150 reais" -> "150", "1,5" -> "1"
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d+)?|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass(frozen=True)
class CoercedRow:
    """Canonical view of one raw row.  ``amount`` is NaN when absent."""

    amount: float = np.nan
    date: Optional[str] = None
    product: Optional[str] = None
    customer: Optional[str] = None

    @property
    def has_amount(self) -> bool:
        return not np.isnan(self.amount)


def _scalar_or_none(value: Any) -> Any:
    if value is None or isinstance(value, bool) or not pd.api.types.is_scalar(value):
        return None
    if pd.isna(value):
        return None
    return value


def _amount_or_none(value: Any) -> Any:
    value = _scalar_or_none(value)
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        value = match.group(1) if match else None
    return value


def _text_or_none(value: Any) -> Optional[str]:
    value = _scalar_or_none(value)
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    return text or None


def extract_fields(row: Mapping[Any, Any]) -> dict:
    """Return the raw value matched for every canonical field."""

    extracted = {}
    for canonical, column in _FIELD_COLUMNS.items():
        key = resolve_field(canonical, row)
        extracted[column] = row[key] if key is not None else None
    return extracted


def coerce_rows(rows: Iterable[Mapping[Any, Any]]) -> pd.DataFrame:
    """Coerce raw rows into a frame with one column per canonical field.

    ``amount`` is read from the leading number of text values and parsed with
    ``pd.to_numeric``.  Anything without a finite number becomes NaN and is
    left out of every sum and count downstream.  Text fields keep their
    matched value verbatim and blank values become ``None``.
    """

    raw = pd.DataFrame(
        [extract_fields(row) for row in rows],
        columns=list(COERCED_COLUMNS),
        dtype="object",
    )
    coerced = pd.DataFrame(index=raw.index)
    amount = pd.to_numeric(
        raw["amount"].map(_amount_or_none), errors="coerce"
    ).astype("float64")
    coerced["amount"] = amount.where(np.isfinite(amount))
    for column in ("date", "product", "customer"):
        coerced[column] = raw[column].map(_text_or_none).astype("object")
    return coerced


def coerce_row(row: Mapping[Any, Any]) -> CoercedRow:
    """Coerce a single raw row."""

    record = coerce_rows([row]).iloc[0]
    return CoercedRow(
        amount=float(record["amount"]),
        date=_text_or_none(record["date"]),
        product=_text_or_none(record["product"]),
        customer=_text_or_none(record["customer"]),
    )
