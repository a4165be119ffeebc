"""Canonical sales fields and alias matching for loosely named columns.

Uploaded spreadsheets rarely agree on header names: the same amount column
shows up as ``valor``, ``Valor_Total``, ``price`` or ``vlr``.  Every row is
therefore mapped onto four canonical fields through a fixed alias table and a
permissive, symmetric substring rule.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class CanonicalField(str, Enum):
    """Semantic role of a column.  The value is the primary column name."""

    AMOUNT = "valor"
    DATE = "data"
    PRODUCT = "produto"
    CUSTOMER = "cliente"


COLUMN_ALIASES: Mapping[CanonicalField, Tuple[str, ...]] = {
    CanonicalField.AMOUNT: ("preco", "price", "total", "amount", "vlr"),
    CanonicalField.DATE: ("date", "data_venda", "created_at", "timestamp"),
    CanonicalField.PRODUCT: ("product", "item", "produto_nome", "nome_produto"),
    CanonicalField.CUSTOMER: (
        "customer",
        "client",
        "cliente_nome",
        "nome_cliente",
        "comprador",
    ),
}


def clean_column_name(name: Any) -> str:
    return str(name).strip().lower()


def accepted_names(field: CanonicalField) -> Tuple[str, ...]:
    """Return the primary name followed by the aliases of ``field``."""

    return (field.value,) + COLUMN_ALIASES[field]


def matches_field(column: Any, field: CanonicalField) -> bool:
    """Return ``True`` when ``column`` refers to ``field``.

    The comparison is case-insensitive and ignores surrounding whitespace.
    A column matches when it contains the primary name or an alias, or when
    one of those names contains the column (so ``vlr`` and ``valor_total``
    both resolve to the amount).  Blank headers never match.
    """

    key = clean_column_name(column)
    if not key:
        return False
    return any(name in key or key in name for name in accepted_names(field))


def resolve_field(field: CanonicalField, row: Mapping[Any, Any]) -> Optional[Any]:
    """Return the first key of ``row`` matching ``field`` or ``None``."""

    for key in row:
        if matches_field(key, field):
            return key
    return None


def resolve_fields(row: Mapping[Any, Any]) -> Dict[CanonicalField, Optional[Any]]:
    """Resolve every canonical field for a single raw row."""

    return {field: resolve_field(field, row) for field in CanonicalField}
