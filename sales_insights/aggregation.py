"""Grouped counts and sums over coerced sales rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import pandas as pd


def _empty_series(dtype: str) -> pd.Series:
    return pd.Series([], dtype=dtype)


@dataclass
class AggregateState:
    """Accumulated totals for a single report run.

    The group series keep first-encounter order of their keys, which the KPI
    step relies on for tie-breaking.  ``month_amounts`` is sorted by
    month-key.
    """

    total: float = 0.0
    amount_count: int = 0
    product_counts: pd.Series = field(default_factory=lambda: _empty_series("int64"))
    product_amounts: pd.Series = field(default_factory=lambda: _empty_series("float64"))
    customer_counts: pd.Series = field(default_factory=lambda: _empty_series("int64"))
    month_amounts: pd.Series = field(default_factory=lambda: _empty_series("float64"))


def month_key(date: Optional[str]) -> Optional[str]:
    """Return the ``YYYY-MM`` bucket of a date string."""

    if date is None:
        return None
    return date[:7]


def aggregate(coerced: pd.DataFrame) -> AggregateState:
    """Fold the output of :func:`coerce_rows` into an :class:`AggregateState`.

    Rows whose amount is NaN still count towards product and customer
    occurrences but never towards a sum.
    """

    amounts = coerced["amount"]
    present = amounts.notna()

    products = coerced[coerced["product"].notna()]
    by_product = products.groupby("product", sort=False)
    product_counts = by_product.size().astype("int64")
    # all-NaN groups sum to 0.0
    product_amounts = by_product["amount"].sum().astype("float64")

    customers = coerced[coerced["customer"].notna()]
    customer_counts = customers.groupby("customer", sort=False).size().astype("int64")

    dated = coerced[coerced["date"].notna() & present]
    month_amounts = (
        dated["amount"].groupby(dated["date"].map(month_key), sort=True).sum().astype("float64")
    )

    return AggregateState(
        total=float(amounts[present].sum()),
        amount_count=int(present.sum()),
        product_counts=product_counts,
        product_amounts=product_amounts,
        customer_counts=customer_counts,
        month_amounts=month_amounts,
    )
