"""Derived sales KPIs: averages, rankings and month-over-month growth."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

import pandas as pd

from .aggregation import AggregateState


@dataclass(frozen=True)
class MonthlySales:
    month: str
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {"mes": self.month, "valor": self.amount}


@dataclass(frozen=True)
class ProductSales:
    product: str
    quantity: int
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {"produto": self.product, "quantidade": self.quantity, "valor": self.amount}


@dataclass(frozen=True)
class KPISet:
    """Immutable snapshot of the metrics computed for one report."""

    total_sales: float = 0.0
    average_ticket: float = 0.0
    top_product: Optional[str] = None
    top_customer: Optional[str] = None
    sales_by_month: Tuple[MonthlySales, ...] = field(default_factory=tuple)
    sales_by_product: Tuple[ProductSales, ...] = field(default_factory=tuple)
    growth_percent: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Serialise using the keys expected by the dashboard client."""

        return {
            "totalVendas": self.total_sales,
            "ticketMedio": self.average_ticket,
            "produtoMaisVendido": self.top_product or "",
            "clienteMaisFrequente": self.top_customer or "",
            "vendasPorMes": [m.to_dict() for m in self.sales_by_month],
            "vendasPorProduto": [p.to_dict() for p in self.sales_by_product],
            "crescimentoPercentual": self.growth_percent,
        }


def _top_by_count(counts: pd.Series) -> Optional[str]:
    # idxmax returns the first label on ties, i.e. the first one encountered
    if counts.empty:
        return None
    return str(counts.idxmax())


def growth_rate(sales_by_month: Sequence[MonthlySales]) -> float:
    """Percent change between the first and the last month.

    Returns 0 with fewer than two months or when the first month sums to 0.
    """

    if len(sales_by_month) < 2:
        return 0.0
    first = sales_by_month[0].amount
    last = sales_by_month[-1].amount
    if first == 0:
        return 0.0
    return (last - first) / first * 100


def synthesize(state: AggregateState) -> KPISet:
    """Derive the final :class:`KPISet` from an aggregate state."""

    average = state.total / state.amount_count if state.amount_count else 0.0

    sales_by_product = tuple(
        ProductSales(
            product=str(product),
            quantity=int(count),
            amount=float(state.product_amounts.get(product, 0.0)),
        )
        for product, count in state.product_counts.items()
    )
    sales_by_month = tuple(
        MonthlySales(month=str(month), amount=float(amount))
        for month, amount in state.month_amounts.sort_index().items()
    )

    return KPISet(
        total_sales=state.total,
        average_ticket=average,
        top_product=_top_by_count(state.product_counts),
        top_customer=_top_by_count(state.customer_counts),
        sales_by_month=sales_by_month,
        sales_by_product=sales_by_product,
        growth_percent=growth_rate(sales_by_month),
    )
