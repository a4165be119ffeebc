import pandas as pd

from sales_insights.aggregation import AggregateState, aggregate
from sales_insights.coercion import coerce_rows
from sales_insights.kpis import KPISet, MonthlySales, growth_rate, synthesize


def _kpis(rows):
    return synthesize(aggregate(coerce_rows(rows)))


def test_average_ticket_uses_present_amounts_only():
    kpis = _kpis([{"valor": "10"}, {"valor": "30"}, {"valor": "n/a"}])
    assert kpis.total_sales == 40.0
    assert kpis.average_ticket == 20.0


def test_average_ticket_is_zero_without_amounts():
    kpis = _kpis([{"valor": "x", "produto": "A"}])
    assert kpis.average_ticket == 0
    assert kpis.total_sales == 0


def test_top_product_is_by_count_not_amount():
    kpis = _kpis([
        {"valor": "1000", "produto": "Caro"},
        {"valor": "1", "produto": "Barato"},
        {"valor": "1", "produto": "Barato"},
    ])
    assert kpis.top_product == "Barato"


def test_ties_go_to_first_encountered():
    kpis = _kpis([
        {"produto": "B", "cliente": "Z"},
        {"produto": "A", "cliente": "Y"},
        {"produto": "A", "cliente": "Y"},
        {"produto": "B", "cliente": "Z"},
    ])
    assert kpis.top_product == "B"
    assert kpis.top_customer == "Z"


def test_top_fields_absent_without_values():
    kpis = _kpis([{"valor": "5"}])
    assert kpis.top_product is None
    assert kpis.top_customer is None
    assert kpis.to_dict()["produtoMaisVendido"] == ""


def test_sales_by_product_lists_every_product():
    kpis = _kpis([
        {"valor": "10", "produto": "A"},
        {"valor": "abc", "produto": "B"},
        {"valor": "5", "produto": "A"},
    ])
    assert [p.to_dict() for p in kpis.sales_by_product] == [
        {"produto": "A", "quantidade": 2, "valor": 15.0},
        {"produto": "B", "quantidade": 1, "valor": 0.0},
    ]


def test_growth_between_first_and_last_month():
    kpis = _kpis([
        {"valor": "200", "data": "2024-03-01"},
        {"valor": "100", "data": "2024-01-01"},
        {"valor": "999", "data": "2024-02-01"},
    ])
    assert [m.month for m in kpis.sales_by_month] == ["2024-01", "2024-02", "2024-03"]
    assert kpis.growth_percent == 100.0


def test_growth_is_zero_for_single_month_or_zero_start():
    assert growth_rate([MonthlySales("2024-01", 10.0)]) == 0.0
    assert growth_rate([]) == 0.0
    assert growth_rate([MonthlySales("2024-01", 0.0), MonthlySales("2024-02", 50.0)]) == 0.0


def test_negative_growth():
    months = [MonthlySales("2024-01", 200.0), MonthlySales("2024-02", 50.0)]
    assert growth_rate(months) == -75.0


def test_synthesize_sorts_unsorted_month_state():
    state = AggregateState(
        total=3.0,
        amount_count=2,
        month_amounts=pd.Series({"2024-02": 2.0, "2024-01": 1.0}),
    )
    kpis = synthesize(state)
    assert [m.month for m in kpis.sales_by_month] == ["2024-01", "2024-02"]
    assert kpis.average_ticket == 1.5
    assert kpis.growth_percent == 100.0


def test_to_dict_keys():
    payload = KPISet().to_dict()
    assert set(payload) == {
        "totalVendas",
        "ticketMedio",
        "produtoMaisVendido",
        "clienteMaisFrequente",
        "vendasPorMes",
        "vendasPorProduto",
        "crescimentoPercentual",
    }
