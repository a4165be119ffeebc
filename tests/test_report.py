import pytest

from sales_insights import report as report_module
from sales_insights.errors import InputError, InternalError, NarrativeUnavailable
from sales_insights.narrative import ReportStage, TemplateSummarizer, TextSummarizer
from sales_insights.report import build_report, compute_kpis

SCENARIO_A = [
    {"valor": "100", "produto": "X", "cliente": "A", "data": "2024-01-05"},
    {"valor": "200", "produto": "X", "cliente": "B", "data": "2024-02-10"},
]
COLUMNS = ["valor", "produto", "cliente", "data"]


class UnreachableSummarizer(TextSummarizer):
    def summarize(self, kpis, row_count):
        raise NarrativeUnavailable("collaborator unreachable")


class StaticSummarizer(TextSummarizer):
    def summarize(self, kpis, row_count):
        return f"{row_count} linhas analisadas."


class CrashingSummarizer(TextSummarizer):
    def summarize(self, kpis, row_count):
        raise RuntimeError("socket closed")


def test_scenario_a_kpis():
    report = build_report(SCENARIO_A, COLUMNS)
    kpis = report.kpis
    assert kpis.total_sales == 300
    assert kpis.average_ticket == 150
    assert kpis.top_product == "X"
    assert kpis.sales_by_product[0].quantity == 2
    assert [m.to_dict() for m in kpis.sales_by_month] == [
        {"mes": "2024-01", "valor": 100.0},
        {"mes": "2024-02", "valor": 200.0},
    ]
    assert kpis.growth_percent == 100


def test_scenario_b_unparseable_amount_still_counts_product():
    rows = SCENARIO_A + [{"valor": "abc", "produto": "Y", "cliente": "C", "data": "2024-02-20"}]
    kpis = build_report(rows, COLUMNS).kpis
    assert kpis.total_sales == 300
    assert kpis.average_ticket == 150
    products = {p.product: p for p in kpis.sales_by_product}
    assert products["Y"].quantity == 1
    assert products["Y"].amount == 0.0


def test_fallback_narrative_matches_template_for_scenario_a():
    report = build_report(SCENARIO_A, COLUMNS, summarizer=UnreachableSummarizer())
    expected = TemplateSummarizer().summarize(report.kpis, 2)
    assert report.narrative == expected
    assert report.narrative.startswith("Análise baseada em 2 vendas: Total de R$ 300.00")


def test_remote_narrative_is_used_when_available():
    report = build_report(SCENARIO_A, COLUMNS, summarizer=StaticSummarizer())
    assert report.narrative == "2 linhas analisadas."


def test_report_serialises_flat_json_object():
    payload = build_report(SCENARIO_A, COLUMNS).to_dict()
    assert set(payload) == {"dadosEstruturados", "kpis", "resumo", "colunasDisponiveis"}
    assert payload["dadosEstruturados"] == SCENARIO_A
    assert payload["colunasDisponiveis"] == COLUMNS
    assert payload["kpis"]["totalVendas"] == 300
    assert payload["kpis"]["crescimentoPercentual"] == 100


def test_sample_is_limited_to_first_rows():
    rows = [{"valor": str(i), "produto": "P"} for i in range(25)]
    report = build_report(rows, ["valor", "produto"])
    assert len(report.structured_sample) == 10
    assert report.structured_sample[0] == {"valor": "0", "produto": "P"}
    assert report.kpis.total_sales == sum(range(25))


@pytest.mark.parametrize("rows", [[], None, "valor,produto", {"valor": "1"}, [1, 2]])
def test_invalid_rows_are_rejected(rows):
    with pytest.raises(InputError):
        build_report(rows, COLUMNS)


def test_progress_stages_in_order():
    stages = []
    build_report(SCENARIO_A, COLUMNS, summarizer=UnreachableSummarizer(), progress=stages.append)
    assert stages == [
        ReportStage.IDLE,
        ReportStage.AGGREGATING,
        ReportStage.SYNTHESIZING,
        ReportStage.NARRATIVE_REQUESTED,
        ReportStage.NARRATIVE_FAILED,
        ReportStage.FALLBACK_COMPOSED,
        ReportStage.DONE,
    ]


def test_internal_fault_raises_without_partial_report(monkeypatch):
    def broken(state):
        raise KeyError("boom")

    monkeypatch.setattr(report_module, "synthesize", broken)
    with pytest.raises(InternalError) as excinfo:
        build_report(SCENARIO_A, COLUMNS)
    assert isinstance(excinfo.value.cause, KeyError)


def test_compute_kpis_without_narrative():
    assert compute_kpis(SCENARIO_A).total_sales == 300


def test_unexpected_summarizer_fault_falls_back_to_template():
    stages = []
    report = build_report(SCENARIO_A, COLUMNS, summarizer=CrashingSummarizer(), progress=stages.append)
    assert report.narrative == TemplateSummarizer().summarize(report.kpis, 2)
    assert stages[-3:] == [
        ReportStage.NARRATIVE_FAILED,
        ReportStage.FALLBACK_COMPOSED,
        ReportStage.DONE,
    ]


def test_text_amounts_use_leading_number_and_skip_infinity():
    rows = [
        {"valor": "100.5abc", "produto": "X"},
        {"valor": "150 reais", "produto": "X"},
        {"valor": "inf", "produto": "Y"},
    ]
    kpis = compute_kpis(rows)
    assert kpis.total_sales == 250.5
    assert kpis.average_ticket == 125.25
    assert kpis.to_dict()["totalVendas"] == 250.5
