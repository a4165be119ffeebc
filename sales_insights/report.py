"""Report pipeline: raw rows to KPIs and narrative for one request."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .aggregation import aggregate
from .coercion import coerce_rows
from .config import DEFAULT_SAMPLE_SIZE
from .errors import InputError, InternalError
from .kpis import KPISet, synthesize
from .narrative import ProgressCallback, ReportStage, TextSummarizer, compose_narrative, notify

logger = logging.getLogger(__name__)

EMPTY_ROWS_MESSAGE = "Dados CSV inválidos ou vazios"


@dataclass(frozen=True)
class Report:
    structured_sample: List[Mapping[str, Any]] = field(default_factory=list)
    kpis: KPISet = field(default_factory=KPISet)
    narrative: str = ""
    available_columns: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dadosEstruturados": [dict(row) for row in self.structured_sample],
            "kpis": self.kpis.to_dict(),
            "resumo": self.narrative,
            "colunasDisponiveis": list(self.available_columns),
        }


def check_rows(rows: Any) -> Sequence[Mapping[str, Any]]:
    """Reject anything that is not a non-empty sequence of mappings."""

    if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Sequence):
        raise InputError(EMPTY_ROWS_MESSAGE)
    if len(rows) == 0:
        raise InputError(EMPTY_ROWS_MESSAGE)
    if not all(isinstance(row, Mapping) for row in rows):
        raise InputError(EMPTY_ROWS_MESSAGE)
    return rows


def compute_kpis(rows: Sequence[Mapping[str, Any]]) -> KPISet:
    """Coerce, aggregate and synthesise without any narrative."""

    return synthesize(aggregate(coerce_rows(rows)))


def build_report(
    rows: Any,
    columns: Sequence[str],
    summarizer: Optional[TextSummarizer] = None,
    progress: Optional[ProgressCallback] = None,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> Report:
    """Build the full :class:`Report` for one request.

    Parameters
    ----------
    rows:
        Raw records, one mapping per CSV line.
    columns:
        Original header list, echoed back in the report.
    summarizer:
        Narrative source.  ``None`` uses the local template only.
    progress:
        Optional callback receiving each :class:`ReportStage`.
    sample_size:
        Number of raw rows copied into ``structured_sample``.
    """

    rows = check_rows(rows)
    notify(progress, ReportStage.IDLE)
    logger.info("Building report for %d rows", len(rows))

    notify(progress, ReportStage.AGGREGATING)
    try:
        state = aggregate(coerce_rows(rows))
        notify(progress, ReportStage.SYNTHESIZING)
        kpis = synthesize(state)
    except Exception as exc:
        logger.exception("Aggregation failed")
        raise InternalError("Falha ao calcular os indicadores", cause=exc) from exc

    narrative = compose_narrative(kpis, len(rows), summarizer, progress)
    report = Report(
        structured_sample=list(rows[:sample_size]),
        kpis=kpis,
        narrative=narrative,
        available_columns=list(columns),
    )
    notify(progress, ReportStage.DONE)
    return report
