"""Helpers for converting the KPI set into natural language.

The narrative is an optional enrichment.  :class:`RemoteSummarizer` asks the
text-generation service for a short analysis; whenever that fails the
deterministic :class:`TemplateSummarizer` sentence is used instead, so a
report never depends on network availability.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Optional

from .config import NarrativeSettings, Settings, get_api_key
from .errors import NarrativeUnavailable
from .kpis import KPISet
from .llm import complete, create_client
from .prompts import build_narrative_prompt

logger = logging.getLogger(__name__)


class ReportStage(str, Enum):
    """Coarse progress of a single report request."""

    IDLE = "idle"
    AGGREGATING = "aggregating"
    SYNTHESIZING = "synthesizing"
    NARRATIVE_REQUESTED = "narrative_requested"
    NARRATIVE_RECEIVED = "narrative_received"
    NARRATIVE_FAILED = "narrative_failed"
    FALLBACK_COMPOSED = "fallback_composed"
    DONE = "done"


ProgressCallback = Callable[[ReportStage], None]


def notify(progress: Optional[ProgressCallback], stage: ReportStage) -> None:
    logger.debug("Report stage: %s", stage.value)
    if progress is not None:
        progress(stage)


class TextSummarizer(ABC):
    """Turns a KPI set into a short prose summary."""

    @abstractmethod
    def summarize(self, kpis: KPISet, row_count: int) -> str:
        """Return the summary or raise :class:`NarrativeUnavailable`."""


class TemplateSummarizer(TextSummarizer):
    """Deterministic local summary built only from the KPI values."""

    def summarize(self, kpis: KPISet, row_count: int) -> str:
        text = (
            f"Análise baseada em {row_count} vendas: "
            f"Total de R$ {kpis.total_sales:.2f} com ticket médio de R$ {kpis.average_ticket:.2f}. "
            f"Produto mais vendido: {kpis.top_product or ''}. "
            f"Cliente mais frequente: {kpis.top_customer or ''}."
        )
        if kpis.sales_by_month:
            text += f" Crescimento no período: {kpis.growth_percent:.1f}%."
        return text


class RemoteSummarizer(TextSummarizer):
    """Summary written by the chat-completions service (single attempt)."""

    def __init__(
        self,
        settings: Optional[NarrativeSettings] = None,
        api_key: Optional[str] = None,
        client: Any = None,
    ):
        self.settings = settings or NarrativeSettings()
        self.api_key = api_key
        self._client_instance = client

    def _client(self) -> Any:
        if self._client_instance is None:
            self._client_instance = create_client(self.settings, self.api_key)
        return self._client_instance

    def summarize(self, kpis: KPISet, row_count: int) -> str:
        prompt = build_narrative_prompt(kpis, row_count)
        return complete(
            self._client(),
            self.settings,
            [{"role": "user", "content": prompt}],
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
        )


def build_summarizer(settings: Optional[Settings] = None) -> TextSummarizer:
    """Pick the summarizer configured in ``settings``."""

    settings = settings or Settings()
    if not settings.narrative.enabled:
        return TemplateSummarizer()
    return RemoteSummarizer(settings.narrative, api_key=get_api_key())


def compose_narrative(
    kpis: KPISet,
    row_count: int,
    summarizer: Optional[TextSummarizer] = None,
    progress: Optional[ProgressCallback] = None,
) -> str:
    """Return the narrative for ``kpis``, falling back to the template.

    The summarizer is tried exactly once.  Whatever it raises, whether
    :class:`NarrativeUnavailable` or an unexpected fault of a custom
    summarizer, is logged and replaced by the template sentence; it never
    fails the report.
    """

    fallback = TemplateSummarizer()
    if summarizer is None or isinstance(summarizer, TemplateSummarizer):
        text = fallback.summarize(kpis, row_count)
        notify(progress, ReportStage.FALLBACK_COMPOSED)
        return text

    notify(progress, ReportStage.NARRATIVE_REQUESTED)
    try:
        text = summarizer.summarize(kpis, row_count)
    except Exception as exc:
        if isinstance(exc, NarrativeUnavailable):
            logger.warning("Narrative unavailable, using template summary: %s", exc)
        else:
            logger.warning(
                "Summarizer %s failed, using template summary: %r",
                type(summarizer).__name__,
                exc,
                exc_info=exc,
            )
        notify(progress, ReportStage.NARRATIVE_FAILED)
        text = fallback.summarize(kpis, row_count)
        notify(progress, ReportStage.FALLBACK_COMPOSED)
        return text
    notify(progress, ReportStage.NARRATIVE_RECEIVED)
    return text
