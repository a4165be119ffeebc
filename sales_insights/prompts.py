"""Prompt templates sent to the text-generation service."""

from __future__ import annotations

import json
from typing import Any, List

from .kpis import KPISet

NARRATIVE_PROMPT = """Você é um analista de vendas experiente. Analise os seguintes KPIs e forneça insights estratégicos em português:

DADOS ANALISADOS:
- Total de registros: {row_count}
- Total de vendas: R$ {total:.2f}
- Ticket médio: R$ {average:.2f}
- Produto mais vendido: {top_product}
- Cliente mais frequente: {top_customer}
- Crescimento no período: {growth:.1f}%
- Número de produtos únicos: {product_count}
- Período analisado: {month_count} meses

INSTRUÇÕES:
1. Forneça insights estratégicos sobre o desempenho das vendas
2. Identifique oportunidades de melhoria
3. Sugira ações práticas baseadas nos dados
4. Seja conciso mas informativo (máximo 200 palavras)
5. Use linguagem profissional mas acessível

Retorne apenas o texto dos insights, sem formatação adicional."""


def build_narrative_prompt(kpis: KPISet, row_count: int) -> str:
    return NARRATIVE_PROMPT.format(
        row_count=row_count,
        total=kpis.total_sales,
        average=kpis.average_ticket,
        top_product=kpis.top_product or "",
        top_customer=kpis.top_customer or "",
        growth=kpis.growth_percent,
        product_count=len(kpis.sales_by_product),
        month_count=len(kpis.sales_by_month),
    )


# dashboard type -> (title, explanation)
DASHBOARD_CONTEXTS = {
    "vendas-por-mes": (
        "Vendas por Mês",
        "Este gráfico mostra a evolução das vendas ao longo do tempo.",
    ),
    "vendas-por-produto": (
        "Vendas por Produto",
        "Este gráfico mostra a performance de cada produto em termos de quantidade e valor.",
    ),
    "kpis-gerais": (
        "KPIs Gerais",
        "Este dashboard apresenta os principais indicadores de performance das vendas.",
    ),
    "crescimento": (
        "Crescimento",
        "Este indicador mostra a variação percentual no período analisado.",
    ),
}

CHAT_SYSTEM_PROMPT = """Você é um analista de vendas especializado. Analise os dados do dashboard fornecido e responda às perguntas do usuário de forma clara, profissional e objetiva.

Contexto do Dashboard:
{context}

Instruções:
1. Seja específico sobre os dados apresentados
2. Foque nos pontos-chave e insights mais relevantes
3. Responda de forma concisa, em no máximo 3 a 5 frases
4. Use linguagem profissional mas acessível
5. Se não souber algo, admita e sugira como investigar
6. Responda em português"""

DEFAULT_CHAT_QUESTION = "Analise este dashboard e forneça insights sobre o desempenho apresentado."


def build_dashboard_context(dashboard_data: Any, dashboard_type: str) -> str:
    """Describe a dashboard panel and its data for the assistant."""

    data = json.dumps(dashboard_data, ensure_ascii=False, default=str)
    lines: List[str]
    if dashboard_type in DASHBOARD_CONTEXTS:
        title, explanation = DASHBOARD_CONTEXTS[dashboard_type]
        lines = [f"Dashboard: {title}", f"Dados: {data}", f"Análise: {explanation}"]
    else:
        lines = [f"Dashboard: {dashboard_type}", f"Dados: {data}"]
    return "\n".join(lines)
