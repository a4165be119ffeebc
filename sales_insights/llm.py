"""Thin wrapper around the OpenAI-compatible chat-completions API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from .config import NarrativeSettings
from .errors import NarrativeUnavailable

logger = logging.getLogger(__name__)

Message = Dict[str, str]


def create_client(settings: NarrativeSettings, api_key: Optional[str]) -> Optional[OpenAI]:
    """Return a client for ``settings.base_url`` or ``None`` without a key.

    Retries are disabled: a report makes at most one attempt and falls back
    to local text on failure.
    """

    if not api_key:
        return None
    return OpenAI(
        api_key=api_key,
        base_url=settings.base_url,
        timeout=settings.timeout,
        max_retries=0,
    )


def extract_text(response: Any) -> str:
    """Return the stripped message text of a completion response."""

    try:
        content = response.choices[0].message.content
    except (AttributeError, IndexError, TypeError) as exc:
        raise NarrativeUnavailable("Resposta malformada do serviço de texto") from exc
    if not isinstance(content, str) or not content.strip():
        raise NarrativeUnavailable("Resposta vazia do serviço de texto")
    return content.strip()


def complete(
    client: Any,
    settings: NarrativeSettings,
    messages: List[Message],
    *,
    temperature: float,
    max_tokens: int,
) -> str:
    """Send one chat-completions request and return the answer text."""

    if client is None:
        raise NarrativeUnavailable("Chave da API de texto não configurada")
    try:
        response = client.chat.completions.create(
            model=settings.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            extra_headers={"HTTP-Referer": settings.referer, "X-Title": settings.title},
        )
    except OpenAIError as exc:
        raise NarrativeUnavailable(f"Erro na API de texto: {exc}") from exc
    text = extract_text(response)
    logger.debug("Completion received (%d chars)", len(text))
    return text
