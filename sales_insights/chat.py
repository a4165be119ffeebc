"""LLM backed assistant for questions about a dashboard panel."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .config import Settings, get_api_key
from .errors import InputError, NarrativeUnavailable
from .llm import complete, create_client
from .prompts import CHAT_SYSTEM_PROMPT, DEFAULT_CHAT_QUESTION, build_dashboard_context

logger = logging.getLogger(__name__)

UNAVAILABLE_ANSWER = (
    "Não foi possível consultar o assistente de IA no momento. "
    "Dados considerados:\n{context}"
)


@dataclass
class ChatMessage:
    role: str
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass
class DashboardAssistant:
    """Answers questions about one dashboard panel, keeping the history."""

    settings: Settings = field(default_factory=Settings)
    api_key: Optional[str] = None
    client: Any = None
    history: List[ChatMessage] = field(default_factory=list)

    def _client(self) -> Any:
        if self.client is None:
            self.client = create_client(self.settings.narrative, self.api_key or get_api_key())
        return self.client

    def ask(self, dashboard_data: Any, dashboard_type: str, question: Optional[str] = None) -> str:
        """Return an answer using the LLM when available.

        Without a question the assistant is asked for first impressions of
        the panel.  Only answered exchanges are added to the history.
        """

        if not dashboard_data or not dashboard_type:
            raise InputError("Dados do dashboard são obrigatórios")

        context = build_dashboard_context(dashboard_data, dashboard_type)
        user_message = ChatMessage(role="user", content=question or DEFAULT_CHAT_QUESTION)
        messages = [{"role": "system", "content": CHAT_SYSTEM_PROMPT.format(context=context)}]
        messages.extend(m.to_dict() for m in self.history)
        messages.append(user_message.to_dict())

        try:
            answer = complete(
                self._client(),
                self.settings.narrative,
                messages,
                temperature=self.settings.chat.temperature,
                max_tokens=self.settings.chat.max_tokens,
            )
        except NarrativeUnavailable as exc:
            logger.warning("Dashboard assistant unavailable: %s", exc)
            return UNAVAILABLE_ANSWER.format(context=context)

        self.history.append(user_message)
        self.history.append(ChatMessage(role="assistant", content=answer))
        return answer

    def reset(self) -> None:
        self.history.clear()
