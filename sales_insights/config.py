"""Settings loaded from an optional YAML file plus environment secrets."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

API_KEY_ENV_VARS = ("OPENROUTER_API_KEY", "OPENAI_API_KEY")
DEFAULT_SAMPLE_SIZE = 10


@dataclass
class NarrativeSettings:
    """Connection parameters for the text-generation service."""

    enabled: bool = True
    model: str = "deepseek/deepseek-chat-v3.1:free"
    base_url: str = "https://openrouter.ai/api/v1"
    temperature: float = 0.3
    max_tokens: int = 500
    timeout: float = 30.0
    referer: str = "http://localhost:3000"
    title: str = "Dashboard Vendas IA"


@dataclass
class ChatSettings:
    temperature: float = 0.3
    max_tokens: int = 400


@dataclass
class Settings:
    narrative: NarrativeSettings = field(default_factory=NarrativeSettings)
    chat: ChatSettings = field(default_factory=ChatSettings)
    sample_size: int = DEFAULT_SAMPLE_SIZE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "narrative": asdict(self.narrative),
            "chat": asdict(self.chat),
            "report": {"sample_size": self.sample_size},
        }


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Seção de configuração inválida: {name}")
    return section


def settings_from_dict(raw: Dict[str, Any]) -> Settings:
    """Build :class:`Settings` from a parsed YAML mapping.

    Unknown keys inside a section raise ``TypeError`` from the dataclass
    constructor, which surfaces typos in the settings file early.
    """

    if not isinstance(raw, dict):
        raise ValueError("O arquivo de configuração deve conter um mapeamento YAML.")
    report = _section(raw, "report")
    return Settings(
        narrative=NarrativeSettings(**_section(raw, "narrative")),
        chat=ChatSettings(**_section(raw, "chat")),
        sample_size=int(report.get("sample_size", DEFAULT_SAMPLE_SIZE)),
    )


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from YAML, falling back to defaults when absent."""

    if path is None:
        return Settings()
    file_path = Path(path)
    if not file_path.exists():
        return Settings()
    with open(file_path, "r", encoding="utf-8") as fp:
        raw = yaml.safe_load(fp) or {}
    return settings_from_dict(raw)


def save_settings(path: str, settings: Settings) -> None:
    """Persist settings back to YAML."""

    with open(path, "w", encoding="utf-8") as fp:
        yaml.safe_dump(settings.to_dict(), fp, allow_unicode=True)


def get_api_key() -> Optional[str]:
    """Return the text-generation API key from the environment, if any."""

    for name in API_KEY_ENV_VARS:
        key = os.getenv(name)
        if key and key.strip():
            return key.strip()
    return None
