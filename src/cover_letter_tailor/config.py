"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass(frozen=True)
class LLMConfig:
    letter_model: str = "claude-sonnet-4-5-20250929"
    email_model: str = "claude-haiku-4-5-20251001"
    chat_model: str = "claude-haiku-4-5-20251001"
    max_retries: int = 0
    timeout: int = 120
    max_tokens: int = 4096

    def __post_init__(self):
        if self.timeout < 1:
            raise ValueError(f"timeout must be >= 1, got {self.timeout}")
        if not 0 <= self.max_retries <= 5:
            raise ValueError(f"max_retries must be between 0 and 5, got {self.max_retries}")
        if self.max_tokens < 1:
            raise ValueError(f"max_tokens must be >= 1, got {self.max_tokens}")


@dataclass(frozen=True)
class GenerationConfig:
    letter_temperature: float = 0.5
    email_temperature: float = 0.7
    chat_temperature: float = 0.4
    web_search: bool = True
    web_search_max_uses: int = 3

    def __post_init__(self):
        for name in ("letter_temperature", "email_temperature", "chat_temperature"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")
        if not 1 <= self.web_search_max_uses <= 10:
            raise ValueError(
                f"web_search_max_uses must be between 1 and 10, got {self.web_search_max_uses}"
            )


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        generation=GenerationConfig(**raw.get("generation", {})),
    )
