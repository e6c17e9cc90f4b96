"""Runtime configuration, read from the environment.

    COHORA_API_KEY            LLM API key (falls back to OPENAI_API_KEY)
    COHORA_MODEL              model id, default gpt-4o-mini
    COHORA_FALLBACK_MODELS    comma-separated models tried after the primary
    COHORA_API_BASE           custom endpoint
    COHORA_TEMPERATURE        sampling temperature, default 0.7
    COHORA_TIMEOUT            seconds per LLM call, default 45
    COHORA_DATA_DIR           directory holding students.json and user.json
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from cohora.providers.litellm_provider import DEFAULT_MODEL, LLM_CALL_TIMEOUT
from cohora.roster.person import DEFAULT_DATA_DIR


class ConfigError(Exception):
    """Raised when the app can't start with the given configuration."""


@dataclass
class CohoraConfig:
    """Configuration for a Cohora instance."""
    api_key: str = ""
    model: str = DEFAULT_MODEL
    fallback_models: list[str] = field(default_factory=list)
    api_base: str | None = None
    temperature: float = 0.7
    max_tokens: int = 1024
    timeout: float = LLM_CALL_TIMEOUT
    data_dir: Path = DEFAULT_DATA_DIR

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CohoraConfig:
        env = os.environ if environ is None else environ

        fallbacks = [
            m.strip() for m in env.get("COHORA_FALLBACK_MODELS", "").split(",") if m.strip()
        ]
        data_dir = env.get("COHORA_DATA_DIR")

        try:
            temperature = float(env.get("COHORA_TEMPERATURE", 0.7))
            timeout = float(env.get("COHORA_TIMEOUT", LLM_CALL_TIMEOUT))
        except ValueError as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e

        return cls(
            api_key=env.get("COHORA_API_KEY") or env.get("OPENAI_API_KEY", ""),
            model=env.get("COHORA_MODEL") or DEFAULT_MODEL,
            fallback_models=fallbacks,
            api_base=env.get("COHORA_API_BASE") or None,
            temperature=temperature,
            timeout=timeout,
            data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
        )

    def validate(self) -> None:
        if not self.api_key:
            raise ConfigError(
                "Missing API key. Set COHORA_API_KEY (or OPENAI_API_KEY) in the environment."
            )

    @property
    def model_chain(self) -> list[str]:
        """Primary model followed by fallbacks, or empty when none are set."""
        if not self.fallback_models:
            return []
        return [self.model] + [m for m in self.fallback_models if m != self.model]
