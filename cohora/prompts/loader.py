"""PromptLoader: load and substitute prompt templates from .txt files.

Prompts are stored as .txt files alongside this module.
Template variables use {name} syntax and are substituted via format_map;
literal braces in a template are written as {{ and }}.

Usage::

    loader = PromptLoader()
    prompt = loader.load("match_system", connections="...", roster_json="...")
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class _SafeDict(dict):
    """Dict that returns '{key}' for missing keys instead of raising KeyError.

    Allows partial substitution: template vars that aren't provided
    stay as literal {name} in the output instead of crashing.
    """
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class PromptLoader:
    """Load prompt templates from cohora/prompts/*.txt."""

    def __init__(self, prompts_dir: Path | None = None) -> None:
        self._dir = prompts_dir or Path(__file__).parent
        self._cache: dict[str, str] = {}

    def load(self, prompt_name: str, **template_vars: Any) -> str:
        """Load a prompt template and substitute variables.

        Args:
            prompt_name: Filename without .txt.
            **template_vars: Variables to substitute in the template.

        Raises:
            FileNotFoundError: If the prompt file doesn't exist.
        """
        raw = self.load_raw(prompt_name)
        return raw.format_map(_SafeDict(template_vars))

    def load_raw(self, prompt_name: str) -> str:
        """Load a prompt template without any substitution."""
        if prompt_name in self._cache:
            return self._cache[prompt_name]

        path = self._dir / f"{prompt_name}.txt"
        if not path.exists():
            raise FileNotFoundError(f"Prompt '{prompt_name}' not found at {path}")

        text = path.read_text(encoding="utf-8")
        self._cache[prompt_name] = text
        return text

    def clear_cache(self) -> None:
        self._cache.clear()
