"""Prompt templates shipped with the package."""

from cohora.prompts.loader import PromptLoader

__all__ = ["PromptLoader"]
