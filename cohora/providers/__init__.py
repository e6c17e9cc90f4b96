"""LLM provider abstraction."""

from cohora.providers.base import LLMProvider, LLMResponse
from cohora.providers.litellm_provider import LiteLLMProvider

__all__ = ["LLMProvider", "LLMResponse", "LiteLLMProvider"]
