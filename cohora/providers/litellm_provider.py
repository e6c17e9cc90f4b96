"""LiteLLM provider implementation for multi-provider support.

Includes model fallback: on timeout or error, automatically retries once
with the next model in the fallback list.
"""

from __future__ import annotations

import asyncio
import time as _time
from typing import Any

import litellm
from litellm import acompletion
from loguru import logger

from cohora.providers.base import LLMProvider, LLMResponse

DEFAULT_MODEL = "gpt-4o-mini"

# Timeout for a single LLM call, generous but prevents infinite hangs
LLM_CALL_TIMEOUT: float = 45.0

# How long to stay on a fallback before trying the primary model again
RECOVERY_COOLDOWN: float = 300.0  # 5 minutes


class LiteLLMProvider(LLMProvider):
    """
    LLM provider using LiteLLM.

    Supports OpenAI, OpenRouter, Anthropic, Gemini and the rest of what
    LiteLLM routes to, through one interface. The API key is passed per
    request rather than through environment variables.

    Model fallback: on timeout or error, rotates to the next model in the
    fallback list and retries once. If the retry also fails (or there is
    no fallback list), returns an error response instead of raising.
    While on a fallback, the primary model is tried again once the
    recovery cooldown has passed.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_base: str | None = None,
        default_model: str = DEFAULT_MODEL,
        fallback_models: list[str] | None = None,
        timeout: float = LLM_CALL_TIMEOUT,
        recovery_cooldown: float = RECOVERY_COOLDOWN,
    ):
        super().__init__(api_key, api_base)
        self.default_model = default_model
        self._timeout = timeout
        self._recovery_cooldown = recovery_cooldown

        self._fallback_models = list(fallback_models or [])
        self._model_index = 0
        self._model_failures: dict[str, int] = {}
        self._last_rotation_time: float = 0.0
        self._last_recovery_attempt: float = 0.0

        # Disable LiteLLM logging noise
        litellm.suppress_debug_info = True
        # Drop unsupported parameters for providers (e.g. response_format)
        litellm.drop_params = True

    # ── Model fallback rotation ──────────────────────────────────────

    def _get_current_model(self, requested_model: str) -> str:
        """Get the current model, applying fallback rotation if models are configured."""
        if not self._fallback_models:
            return requested_model
        return self._fallback_models[self._model_index % len(self._fallback_models)]

    def _rotate_model(self) -> None:
        """Rotate to next fallback model after failure."""
        if not self._fallback_models:
            return
        old_model = self._fallback_models[self._model_index]
        self._model_index = (self._model_index + 1) % len(self._fallback_models)
        self._last_rotation_time = _time.time()
        new_model = self._fallback_models[self._model_index]
        logger.warning(f"LLM fallback: rotated from {old_model} → {new_model}")

    def _record_failure(self, model: str) -> None:
        """Track consecutive failures per model."""
        count = self._model_failures.get(model, 0) + 1
        self._model_failures[model] = count
        if count > 1:
            logger.warning(f"LLM {model} has failed {count} times in a row")

    # ── Model recovery ───────────────────────────────────────────────

    def _should_try_recovery(self) -> bool:
        """Whether to retry the primary model before using the fallback.

        True when there is a fallback chain, the primary is not the current
        model, and the cooldown has elapsed since both the last rotation
        and the last recovery attempt.
        """
        if len(self._fallback_models) < 2 or self._model_index == 0:
            return False
        now = _time.time()
        if now - self._last_recovery_attempt < self._recovery_cooldown:
            return False
        if now - self._last_rotation_time < self._recovery_cooldown:
            return False
        return True

    async def _attempt_recovery(
        self,
        messages: list[dict[str, Any]],
        max_tokens: int,
        temperature: float,
        response_format: dict[str, Any] | None,
    ) -> LLMResponse | None:
        """Send the real request to the primary model.

        On success, snap back to the primary and return the response.
        On failure, stay on the current fallback and return None; the
        failure is not counted against the primary.
        """
        self._last_recovery_attempt = _time.time()
        primary_model = self._fallback_models[0]
        current_model = self._fallback_models[self._model_index]
        logger.info(f"LLM recovery: trying {primary_model} (currently on {current_model})")

        try:
            response = await self._attempt_chat(
                primary_model, messages, max_tokens, temperature, response_format,
            )
        except Exception as e:
            logger.info(
                f"LLM recovery: {primary_model} still down ({type(e).__name__}), "
                f"staying on {current_model}"
            )
            return None

        self._model_index = 0
        self._model_failures[primary_model] = 0
        self._last_rotation_time = 0.0
        logger.info(f"LLM recovery: {primary_model} is back, switched from {current_model}")
        return response

    # ── Chat ─────────────────────────────────────────────────────────

    async def _attempt_chat(
        self,
        model: str,
        messages: list[dict[str, Any]],
        max_tokens: int,
        temperature: float,
        response_format: dict[str, Any] | None,
    ) -> LLMResponse:
        """Make a single LLM call with timeout. Raises on failure."""
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "max_tokens": max(1, max_tokens),
            "temperature": temperature,
        }

        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base
        if response_format:
            kwargs["response_format"] = response_format

        response = await asyncio.wait_for(
            acompletion(**kwargs),
            timeout=self._timeout,
        )
        return self._parse_response(response, model)

    async def chat(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        response_format: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """
        Send a chat completion request via LiteLLM with fallback rotation.

        Args:
            messages: List of message dicts with 'role' and 'content'.
            model: Model identifier (e.g., 'gpt-4o-mini').
            max_tokens: Maximum tokens in response.
            temperature: Sampling temperature.
            response_format: Optional structured-output hint.

        Returns:
            LLMResponse with content, or finish_reason="error".
        """
        requested = model or self.default_model
        current_model = self._get_current_model(requested)

        if self._should_try_recovery():
            recovered = await self._attempt_recovery(
                messages, max_tokens, temperature, response_format,
            )
            if recovered is not None:
                return recovered

        try:
            result = await self._attempt_chat(
                current_model, messages, max_tokens, temperature, response_format,
            )
            self._model_failures[current_model] = 0
            return result

        except asyncio.TimeoutError:
            logger.warning(f"LLM timeout after {self._timeout}s on {current_model}")
            error = f"timeout on {current_model}"

        except Exception as e:
            logger.warning(f"LLM error on {current_model}: {e}")
            error = str(e)

        self._record_failure(current_model)
        if len(self._fallback_models) < 2:
            logger.error(f"LLM call failed on {current_model}, no fallback configured")
            return LLMResponse(
                content=f"Error calling LLM: {error}",
                finish_reason="error",
                model=current_model,
            )
        self._rotate_model()

        # Retry once with the next fallback model
        fallback_model = self._get_current_model(requested)
        try:
            logger.info(f"LLM fallback retry with {fallback_model}")
            result = await self._attempt_chat(
                fallback_model, messages, max_tokens, temperature, response_format,
            )
            self._model_failures[fallback_model] = 0
            return result

        except asyncio.TimeoutError:
            logger.error(f"LLM fallback also timed out on {fallback_model}")
            self._record_failure(fallback_model)
            self._rotate_model()
            return LLMResponse(
                content=f"Error calling LLM: timeout on both {current_model} and {fallback_model}",
                finish_reason="error",
                model=fallback_model,
            )

        except Exception as e:
            logger.error(f"LLM fallback also failed on {fallback_model}: {e}")
            self._record_failure(fallback_model)
            self._rotate_model()
            return LLMResponse(
                content=f"Error calling LLM: {str(e)}",
                finish_reason="error",
                model=fallback_model,
            )

    def _parse_response(self, response: Any, model: str) -> LLMResponse:
        """Parse LiteLLM response into our standard format."""
        choice = response.choices[0]
        message = choice.message

        usage = {}
        if hasattr(response, "usage") and response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return LLMResponse(
            content=message.content,
            finish_reason=choice.finish_reason or "stop",
            usage=usage,
            model=model,
        )

    def get_default_model(self) -> str:
        """Get the default model."""
        return self.default_model
