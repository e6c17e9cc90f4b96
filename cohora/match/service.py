"""MatchService: ask the LLM which students fit a free-text query.

The roster (minus connection ids) and the user's direct connections go
into the system prompt; the model answers with JSON naming student ids
and a short reason per id. Language understanding is entirely the
model's job; this module only builds the request and reads the reply.
"""

from __future__ import annotations

import json
import re
from typing import Any, TYPE_CHECKING

from loguru import logger

from cohora.match.models import MatchResult, MatchServiceError
from cohora.prompts.loader import PromptLoader

if TYPE_CHECKING:
    from cohora.providers.base import LLMProvider
    from cohora.roster.person import Roster

JSON_RESPONSE_FORMAT = {"type": "json_object"}


class MatchService:
    """Turns a query into a MatchResult via one LLM call."""

    def __init__(
        self,
        provider: LLMProvider,
        roster: Roster,
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        loader: PromptLoader | None = None,
    ):
        self._provider = provider
        self._roster = roster
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._loader = loader or PromptLoader()
        self._system_prompt = self._build_system_prompt()

    @classmethod
    def from_api_key(cls, api_key: str, roster: Roster, **kwargs: Any) -> MatchService:
        """Build a service backed by LiteLLM for the given credential."""
        from cohora.providers.litellm_provider import DEFAULT_MODEL, LiteLLMProvider

        model = kwargs.pop("model", None) or DEFAULT_MODEL
        provider = LiteLLMProvider(api_key=api_key, default_model=model)
        return cls(provider, roster, model=model, **kwargs)

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    # ── Public API ─────────────────────────────────────────────────────

    async def match(self, query: str) -> MatchResult:
        """Send the query to the LLM and parse its reply.

        Raises MatchServiceError if the provider fails or returns nothing.
        A reply that isn't JSON is not an error: it comes back as the
        message with no matches.
        """
        messages = [
            {"role": "system", "content": self._system_prompt},
            {"role": "user", "content": query},
        ]

        response = await self._provider.chat(
            messages=messages,
            model=self._model,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            response_format=JSON_RESPONSE_FORMAT,
        )

        if response.is_error:
            raise MatchServiceError(response.content or "LLM call failed")

        content = response.content
        if not content:
            raise MatchServiceError("No response from LLM")

        result = self._parse_response(content)
        logger.debug(
            f"Match: {len(result.matched_ids)} ids for {query[:60]!r}"
            + (" (raw reply)" if result.raw else "")
        )
        return result

    # ── Internal ───────────────────────────────────────────────────────

    def _build_system_prompt(self) -> str:
        lines = [
            f"- {p.name} (ID: {p.id})" for p in self._roster.first_degree_connections()
        ]
        return self._loader.load(
            "match_system",
            connections="\n".join(lines),
            roster_json=json.dumps(self._roster.prompt_view(), indent=2, ensure_ascii=False),
        )

    def _parse_response(self, text: str) -> MatchResult:
        data = self._extract_json(text)
        if not isinstance(data, dict):
            logger.debug(f"Match: reply is not a JSON object, showing raw text: {text[:200]}")
            return MatchResult(message=text, raw=True)

        message = data.get("message")
        if not isinstance(message, str):
            message = "" if message is None else str(message)

        matched_ids: list[str] = []
        raw_ids = data.get("matchedStudentIds")
        if isinstance(raw_ids, list):
            matched_ids = [i for i in raw_ids if isinstance(i, str)]

        reasons: dict[str, str] = {}
        raw_reasons = data.get("matchReasons")
        if isinstance(raw_reasons, dict):
            reasons = {
                str(k): v for k, v in raw_reasons.items() if isinstance(v, str)
            }

        return MatchResult(message=message, matched_ids=matched_ids, match_reasons=reasons)

    @staticmethod
    def _extract_json(text: str) -> Any:
        """Extract JSON from LLM response, handling markdown blocks etc."""
        # Try raw JSON first
        try:
            return json.loads(text)
        except (json.JSONDecodeError, ValueError):
            pass

        # Try extracting from markdown code blocks
        json_match = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
        if json_match:
            try:
                return json.loads(json_match.group(1))
            except (json.JSONDecodeError, ValueError):
                pass

        # Try extracting first {...} block
        brace_match = re.search(r"\{[\s\S]*\}", text)
        if brace_match:
            try:
                return json.loads(brace_match.group())
            except (json.JSONDecodeError, ValueError):
                pass

        return None
