"""Composition root: wire roster, resolver, matcher and controller.

A UI shell calls build_controller() once at startup and then feeds user
text to ConversationController.handle_turn(). The app refuses to start
without an API key or with a broken roster.
"""

from __future__ import annotations

from loguru import logger

from cohora.config import CohoraConfig
from cohora.conversation.controller import ConversationController
from cohora.match.service import MatchService
from cohora.providers.base import LLMProvider
from cohora.providers.litellm_provider import LiteLLMProvider
from cohora.roster.graph import ConnectionResolver
from cohora.roster.person import Roster


def build_provider(config: CohoraConfig) -> LiteLLMProvider:
    return LiteLLMProvider(
        api_key=config.api_key,
        api_base=config.api_base,
        default_model=config.model,
        fallback_models=config.model_chain,
        timeout=config.timeout,
    )


def build_controller(
    config: CohoraConfig | None = None,
    *,
    provider: LLMProvider | None = None,
    roster: Roster | None = None,
) -> ConversationController:
    """Build a ready-to-use controller.

    Raises ConfigError when no provider is injected and the API key is
    missing, and RosterError when the roster can't be loaded.
    """
    config = config or CohoraConfig.from_env()
    if provider is None:
        config.validate()
        provider = build_provider(config)

    roster = roster or Roster.load(config.data_dir)
    resolver = ConnectionResolver(roster)
    match_service = MatchService(
        provider,
        roster,
        model=config.model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )

    logger.info(
        f"Cohora ready: {len(roster)} students, model={config.model}"
        + (f", fallbacks={config.fallback_models}" if config.fallback_models else "")
    )
    return ConversationController(match_service, resolver, roster)
