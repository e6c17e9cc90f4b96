"""Tests for MatchService: prompt building and reply parsing."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from cohora.match.models import MatchResult, MatchServiceError
from cohora.match.service import JSON_RESPONSE_FORMAT, MatchService
from cohora.providers.base import LLMResponse
from cohora.providers.litellm_provider import LiteLLMProvider
from cohora.roster.person import CurrentUser, Person, Project, Roster


# ── Helpers ──────────────────────────────────────────────────────────────


def make_provider(content: str | None = "", finish_reason: str = "stop") -> MagicMock:
    provider = MagicMock()
    provider.chat = AsyncMock(
        return_value=LLMResponse(content=content, finish_reason=finish_reason)
    )
    return provider


@pytest.fixture
def roster() -> Roster:
    return Roster(
        [
            Person(
                id="s1", name="Asha", skills=["Python"],
                projects=[Project("Scraper", "Web scraper")], connections=["s2"],
            ),
            Person(id="s2", name="Ben", skills=["React"], connections=["s1"]),
        ],
        CurrentUser(connections=["s2"]),
    )


GOOD_REPLY = json.dumps({
    "message": "I found 2 people for you:",
    "matchedStudentIds": ["s1", "s2"],
    "matchReasons": {"s1": "Python scraper", "s2": "React"},
})


# ── Prompt ──────────────────────────────────────────────────────────────


class TestPrompt:
    def test_lists_direct_connections(self, roster):
        service = MatchService(make_provider(), roster)
        assert "- Ben (ID: s2)" in service.system_prompt
        assert "- Asha (ID: s1)" not in service.system_prompt

    def test_roster_without_connection_ids(self, roster):
        prompt = MatchService(make_provider(), roster).system_prompt
        assert '"Scraper"' in prompt
        assert '"connections"' not in prompt

    @pytest.mark.asyncio
    async def test_request_shape(self, roster):
        provider = make_provider(GOOD_REPLY)
        service = MatchService(provider, roster, model="m", temperature=0.3)
        await service.match("Who knows Python?")

        kwargs = provider.chat.call_args.kwargs
        assert kwargs["model"] == "m"
        assert kwargs["temperature"] == 0.3
        assert kwargs["response_format"] == JSON_RESPONSE_FORMAT
        messages = kwargs["messages"]
        assert messages[0]["role"] == "system"
        assert messages[1] == {"role": "user", "content": "Who knows Python?"}

    def test_from_api_key(self, roster):
        service = MatchService.from_api_key("sk-test", roster, model="gpt-4o")
        assert isinstance(service._provider, LiteLLMProvider)
        assert service._provider.api_key == "sk-test"
        assert service._provider.get_default_model() == "gpt-4o"


# ── Parsing ─────────────────────────────────────────────────────────────


class TestParsing:
    @pytest.mark.asyncio
    async def test_full_reply(self, roster):
        result = await MatchService(make_provider(GOOD_REPLY), roster).match("q")
        assert result == MatchResult(
            message="I found 2 people for you:",
            matched_ids=["s1", "s2"],
            match_reasons={"s1": "Python scraper", "s2": "React"},
        )
        assert result.has_matches
        assert not result.raw

    @pytest.mark.asyncio
    async def test_conversational_reply(self, roster):
        reply = json.dumps({"message": "Hi! What skills are you looking for?"})
        result = await MatchService(make_provider(reply), roster).match("hello")
        assert result.message.startswith("Hi!")
        assert result.matched_ids == []
        assert result.match_reasons == {}
        assert not result.has_matches

    @pytest.mark.asyncio
    async def test_non_json_reply_is_raw(self, roster):
        result = await MatchService(make_provider("Sorry, no idea."), roster).match("q")
        assert result.raw
        assert result.message == "Sorry, no idea."
        assert result.matched_ids == []

    @pytest.mark.asyncio
    async def test_json_array_is_raw(self, roster):
        result = await MatchService(make_provider('["s1"]'), roster).match("q")
        assert result.raw
        assert result.message == '["s1"]'

    @pytest.mark.asyncio
    async def test_fenced_json(self, roster):
        text = f"Here you go:\n```json\n{GOOD_REPLY}\n```"
        result = await MatchService(make_provider(text), roster).match("q")
        assert result.matched_ids == ["s1", "s2"]

    @pytest.mark.asyncio
    async def test_bad_field_types_ignored(self, roster):
        reply = json.dumps({
            "message": "ok",
            "matchedStudentIds": "s1",
            "matchReasons": ["nope"],
        })
        result = await MatchService(make_provider(reply), roster).match("q")
        assert result.matched_ids == []
        assert result.match_reasons == {}

    @pytest.mark.asyncio
    async def test_non_string_ids_dropped(self, roster):
        reply = json.dumps({"message": "ok", "matchedStudentIds": ["s1", 7, None, "s2"]})
        result = await MatchService(make_provider(reply), roster).match("q")
        assert result.matched_ids == ["s1", "s2"]

    @pytest.mark.asyncio
    async def test_missing_message(self, roster):
        reply = json.dumps({"matchedStudentIds": ["s1"]})
        result = await MatchService(make_provider(reply), roster).match("q")
        assert result.message == ""
        assert result.matched_ids == ["s1"]


# ── Failures ────────────────────────────────────────────────────────────


class TestFailures:
    @pytest.mark.asyncio
    async def test_empty_content_raises(self, roster):
        with pytest.raises(MatchServiceError, match="No response"):
            await MatchService(make_provider(""), roster).match("q")

    @pytest.mark.asyncio
    async def test_none_content_raises(self, roster):
        with pytest.raises(MatchServiceError):
            await MatchService(make_provider(None), roster).match("q")

    @pytest.mark.asyncio
    async def test_provider_error_raises(self, roster):
        provider = make_provider("Error calling LLM: 401", finish_reason="error")
        with pytest.raises(MatchServiceError, match="401"):
            await MatchService(provider, roster).match("q")

    @pytest.mark.asyncio
    async def test_transport_exception_propagates(self, roster):
        provider = MagicMock()
        provider.chat = AsyncMock(side_effect=ConnectionError("offline"))
        with pytest.raises(ConnectionError):
            await MatchService(provider, roster).match("q")
