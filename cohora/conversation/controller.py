"""ConversationController: runs one chat turn end to end.

A turn: user text → MatchService (LLM) → drop unknown ids → resolve each
match's connection path → TurnResult, appended to the chat history.

Only one turn may be in flight. The flag is checked and set with no
await in between, so on a single event loop a second submission made
while the LLM call is pending is ignored rather than queued.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from cohora.conversation.models import (
    ASSISTANT,
    DEFAULT_MATCH_REASON,
    FALLBACK_MESSAGE,
    USER,
    EnrichedPerson,
    TurnResult,
)
from cohora.conversation.session import ChatSession

if TYPE_CHECKING:
    from cohora.match.models import MatchResult
    from cohora.match.service import MatchService
    from cohora.roster.graph import ConnectionResolver
    from cohora.roster.person import Roster


class ConversationController:
    """Sequences turns between the user, the matcher and the resolver."""

    def __init__(
        self,
        match_service: MatchService,
        resolver: ConnectionResolver,
        roster: Roster,
        session: ChatSession | None = None,
    ) -> None:
        self._match_service = match_service
        self._resolver = resolver
        self._roster = roster
        self._session = session or ChatSession()
        self._in_flight = False

    @property
    def busy(self) -> bool:
        """True while a turn is waiting on the matcher."""
        return self._in_flight

    @property
    def session(self) -> ChatSession:
        return self._session

    async def handle_turn(self, query_text: str) -> TurnResult | None:
        """Run one turn. Returns None when the submission is ignored.

        Empty input and submissions made while a turn is in flight are
        ignored without touching the history. Matcher failures never
        escape: they become the fixed fallback message.
        """
        query = (query_text or "").strip()
        if not query:
            logger.debug("Turn ignored: empty query")
            return None
        if self._in_flight:
            logger.debug("Turn ignored: previous turn still in flight")
            return None

        self._in_flight = True
        try:
            self._session.add_message(USER, query)

            try:
                match = await self._match_service.match(query)
            except Exception as e:
                logger.warning(f"Match failed, using fallback reply: {type(e).__name__}: {e}")
                result = TurnResult(message=FALLBACK_MESSAGE, failed=True)
            else:
                result = TurnResult(message=match.message, people=self.enrich(match))

            self._session.add_message(ASSISTANT, result.message, result.people)
            return result
        finally:
            self._in_flight = False

    def enrich(self, match: MatchResult) -> list[EnrichedPerson]:
        """Attach reason and connection path to each known match, in order."""
        people: list[EnrichedPerson] = []
        for person_id in match.matched_ids:
            person = self._roster.get_by_id(person_id)
            if person is None:
                logger.debug(f"Dropping unknown match id: {person_id}")
                continue
            people.append(EnrichedPerson(
                person=person,
                match_reason=match.match_reasons.get(person_id) or DEFAULT_MATCH_REASON,
                connection_path=self._resolver.resolve_path(person_id),
            ))
        return people
