"""Data models for a chat turn.

Defines the enriched match record, the per-turn result, chat messages,
and the fixed user-facing strings.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from cohora.roster.graph import ConnectionPath
    from cohora.roster.person import Person


# ── Roles ────────────────────────────────────────────────────────────────
USER = "user"
ASSISTANT = "assistant"

# ── Fixed copy ───────────────────────────────────────────────────────────
WELCOME_MESSAGE = (
    "Hey! I'm Cohora — your campus skill discovery assistant. "
    "Ask me things like \"Who knows Python?\" or \"Find me a frontend developer "
    "for a hackathon\" and I'll find the right people for you."
)
FALLBACK_MESSAGE = (
    "Hmm, something went wrong. Make sure your API key is valid and try again."
)
DEFAULT_MATCH_REASON = "Matched based on skills"

# Starter queries, shown while the welcome message is the only one
SUGGESTIONS = (
    "Who knows Python?",
    "Find me a frontend dev",
    "Need mobile app help",
    "ML experts",
)


@dataclass
class EnrichedPerson:
    """A matched student with the matcher's reason and their distance from you."""

    person: Person
    match_reason: str
    connection_path: ConnectionPath

    @property
    def id(self) -> str:
        return self.person.id

    def to_dict(self) -> dict[str, Any]:
        """Flat payload for the UI: profile fields plus match annotations."""
        d = self.person.to_dict()
        d["matchReason"] = self.match_reason
        d["connectionPath"] = self.connection_path.to_dict()
        return d


@dataclass
class TurnResult:
    """Outcome of one request/response turn."""

    message: str
    people: list[EnrichedPerson] = field(default_factory=list)
    failed: bool = False  # True when the fallback message was used

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "students": [p.to_dict() for p in self.people],
        }


@dataclass
class Message:
    """A single chat bubble in the history."""

    role: str                       # USER or ASSISTANT
    content: str
    people: list[EnrichedPerson] = field(default_factory=list)
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp,
        }
        if self.people:
            d["students"] = [p.to_dict() for p in self.people]
        return d
