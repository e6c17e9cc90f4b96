"""Data models for the match service."""

from __future__ import annotations

from dataclasses import dataclass, field


class MatchServiceError(Exception):
    """The matcher couldn't produce a reply (transport, auth, empty body)."""


@dataclass
class MatchResult:
    """What the matcher said and which students it picked."""
    message: str
    matched_ids: list[str] = field(default_factory=list)   # In the matcher's order
    match_reasons: dict[str, str] = field(default_factory=dict)
    raw: bool = False  # True when the reply wasn't JSON and is shown verbatim

    @property
    def has_matches(self) -> bool:
        return len(self.matched_ids) > 0
