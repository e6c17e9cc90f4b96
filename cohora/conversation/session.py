"""In-memory chat history for the current process.

History lives only as long as the ChatSession object; nothing is
written to disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TYPE_CHECKING

from cohora.conversation.models import ASSISTANT, WELCOME_MESSAGE, Message

if TYPE_CHECKING:
    from cohora.conversation.models import EnrichedPerson


def _welcome() -> list[Message]:
    return [Message(role=ASSISTANT, content=WELCOME_MESSAGE, id="welcome")]


@dataclass
class ChatSession:
    """
    A conversation, seeded with the welcome message.

    Messages are append-only; clear() resets to just the welcome message.
    """

    messages: list[Message] = field(default_factory=_welcome)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def add_message(
        self,
        role: str,
        content: str,
        people: list[EnrichedPerson] | None = None,
    ) -> Message:
        """Add a message to the session."""
        msg = Message(role=role, content=content, people=list(people or []))
        self.messages.append(msg)
        self.updated_at = datetime.now()
        return msg

    def get_history(self, max_messages: int = 500) -> list[dict[str, Any]]:
        """Get recent messages in LLM format (role + content only)."""
        if max_messages <= 0:
            return []
        return [{"role": m.role, "content": m.content} for m in self.messages[-max_messages:]]

    @property
    def is_fresh(self) -> bool:
        """True while only the welcome message is shown."""
        return len(self.messages) == 1

    def clear(self) -> None:
        self.messages = _welcome()
        self.updated_at = datetime.now()
