"""Append-only chat history.

WHY: Every chat request carries the full conversation, and a reply only
ever adds to it; earlier turns are never rewritten.

RULES:
- The system message, when present, is always first
- append_* methods are the only mutators; there is no edit or delete
- request_messages() returns a copy of the full history
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError("Unknown chat role: {!r}".format(self.role))

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}


class Conversation:
    """Ordered chat history for one episode."""

    def __init__(self, system_prompt: str | None = None) -> None:
        self._messages: list[ChatMessage] = []
        if system_prompt:
            self._messages.append(ChatMessage("system", system_prompt))

    def append_user(self, content: str) -> ChatMessage:
        message = ChatMessage("user", content)
        self._messages.append(message)
        return message

    def append_reply(self, content: str) -> ChatMessage:
        message = ChatMessage("assistant", content)
        self._messages.append(message)
        return message

    def request_messages(self) -> list[ChatMessage]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)
