"""Chat providers: OpenAI, Anthropic, and the keyless demo responder.

WHY: The chat panel can be backed by a hosted model when the user has
an API key, or by the demo responder when not. The HTTP layer should
not care which. It passes the full history and gets one reply back.

HOW: Each provider implements complete(messages) -> ChatReply. System
messages in the history are folded into the provider's system prompt
(both SDKs take the system prompt separately from the turns). The SDK
clients are built from the configured keys at construction, or injected (tests
pass mocks). get_provider() is the registry lookup.

RULES:
- Requests carry the full message history
- Missing API key -> ValueError("API key not configured")
- SDK errors are wrapped in ChatProviderError with a readable message
- model_label is what the UI shows as "model used"
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import anthropic
import openai

from podcast_reader import config
from podcast_reader.chat.demo import extract_podcast_title, generate_demo_reply
from podcast_reader.chat.history import ChatMessage

logger = logging.getLogger(__name__)

BASE_SYSTEM_PROMPT = "You are a helpful AI assistant that provides insights about podcasts"


class ChatProviderError(Exception):
    """Raised when a hosted model call fails."""


@dataclass
class ChatReply:
    id: str
    content: str
    model_label: str


def split_system(messages: Sequence[ChatMessage]) -> tuple[str, list[dict[str, Any]]]:
    """Separate system messages from the conversational turns."""
    system_parts = [BASE_SYSTEM_PROMPT]
    turns: list[dict[str, Any]] = []
    for message in messages:
        if message.role == "system":
            system_parts.append(message.content)
        else:
            turns.append(message.to_dict())
    return "\n\n".join(system_parts), turns


def _reply_id() -> str:
    return "chatcmpl-{}".format(int(time.time() * 1000))


class ChatProvider(ABC):
    """Abstract base for chat providers."""

    key: str = ""

    @property
    @abstractmethod
    def model_label(self) -> str:
        """Human-readable model name returned to the UI."""

    @abstractmethod
    def complete(self, messages: Sequence[ChatMessage]) -> ChatReply:
        """Return the assistant's reply to the full history."""


class DemoChatProvider(ChatProvider):
    """Keyword-matching canned responder, no API key required."""

    key = "demo"

    @property
    def model_label(self) -> str:
        return "Demo Model (Free)"

    def complete(self, messages: Sequence[ChatMessage]) -> ChatReply:
        user_messages = [m for m in messages if m.role == "user"]
        query = user_messages[-1].content if user_messages else ""
        system = next((m for m in messages if m.role == "system"), None)
        context = system.content if system else ""
        logger.info("Demo chat request received with %d messages", len(messages))
        content = generate_demo_reply(query, extract_podcast_title(context), context)
        return ChatReply(id=_reply_id(), content=content, model_label=self.model_label)


class OpenAIChatProvider(ChatProvider):
    """OpenAI chat completions via the openai SDK."""

    key = "openai"

    def __init__(self, client: Any = None, model: str | None = None) -> None:
        self._model = model or config.OPENAI_MODEL
        if client is None:
            client = openai.OpenAI(api_key=_require_key(config.load_openai_api_key))
        self._client = client

    @property
    def model_label(self) -> str:
        if self._model == "gpt-3.5-turbo":
            return "GPT-3.5 Turbo (Free)"
        return self._model

    def complete(self, messages: Sequence[ChatMessage]) -> ChatReply:
        system, turns = split_system(messages)
        logger.info("OpenAI chat request received with %d messages", len(messages))
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "system", "content": system}] + turns,
            )
        except openai.OpenAIError as exc:
            logger.exception("OpenAI chat request failed")
            raise ChatProviderError(str(exc)) from exc

        content = response.choices[0].message.content or ""
        return ChatReply(id=response.id or _reply_id(), content=content, model_label=self.model_label)


class AnthropicChatProvider(ChatProvider):
    """Anthropic Messages API via the anthropic SDK."""

    key = "anthropic"

    def __init__(self, client: Any = None, model: str | None = None) -> None:
        self._model = model or config.ANTHROPIC_MODEL
        if client is None:
            client = anthropic.Anthropic(api_key=_require_key(config.load_anthropic_api_key))
        self._client = client

    @property
    def model_label(self) -> str:
        return self._model

    def complete(self, messages: Sequence[ChatMessage]) -> ChatReply:
        system, turns = split_system(messages)
        logger.info("Anthropic chat request received with %d messages", len(messages))
        try:
            response = self._client.messages.create(
                model=self._model,
                max_tokens=config.CHAT_MAX_TOKENS,
                system=system,
                messages=turns,
            )
        except anthropic.AuthenticationError as exc:
            raise ChatProviderError("Invalid Anthropic API key.") from exc
        except anthropic.RateLimitError as exc:
            raise ChatProviderError(
                "Rate limited by Anthropic. Please wait a moment and try again."
            ) from exc
        except anthropic.APIError as exc:
            logger.exception("Anthropic chat request failed")
            raise ChatProviderError(str(exc)) from exc

        content = "".join(block.text for block in response.content if block.type == "text")
        return ChatReply(id=response.id or _reply_id(), content=content, model_label=self.model_label)


def _require_key(loader) -> str:  # noqa: ANN001
    try:
        return loader()
    except ValueError as exc:
        raise ValueError("API key not configured") from exc


PROVIDERS: dict[str, type[ChatProvider]] = {
    "demo": DemoChatProvider,
    "openai": OpenAIChatProvider,
    "anthropic": AnthropicChatProvider,
}


def get_provider(name: str) -> ChatProvider:
    """Instantiate a provider by key.

    Raises:
        KeyError: Unknown provider name.
        ValueError: The provider's API key is not configured.
    """
    if name not in PROVIDERS:
        raise KeyError(name)
    return PROVIDERS[name]()
