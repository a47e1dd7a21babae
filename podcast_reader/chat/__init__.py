"""Episode chat assistant: prompts, history, and model providers."""

from podcast_reader.chat.history import ChatMessage, Conversation
from podcast_reader.chat.prompts import build_system_prompt
from podcast_reader.chat.providers import ChatProviderError, ChatReply, get_provider

__all__ = [
    "ChatMessage",
    "ChatProviderError",
    "ChatReply",
    "Conversation",
    "build_system_prompt",
    "get_provider",
]
