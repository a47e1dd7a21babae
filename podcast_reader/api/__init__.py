"""Deepgram API client package: async interface to speech-to-text.

WHY: The reader needs timed words for an episode's audio. This package
encapsulates all Deepgram communication behind an async client class.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. Response data is
parsed into TranscriptionResult (models.py), which carries core Words.

RULES:
- All Deepgram HTTP calls go through DeepgramClient
- Authentication is via "Token" header from config
"""

from podcast_reader.api.client import DeepgramAPIError, DeepgramClient
from podcast_reader.api.models import TranscriptionError, TranscriptionResult

__all__ = ["DeepgramAPIError", "DeepgramClient", "TranscriptionError", "TranscriptionResult"]
