"""Async HTTP client for the Deepgram pre-recorded speech-to-text API.

WHY: Episodes are transcribed on request so the transcript view has
timed words to page through. Deepgram can fetch the audio itself from
the episode's public URL, so transcription is a single request/response
with no upload step.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. DeepgramClient is an
async context manager: enter it to get an authenticated client, exit to
close the connection pool. transcribe() posts the audio URL and parses
the response into a TranscriptionResult.

RULES:
- Always use the async context manager (async with DeepgramClient() as client:)
- Default model is nova-2 with smart formatting, punctuation, utterances
- The audio URL must be an absolute http(s) URL
- No partial or streaming results; no retry
- Status callback (on_status) is optional; when provided, called with status strings
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from urllib.parse import urlparse

import httpx

from podcast_reader.api.models import TranscriptionError, TranscriptionResult
from podcast_reader.config import DEEPGRAM_BASE_URL, DEEPGRAM_MODEL, load_deepgram_api_key

logger = logging.getLogger(__name__)


class DeepgramAPIError(Exception):
    """Raised when the Deepgram API returns an error response.

    RULES:
    - Always include status_code and message
    - message is the response body text
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Deepgram API error {status_code}: {message}")


def validate_audio_url(audio_url: str) -> str:
    """Return the URL unchanged, or raise ValueError if it isn't absolute."""
    parsed = urlparse(audio_url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Invalid audio URL format")
    return audio_url


class DeepgramClient:
    """Async client for Deepgram URL transcription.

    RULES:
    - Use as: async with DeepgramClient() as client: ...
    - api_key defaults to load_deepgram_api_key() from .env
    - base_url defaults to DEEPGRAM_BASE_URL from config
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or load_deepgram_api_key()
        self._base_url = (base_url or DEEPGRAM_BASE_URL).rstrip("/")
        self._model = model or DEEPGRAM_MODEL
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> DeepgramClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Token {self._api_key}"},
            timeout=httpx.Timeout(600.0, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "DeepgramClient must be used as an async context manager: "
                "async with DeepgramClient() as client: ..."
            )
        return self._client

    def _params(self) -> dict[str, str]:
        return {
            "model": self._model,
            "smart_format": "true",
            "punctuate": "true",
            "utterances": "true",
        }

    async def transcribe(
        self,
        audio_url: str,
        on_status: Callable[[str], None] | None = None,
    ) -> TranscriptionResult:
        """Transcribe the audio at a public URL.

        Args:
            audio_url: Absolute http(s) URL of the episode audio.
            on_status: Optional callback for status updates.

        Returns:
            TranscriptionResult with transcript text and timed words.

        Raises:
            ValueError: If the URL is not an absolute http(s) URL.
            DeepgramAPIError: On non-2xx responses.
            TranscriptionError: If the response has no usable transcript.
        """
        validate_audio_url(audio_url)
        client = self._ensure_client()
        if on_status:
            on_status("Requesting transcription...")
        logger.info("Requesting Deepgram transcription for %s", audio_url)

        resp = await client.post("/listen", params=self._params(), json={"url": audio_url})
        if resp.status_code not in (200, 201):
            logger.error("Deepgram API error response: %s", resp.text)
            raise DeepgramAPIError(resp.status_code, resp.text)

        try:
            data = resp.json()
        except ValueError as exc:
            raise TranscriptionError("Invalid transcription response format") from exc

        result = TranscriptionResult.from_deepgram(data)
        logger.info(
            "Transcription completed: %d chars, %d words",
            len(result.transcript), len(result.words),
        )
        if on_status:
            on_status("Transcribed {} words".format(len(result.words)))
        return result
