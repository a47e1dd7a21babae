"""Deepgram response parsing into typed results.

WHY: Deepgram's pre-recorded API returns a deeply nested JSON document
(results → channels → alternatives → transcript/words). The rest of the
reader only needs the transcript text and the timed word list.

HOW: TranscriptionResult.from_deepgram() walks the nested structure,
validates that the pieces exist, and converts each word dict into a
core Word.

RULES:
- Missing results/channels/alternatives raises TranscriptionError
- An empty transcript raises TranscriptionError
- words defaults to [] when Deepgram omits it
- Display text prefers punctuated_word (smart_format) over word
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from podcast_reader.core.ir import Word


class TranscriptionError(Exception):
    """Raised when a transcription response is unusable."""


@dataclass
class TranscriptionResult:
    """Transcript text plus the ordered word list."""

    transcript: str
    words: list[Word] = field(default_factory=list)

    @classmethod
    def from_deepgram(cls, data: dict[str, Any]) -> TranscriptionResult:
        try:
            alternative = data["results"]["channels"][0]["alternatives"][0]
        except (KeyError, IndexError, TypeError) as exc:
            raise TranscriptionError("Invalid transcription response format") from exc

        transcript = alternative.get("transcript") or ""
        if not transcript:
            raise TranscriptionError("No transcript found in response")

        words = [Word.from_dict(w) for w in alternative.get("words") or []]
        return cls(transcript=transcript, words=words)

    def to_dict(self) -> dict[str, Any]:
        return {
            "transcript": self.transcript,
            "words": [word.to_dict() for word in self.words],
        }
