"""Intermediate representation dataclasses for the transcript view.

WHY: The transcription service returns a flat list of timed words. The
transcript view needs those words grouped into pages, needs to know
which page and word are playing, and needs to anchor user notes to a
word range and a time range. A small set of typed records keeps every
stage (pager, playback sync, selection mapper, note store) working on
the same shapes.

HOW: Five dataclasses:
  Word         - one transcribed word with timing and confidence
  Page         - a contiguous run of words with its time span
  Selection    - a transient, unconfirmed word range picked by the user
  RawSelection - what the host UI reports about a text-selection gesture
  Note         - a saved annotation anchored to a page word range

RULES:
- All times are float seconds
- Word and Page are frozen; pages are recomputed, never patched
- Word indices in Selection and Note are 0-based, inclusive, and
  relative to the page the selection was made on
- Note is mutable only through custom_comment
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Word:
    """A single transcribed word.

    RULES:
    - text: display text (punctuated form when the service provides one)
    - start_time / end_time: float seconds, end_time >= start_time
    - confidence: float 0.0–1.0
    """

    text: str
    start_time: float
    end_time: float
    confidence: float = 1.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Word:
        """Parse a Word from a transcription-service word dict.

        Accepts the Deepgram shape (``word``/``punctuated_word``,
        ``start``, ``end``, ``confidence``) and this package's own
        serialised shape (``text``, ``start_time``, ``end_time``).
        """
        text = data.get("punctuated_word") or data.get("word") or data.get("text") or ""
        start = data["start"] if "start" in data else data["start_time"]
        end = data["end"] if "end" in data else data["end_time"]
        return cls(
            text=text,
            start_time=float(start),
            end_time=float(end),
            confidence=float(data.get("confidence", 1.0)),
        )

    def contains(self, t: float) -> bool:
        return self.start_time <= t <= self.end_time

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class Page:
    """A contiguous, fixed-size (except possibly the last) group of words.

    RULES:
    - words is never empty
    - start_time is the first word's start, end_time the last word's end
    - page_number is 1-based
    - page spans are not guaranteed to be monotonic across pages
    """

    words: tuple[Word, ...]
    start_time: float
    end_time: float
    page_number: int

    def contains(self, t: float) -> bool:
        return self.start_time <= t <= self.end_time


@dataclass(frozen=True)
class Selection:
    """A captured but not yet confirmed word range on the current page."""

    text: str
    start_word_index: int
    end_word_index: int


@dataclass(frozen=True)
class RawSelection:
    """The host UI's report of a text-selection gesture.

    WHY: The core must not depend on any rendering technology. The UI
    reduces a native selection to the facts the mapper needs.

    RULES:
    - exists: False when there is no selection at all
    - collapsed: True for a zero-length (caret) selection
    - within_container: False when the range lies outside the transcript
    - intersected: (word_index, display_text) for every rendered word
      element the range touches, in document order; a None index marks an
      element without a usable index attribute (a rendering artifact)
    """

    exists: bool = True
    collapsed: bool = False
    within_container: bool = True
    intersected: tuple[tuple[int | None, str | None], ...] = ()


@dataclass
class Note:
    """A user-saved annotation anchored to a word range on a page.

    RULES:
    - id: unique for the viewing session
    - anchor_text: the selection's reconstructed display text
    - custom_comment: trimmed free text, or None (never an empty string)
    - start_time / end_time: time range of the anchored words
    """

    id: str
    anchor_text: str
    start_time: float
    end_time: float
    page_number: int
    start_word_index: int
    end_word_index: int
    custom_comment: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "anchor_text": self.anchor_text,
            "custom_comment": self.custom_comment,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "page_number": self.page_number,
            "start_word_index": self.start_word_index,
            "end_word_index": self.end_word_index,
        }
