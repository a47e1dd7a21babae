"""Shared test fixtures for the podcast_reader test suite.

WHY: Most test modules need the same small transcript: three timed
words that split into two pages at two words per page. Centralizing it
keeps the expected page spans and note times consistent everywhere.

HOW: Pytest fixtures provide the raw word dicts (as Deepgram and the
HTTP API send them), the parsed Word list, and a TranscriptView wired
to a RecordingPlayer so tests can inspect issued seeks.

RULES:
- SAMPLE_WORDS is the three-word "Hello world today" transcript
- At page size 2: page 1 = [Hello, world] 0.0-1.0, page 2 = [today] 1.1-1.5
- Fixtures return fresh objects; tests may mutate them freely
"""

from typing import Any, Dict, List

import pytest

from podcast_reader.core.ir import Word
from podcast_reader.core.playback import RecordingPlayer
from podcast_reader.core.session import TranscriptView


# ---------------------------------------------------------------------------
# Sample transcript
# ---------------------------------------------------------------------------

SAMPLE_WORDS: List[Dict[str, Any]] = [
    {"text": "Hello", "start_time": 0.0, "end_time": 0.5},
    {"text": "world", "start_time": 0.6, "end_time": 1.0},
    {"text": "today", "start_time": 1.1, "end_time": 1.5},
]


def _make_words(count: int, step: float = 1.0) -> List[Word]:
    return [
        Word("w{}".format(i), round(i * step, 3), round((i + 1) * step - 0.1, 3))
        for i in range(count)
    ]


@pytest.fixture
def make_words():
    """Factory for ``count`` contiguous words w0, w1, ... each ``step`` seconds long."""
    return _make_words


@pytest.fixture
def sample_word_dicts():
    return [dict(w) for w in SAMPLE_WORDS]


@pytest.fixture
def sample_words():
    """The three sample words as core Word objects."""
    return [Word.from_dict(w) for w in SAMPLE_WORDS]


@pytest.fixture
def player():
    return RecordingPlayer()


@pytest.fixture
def view(sample_words, player):
    """TranscriptView over the sample words at two words per page."""
    return TranscriptView(words=sample_words, page_size=2, player=player)
