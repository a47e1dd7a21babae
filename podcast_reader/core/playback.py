"""Playback-time synchronisation for the paginated transcript.

WHY: While an episode plays, the transcript view follows along: it
turns to the page containing the current playback time and highlights
the word being spoken. Users also navigate the other way: jumping to
a page or clicking a word moves the audio.

HOW: Two pure lookups (find_page_index, find_word_index) do the time
matching. PlaybackSync holds the small amount of state the view needs
(current time and current page index) and reacts to time updates pushed
by the audio collaborator. Seeking is a one-way command sent to a Player;
the new position comes back later as an ordinary time update.

RULES:
- Page lookup: first page in list order whose [start, end] contains t
- No matching page (before, after, or in a gap) leaves the current page
  unchanged; it is never reset to the first page
- Word lookup: first word on the current page whose span contains t,
  else no active word
- jump_to_page accepts 1..page_count; anything else changes nothing
- Page changes never touch notes or the in-progress selection
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from podcast_reader.core.ir import Page, Word

logger = logging.getLogger(__name__)


class Player(Protocol):
    """The audio-playback collaborator.

    Implementations set their position to ``time`` and, when ``play`` is
    true, start playback. They report positions back asynchronously via
    time updates; nothing is returned here.
    """

    def seek(self, time: float, play: bool = True) -> None:
        ...


class NullPlayer:
    """Player that drops every command (no audio attached)."""

    def seek(self, time: float, play: bool = True) -> None:
        return None


@dataclass(frozen=True)
class SeekCommand:
    time: float
    play: bool


class RecordingPlayer:
    """Player that queues seek commands for a remote executor.

    WHY: Over HTTP the real audio element lives in the browser. The server
    records the commands and hands them back in the response, where the
    client applies them.
    """

    def __init__(self) -> None:
        self._commands: list[SeekCommand] = []

    def seek(self, time: float, play: bool = True) -> None:
        self._commands.append(SeekCommand(time=time, play=play))

    @property
    def pending(self) -> list[SeekCommand]:
        return list(self._commands)

    def drain(self) -> list[SeekCommand]:
        commands, self._commands = self._commands, []
        return commands


def find_page_index(pages: Sequence[Page], t: float) -> int | None:
    """Return the index of the first page whose span contains t."""
    for index, page in enumerate(pages):
        if page.contains(t):
            return index
    return None


def find_word_index(words: Sequence[Word], t: float) -> int | None:
    """Return the index of the first word whose span contains t."""
    for index, word in enumerate(words):
        if word.contains(t):
            return index
    return None


def parse_page_number(raw: object) -> int | None:
    """Parse a page-jump input into an int, or None if it isn't one."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            return None
    return None


class PlaybackSync:
    """Tracks the playback position and the page/word it falls on.

    WHY: The view needs one place that decides which page is showing and
    which word is lit, given pushed time updates and user navigation.

    HOW: Keeps current_time and current_page_index. on_time_update() moves
    the page only when some page contains the new time. Navigation methods
    change the page and, where the user asked to move the audio, issue a
    seek to the player.

    RULES:
    - current_page_index starts at 0 and is always within range when
      there are pages
    - seek() never updates current_time; the player reports back
    - next_page/previous_page are clamped and do not seek
    """

    def __init__(self, pages: Sequence[Page] = (), player: Player | None = None) -> None:
        self._pages: list[Page] = list(pages)
        self._player: Player = player if player is not None else NullPlayer()
        self.current_time = 0.0
        self.current_page_index = 0

    @property
    def pages(self) -> list[Page]:
        return self._pages

    @property
    def page_count(self) -> int:
        return len(self._pages)

    @property
    def current_page(self) -> Page | None:
        if not self._pages:
            return None
        return self._pages[self.current_page_index]

    @property
    def active_word_index(self) -> int | None:
        page = self.current_page
        if page is None:
            return None
        return find_word_index(page.words, self.current_time)

    def replace_pages(self, pages: Sequence[Page]) -> None:
        """Install a freshly computed page list."""
        self._pages = list(pages)
        if not self._pages:
            self.current_page_index = 0
        else:
            self.current_page_index = min(self.current_page_index, len(self._pages) - 1)
            # A re-pagination may leave the current time on another page
            self._follow(self.current_time)

    def on_time_update(self, t: float) -> None:
        """React to a time update pushed by the player."""
        self.current_time = t
        self._follow(t)

    def _follow(self, t: float) -> None:
        index = find_page_index(self._pages, t)
        if index is not None and index != self.current_page_index:
            logger.debug("Playback at %.2fs moved to page %d", t, index + 1)
            self.current_page_index = index

    def seek(self, time: float, play: bool = True) -> None:
        """Send a one-way seek command to the player."""
        self._player.seek(time, play)

    def play_from(self, time: float) -> None:
        """Seek to time and start playback (word click, note play button)."""
        self.seek(time, play=True)

    def jump_to_page(self, raw: object) -> bool:
        """Jump to 1-based page ``raw`` and seek to its start.

        Returns True when the jump happened. Non-numeric or out-of-range
        input changes nothing; the caller clears its input either way.
        """
        number = parse_page_number(raw)
        if number is None or not 1 <= number <= len(self._pages):
            logger.debug("Ignored page jump to %r (%d pages)", raw, len(self._pages))
            return False
        self.current_page_index = number - 1
        self.seek(self._pages[number - 1].start_time, play=False)
        return True

    def next_page(self) -> None:
        if self._pages:
            self.current_page_index = min(len(self._pages) - 1, self.current_page_index + 1)

    def previous_page(self) -> None:
        self.current_page_index = max(0, self.current_page_index - 1)
