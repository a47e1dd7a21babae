"""Transcript view: the composition root of the transcript core.

WHY: The pager, playback sync, selection mapper, and note store are
small pieces that only make sense together. Something has to own their
state, decide the order in which they run, and expose one entry point
to the UI (or the HTTP layer) that does not depend on how the transcript
is rendered.

HOW: TranscriptView owns the word list, page size, pages, a PlaybackSync,
a NoteStore, the in-progress Selection, and the page-jump input text.
UI events arrive as small command dataclasses and go through dispatch(),
which applies them synchronously. Derived pages are recomputed in full
whenever the words or page size change, before anything consults them.

RULES:
- Single writer: only TranscriptView mutates its fields
- LoadWords / SetPageSize recompute pages to completion and discard any
  in-flight selection (indices would refer to the old pages)
- Page changes never discard notes or the selection
- ConfirmNote re-validates against the page showing at confirmation time;
  an invalid range is a no-op and the selection is dropped
- SetJumpInput only stores the typed text; JumpToPage without a value
  reads it, and clears it whether or not the jump happened
- No operation blocks or performs I/O
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union

from podcast_reader.config import WORDS_PER_PAGE
from podcast_reader.core.ir import Note, Page, RawSelection, Selection, Word
from podcast_reader.core.notes import NoteStore
from podcast_reader.core.pager import paginate
from podcast_reader.core.playback import PlaybackSync, Player
from podcast_reader.core.selection import capture_selection, confirm_selection

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoadWords:
    words: tuple[Word, ...]


@dataclass(frozen=True)
class SetPageSize:
    page_size: int


@dataclass(frozen=True)
class TimeUpdate:
    time: float


@dataclass(frozen=True)
class Seek:
    time: float
    play: bool = True


@dataclass(frozen=True)
class SetJumpInput:
    text: str


@dataclass(frozen=True)
class JumpToPage:
    # None jumps to whatever is in the jump input box
    raw: object = None


@dataclass(frozen=True)
class NextPage:
    pass


@dataclass(frozen=True)
class PreviousPage:
    pass


@dataclass(frozen=True)
class CaptureSelection:
    raw: RawSelection


@dataclass(frozen=True)
class ConfirmNote:
    pass


@dataclass(frozen=True)
class CancelNote:
    pass


@dataclass(frozen=True)
class DeleteNote:
    note_id: str


@dataclass(frozen=True)
class SetComment:
    note_id: str
    text: str


@dataclass(frozen=True)
class PlayNote:
    note_id: str


Command = Union[
    LoadWords, SetPageSize, TimeUpdate, Seek, SetJumpInput, JumpToPage, NextPage,
    PreviousPage, CaptureSelection, ConfirmNote, CancelNote, DeleteNote, SetComment, PlayNote,
]


# ---------------------------------------------------------------------------
# View
# ---------------------------------------------------------------------------


class TranscriptView:
    """Paginated, playback-synchronised transcript with notes.

    Args:
        words: Initial transcript words in speech order.
        page_size: Words per page (defaults to WORDS_PER_PAGE).
        player: Audio collaborator receiving seek commands.
    """

    def __init__(
        self,
        words: Sequence[Word] = (),
        page_size: int = WORDS_PER_PAGE,
        player: Player | None = None,
    ) -> None:
        self._words: tuple[Word, ...] = tuple(words)
        self._page_size = page_size
        self.sync = PlaybackSync(paginate(self._words, page_size), player)
        self.notes = NoteStore()
        self.selection: Selection | None = None
        self.jump_input = ""

    # -- read-only state ---------------------------------------------------

    @property
    def words(self) -> tuple[Word, ...]:
        return self._words

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def pages(self) -> list[Page]:
        return self.sync.pages

    @property
    def current_page(self) -> Page | None:
        return self.sync.current_page

    @property
    def active_word_index(self) -> int | None:
        return self.sync.active_word_index

    # -- commands ------------------------------------------------------------

    def dispatch(self, command: Command) -> Any:
        """Apply one UI command synchronously and return its result."""
        if isinstance(command, LoadWords):
            return self.load_words(command.words)
        if isinstance(command, SetPageSize):
            return self.set_page_size(command.page_size)
        if isinstance(command, TimeUpdate):
            return self.sync.on_time_update(command.time)
        if isinstance(command, Seek):
            return self.sync.seek(command.time, command.play)
        if isinstance(command, SetJumpInput):
            self.jump_input = command.text
            return None
        if isinstance(command, JumpToPage):
            return self.jump_to_page(command.raw)
        if isinstance(command, NextPage):
            return self.sync.next_page()
        if isinstance(command, PreviousPage):
            return self.sync.previous_page()
        if isinstance(command, CaptureSelection):
            return self.capture_selection(command.raw)
        if isinstance(command, ConfirmNote):
            return self.confirm_note()
        if isinstance(command, CancelNote):
            return self.cancel_note()
        if isinstance(command, DeleteNote):
            return self.notes.remove(command.note_id)
        if isinstance(command, SetComment):
            return self.notes.set_comment(command.note_id, command.text)
        if isinstance(command, PlayNote):
            return self.play_note(command.note_id)
        raise TypeError("Unknown command: {!r}".format(command))

    def load_words(self, words: Sequence[Word]) -> None:
        self._words = tuple(words)
        self._repaginate()

    def set_page_size(self, page_size: int) -> None:
        pages = paginate(self._words, page_size)
        self._page_size = page_size
        self._install(pages)

    def _repaginate(self) -> None:
        self._install(paginate(self._words, self._page_size))

    def _install(self, pages: list[Page]) -> None:
        if self.selection is not None:
            logger.debug("Discarding stale selection after re-pagination")
        self.selection = None
        self.sync.replace_pages(pages)
        logger.info("Paginated %d words into %d pages", len(self._words), len(pages))

    def jump_to_page(self, raw: object = None) -> bool:
        jumped = self.sync.jump_to_page(self.jump_input if raw is None else raw)
        self.jump_input = ""
        return jumped

    def capture_selection(self, raw: RawSelection) -> Selection | None:
        page = self.current_page
        if page is None:
            return None
        selection = capture_selection(raw, page.words)
        if selection is not None:
            self.selection = selection
        return selection

    def confirm_note(self) -> Note | None:
        if self.selection is None:
            return None
        note = confirm_selection(self.selection, self.current_page, self.notes.new_id())
        self.selection = None
        if note is None:
            logger.debug("Dropped stale selection at confirmation")
            return None
        return self.notes.add(note)

    def cancel_note(self) -> None:
        self.selection = None

    def play_note(self, note_id: str) -> bool:
        note = self.notes.get(note_id)
        if note is None:
            return False
        self.sync.play_from(note.start_time)
        return True

    def export_notes(self) -> str | None:
        return self.notes.export()

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view of the current state, for rendering."""
        page = self.current_page
        return {
            "page_size": self._page_size,
            "word_count": len(self._words),
            "page_count": self.sync.page_count,
            "current_page_index": self.sync.current_page_index,
            "current_time": self.sync.current_time,
            "active_word_index": self.active_word_index,
            "jump_input": self.jump_input,
            "page": None if page is None else {
                "page_number": page.page_number,
                "start_time": page.start_time,
                "end_time": page.end_time,
                "words": [word.to_dict() for word in page.words],
            },
            "selection": None if self.selection is None else {
                "text": self.selection.text,
                "start_word_index": self.selection.start_word_index,
                "end_word_index": self.selection.end_word_index,
            },
            "notes": [note.to_dict() for note in self.notes],
        }
