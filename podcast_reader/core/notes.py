"""In-memory note store and notes text export.

WHY: Notes are the user's annotations on the transcript. They live for
the viewing session only, keep the order they were saved in, and can be
exported as a flat text file.

HOW: NoteStore keeps notes in a dict keyed by id; Python dicts preserve
insertion order, so iteration order is save order and removal leaves the
remaining order intact. render_notes_text() builds the export blob.

RULES:
- Ids are generated here and unique for the session (uuid4 hex)
- remove() of an unknown id is a no-op, not an error
- set_comment() stores the trimmed text, or None when it trims to empty
- The store never reorders or deduplicates; overlapping ranges are fine
- Export of an empty store produces nothing (None)
- Timestamps render as m:ss with no hour component
"""

from __future__ import annotations

import math
import uuid
from collections.abc import Iterable, Iterator

from podcast_reader.core.ir import Note


def format_timestamp(seconds: float) -> str:
    """Format seconds as ``m:ss``; 125 -> "2:05", 3725 -> "62:05"."""
    minutes = math.floor(seconds / 60)
    secs = math.floor(seconds % 60)
    return "{}:{:02d}".format(minutes, secs)


def render_note(note: Note) -> str:
    text = "Note (Page {}, Time: {}): {}".format(
        note.page_number, format_timestamp(note.start_time), note.anchor_text,
    )
    if note.custom_comment:
        text += "\nComment: {}".format(note.custom_comment)
    return text


def render_notes_text(notes: Iterable[Note]) -> str:
    """One paragraph per note, separated by a blank line."""
    return "\n\n".join(render_note(note) for note in notes)


class NoteStore:
    """Ordered, insertion-order collection of notes keyed by id."""

    def __init__(self) -> None:
        self._notes: dict[str, Note] = {}

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    def add(self, note: Note) -> Note:
        if note.id in self._notes:
            raise ValueError("Duplicate note id: {}".format(note.id))
        self._notes[note.id] = note
        return note

    def remove(self, note_id: str) -> bool:
        return self._notes.pop(note_id, None) is not None

    def get(self, note_id: str) -> Note | None:
        return self._notes.get(note_id)

    def set_comment(self, note_id: str, text: str | None) -> Note | None:
        """Set or clear a note's comment. Unknown ids are ignored."""
        note = self._notes.get(note_id)
        if note is None:
            return None
        note.custom_comment = (text or "").strip() or None
        return note

    @property
    def notes(self) -> list[Note]:
        return list(self._notes.values())

    def export(self) -> str | None:
        if not self._notes:
            return None
        return render_notes_text(self._notes.values())

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(list(self._notes.values()))

    def __contains__(self, note_id: object) -> bool:
        return note_id in self._notes
