"""Plain text notes export.

WHY: The reader's "Export Notes" button downloads a text file with one
paragraph per saved note, quick to skim and easy to paste elsewhere.

HOW: Delegates paragraph rendering to core.notes.render_notes_text so
the download and NoteStore.export() produce identical text.

RULES:
- One paragraph per note, blank line between paragraphs, store order
- Paragraph: "Note (Page N, Time: m:ss): anchor" plus "Comment: ..."
  on the next line when the note has a comment
- Output filename: "transcript-notes.txt"
- Media type: "text/plain"
"""

from __future__ import annotations

from collections.abc import Sequence

from podcast_reader.config import NOTES_EXPORT_FILENAME
from podcast_reader.core.ir import Note
from podcast_reader.core.notes import render_notes_text
from podcast_reader.formatters.base import BaseNotesFormatter, FormatterOutput


class PlainTextNotesFormatter(BaseNotesFormatter):
    """Formatter that produces the plain text notes file."""

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, notes: Sequence[Note]) -> FormatterOutput | None:
        if not notes:
            return None
        return FormatterOutput(
            filename=NOTES_EXPORT_FILENAME,
            content=render_notes_text(notes),
            media_type="text/plain",
        )
