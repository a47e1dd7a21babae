"""JSON notes export.

WHY: Other tools (note apps, scripts) want notes with their exact time
ranges and word anchors rather than a formatted paragraph.

HOW: Serialises every note with its formatted timestamp alongside the
raw fields. The output shape is described by notes_schema.json, which
the tests validate against.

RULES:
- Top-level object: {"version": 1, "notes": [...]}
- Notes in store order; custom_comment is null when absent
- Output filename: "transcript-notes.json"
- Media type: "application/json"
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

from podcast_reader.config import NOTES_EXPORT_FILENAME
from podcast_reader.core.ir import Note
from podcast_reader.core.notes import format_timestamp
from podcast_reader.formatters.base import BaseNotesFormatter, FormatterOutput

SCHEMA_PATH = Path(__file__).resolve().parent / "notes_schema.json"

EXPORT_VERSION = 1


class JSONNotesFormatter(BaseNotesFormatter):
    """Formatter that produces a JSON document of notes."""

    @property
    def name(self) -> str:
        return "JSON"

    def format(self, notes: Sequence[Note]) -> FormatterOutput | None:
        if not notes:
            return None
        entries = []
        for note in notes:
            entry = note.to_dict()
            entry["timestamp"] = format_timestamp(note.start_time)
            entries.append(entry)
        document = {"version": EXPORT_VERSION, "notes": entries}
        return FormatterOutput(
            filename=str(Path(NOTES_EXPORT_FILENAME).with_suffix(".json")),
            content=json.dumps(document, indent=2, ensure_ascii=False) + "\n",
            media_type="application/json",
        )
