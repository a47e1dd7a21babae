"""Abstract base formatter and output container for notes export.

WHY: Notes can be exported in more than one shape (the plain-text file
the reader has always produced, and JSON for other tools). A common
interface lets the CLI and the HTTP API pick a formatter by key without
knowing its details.

HOW: BaseNotesFormatter is an ABC with a ``name`` property and a
``format()`` method. FormatterOutput bundles the download filename with
its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` and ``format()``
- ``format()`` receives notes in store order and must not reorder them
- ``format()`` returns None when there are no notes (nothing to export)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from podcast_reader.core.ir import Note


@dataclass
class FormatterOutput:
    """One exported file.

    Attributes:
        filename: Suggested download filename, e.g. ``"transcript-notes.txt"``.
        content: The file content.
        media_type: MIME type for the content, e.g. ``"text/plain"``.
    """

    filename: str
    content: str
    media_type: str


class BaseNotesFormatter(ABC):
    """Abstract base for all notes formatters.

    To add a new export format:
    1. Create a new file in formatters/
    2. Subclass BaseNotesFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'Plain Text'."""

    @abstractmethod
    def format(self, notes: Sequence[Note]) -> FormatterOutput | None:
        """Render notes into one export file, or None when empty."""
