"""Notes formatter registry.

WHY: The CLI and API layers need a single lookup to find the right
notes formatter by name.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["plain_text"]()``.

RULES:
- Keys are snake_case identifiers (used in query params, CLI flags)
- Values are BaseNotesFormatter subclasses (not instances)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from podcast_reader.formatters.notes_json import JSONNotesFormatter
from podcast_reader.formatters.notes_text import PlainTextNotesFormatter

if TYPE_CHECKING:
    from podcast_reader.formatters.base import BaseNotesFormatter

FORMATTERS: dict[str, type[BaseNotesFormatter]] = {
    "plain_text": PlainTextNotesFormatter,
    "json": JSONNotesFormatter,
}
