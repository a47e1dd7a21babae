"""Transcript core: pagination, playback sync, selections, and notes.

WHY: The core package holds the only stateful logic in the reader: how
transcript words are paged, how playback drives highlighting, and how
user selections become notes. Everything else (feeds, transcription,
chat) is request/response glue around external services.

HOW: ir.py defines the records, pager.py and playback.py derive pages
and the active page/word, selection.py maps selections to notes,
notes.py stores and exports them, and session.py wires it all together
behind TranscriptView.

RULES:
- The core performs no I/O and never blocks
- Soft failures (bad page jump, empty selection, stale confirm) change
  nothing instead of raising
"""
