"""Podcast Reader: read along with podcast episodes.

WHY: Listening is linear; reading is not. This package turns a podcast
feed into a browsable episode list, a Deepgram transcript into pages of
timed words that follow the audio, and text selections into notes that
can be exported or used to jump back into the episode.

HOW: Four layers. The transcript core (pager, playback sync, selection,
notes) is pure and synchronous. Collaborators (feeds, Deepgram client,
chat providers) do all network I/O. Formatters render notes for export.
The FastAPI server and the CLI wire everything together.

RULES:
- The transcript core never performs I/O
- All collaborators are replaceable in tests (injected client/transport)
- Adding an export format = one new formatter module, no core changes
"""

__version__ = "0.1.0"
