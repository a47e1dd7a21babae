"""Selection-to-note mapping.

WHY: Users annotate the transcript by selecting text on the current
page. Native text selections are messy: they start and end inside
words, include whitespace, and can touch elements that are not words.
A note has to be anchored to whole words so it can be replayed.

HOW: capture_selection() snaps the raw gesture to the full set of word
elements it intersects and records the min/max word index plus a
display reconstruction of the text. confirm_selection() re-validates the
range against the page shown at confirmation time and builds a Note.

RULES:
- No selection, collapsed, outside the container, or no intersected
  word elements -> None
- Intersected entries without a valid page index are ignored
- text = intersected words' display text joined by single spaces; it is
  a reconstruction and may differ from the original punctuation
- Confirmation requires 0 <= start <= end < len(page.words); otherwise
  it is a no-op (returns None) and the caller discards the selection
"""

from __future__ import annotations

from collections.abc import Sequence

from podcast_reader.core.ir import Note, Page, RawSelection, Selection, Word


def capture_selection(raw: RawSelection | None, page_words: Sequence[Word]) -> Selection | None:
    """Snap a raw selection gesture to whole words on the current page."""
    if raw is None or not raw.exists or raw.collapsed or not raw.within_container:
        return None

    indices: list[int] = []
    texts: list[str] = []
    for index, display_text in raw.intersected:
        if index is None or not 0 <= index < len(page_words):
            continue
        indices.append(index)
        text = display_text if display_text is not None else page_words[index].text
        text = text.strip()
        if text:
            texts.append(text)

    if not indices or not texts:
        return None

    return Selection(
        text=" ".join(texts),
        start_word_index=min(indices),
        end_word_index=max(indices),
    )


def confirm_selection(selection: Selection, page: Page | None, note_id: str) -> Note | None:
    """Promote a selection to a Note against the page now showing."""
    if page is None:
        return None
    start, end = selection.start_word_index, selection.end_word_index
    if not 0 <= start <= end < len(page.words):
        return None

    return Note(
        id=note_id,
        anchor_text=selection.text,
        start_time=page.words[start].start_time,
        end_time=page.words[end].end_time,
        page_number=page.page_number,
        start_word_index=start,
        end_word_index=end,
    )
