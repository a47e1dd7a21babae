"""Word pagination.

WHY: Long episodes produce thousands of words; the transcript view shows
them a page at a time and follows playback page by page.

HOW: paginate() walks the word sequence in steps of page_size and builds
one Page per chunk, taking the time span from the chunk's first and last
word.

RULES:
- Pages partition the input contiguously and exhaustively
- Every page except possibly the last has exactly page_size words
- page_number = first_global_index // page_size + 1
- Empty input yields an empty list, never a single empty page
- Pure function: callers recompute on any change to words or page_size,
  since chunk boundaries are not stable under insertion
"""

from __future__ import annotations

from collections.abc import Sequence

from podcast_reader.core.ir import Page, Word


def paginate(words: Sequence[Word], page_size: int) -> list[Page]:
    """Bucket an ordered word sequence into fixed-size pages.

    Args:
        words: Words in speech order.
        page_size: Maximum words per page, must be a positive int.

    Returns:
        Pages in order, each with its time span and 1-based number.

    Raises:
        ValueError: If page_size is not a positive integer.
    """
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
        raise ValueError("page_size must be a positive integer, got {!r}".format(page_size))

    pages: list[Page] = []
    for start in range(0, len(words), page_size):
        chunk = tuple(words[start:start + page_size])
        pages.append(Page(
            words=chunk,
            start_time=chunk[0].start_time,
            end_time=chunk[-1].end_time,
            page_number=start // page_size + 1,
        ))
    return pages
