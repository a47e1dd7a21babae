"""Tests for selection capture and note confirmation.

WHY: Native selections are messy; notes must anchor to whole words on
the page they were made on, and a stale range must never produce a
note pointing at the wrong words.

HOW: RawSelection values stand in for the browser's selection; the
sample page is [Hello, world] at two words per page.
"""

import pytest

from podcast_reader.core.ir import RawSelection, Selection
from podcast_reader.core.pager import paginate
from podcast_reader.core.selection import capture_selection, confirm_selection


@pytest.fixture
def first_page(sample_words):
    return paginate(sample_words, 2)[0]


class TestCaptureSelection:

    def test_two_words(self, first_page):
        raw = RawSelection(intersected=((0, "Hello"), (1, "world")))
        selection = capture_selection(raw, first_page.words)
        assert selection == Selection(text="Hello world", start_word_index=0, end_word_index=1)

    def test_partial_word_snaps_to_whole_word(self, first_page):
        raw = RawSelection(intersected=((1, "world"),))
        selection = capture_selection(raw, first_page.words)
        assert selection.start_word_index == 1
        assert selection.end_word_index == 1
        assert selection.text == "world"

    def test_missing_text_falls_back_to_word(self, first_page):
        raw = RawSelection(intersected=((0, None), (1, None)))
        assert capture_selection(raw, first_page.words).text == "Hello world"

    def test_text_is_trimmed(self, first_page):
        raw = RawSelection(intersected=((0, " Hello "), (1, "world\n")))
        assert capture_selection(raw, first_page.words).text == "Hello world"

    def test_unindexed_elements_are_ignored(self, first_page):
        raw = RawSelection(intersected=((None, "stray"), (1, "world"), (7, "ghost")))
        selection = capture_selection(raw, first_page.words)
        assert selection == Selection(text="world", start_word_index=1, end_word_index=1)

    @pytest.mark.parametrize("raw", [
        None,
        RawSelection(exists=False, intersected=((0, "Hello"),)),
        RawSelection(collapsed=True, intersected=((0, "Hello"),)),
        RawSelection(within_container=False, intersected=((0, "Hello"),)),
        RawSelection(intersected=()),
        RawSelection(intersected=((None, "Hello"),)),
        RawSelection(intersected=((0, "   "),)),
    ])
    def test_ignored_selections(self, first_page, raw):
        assert capture_selection(raw, first_page.words) is None


class TestConfirmSelection:

    def test_confirm_builds_note(self, first_page):
        selection = Selection(text="Hello world", start_word_index=0, end_word_index=1)
        note = confirm_selection(selection, first_page, "n1")
        assert note.id == "n1"
        assert note.anchor_text == "Hello world"
        assert note.start_time == 0.0
        assert note.end_time == 1.0
        assert note.page_number == 1
        assert note.start_word_index == 0
        assert note.end_word_index == 1
        assert note.custom_comment is None

    def test_out_of_range_on_current_page_is_noop(self, sample_words):
        second_page = paginate(sample_words, 2)[1]
        selection = Selection(text="Hello world", start_word_index=0, end_word_index=1)
        assert confirm_selection(selection, second_page, "n1") is None

    def test_inverted_range_is_noop(self, first_page):
        selection = Selection(text="x", start_word_index=1, end_word_index=0)
        assert confirm_selection(selection, first_page, "n1") is None

    def test_no_page_is_noop(self):
        selection = Selection(text="x", start_word_index=0, end_word_index=0)
        assert confirm_selection(selection, None, "n1") is None
