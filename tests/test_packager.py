"""Tests for shared packager checks and template filters."""

from datetime import date

import pytest

from manuscript_press.errors import StructuralError
from manuscript_press.packaging import check_chapters
from manuscript_press.packaging.filters import format_date, paragraphs, strip_markup, year
from schemas.chapter import Chapter


class TestCheckChapters:
    """Tests for chapter position checks."""

    def test_returns_chapters_sorted_by_position(self):
        """Chapters supplied out of order come back in reading order."""
        chapters = [
            Chapter(position=3, title="Three"),
            Chapter(position=1, title="One"),
            Chapter(position=2, title="Two"),
        ]

        ordered = check_chapters(chapters)

        assert [c.title for c in ordered] == ["One", "Two", "Three"]

    def test_empty_list_raises(self):
        """An empty chapter list is rejected."""
        with pytest.raises(StructuralError, match="empty"):
            check_chapters([])

    def test_gap_in_positions_raises(self):
        """Positions 1 and 3 without 2 are rejected."""
        chapters = [Chapter(position=1, title="One"), Chapter(position=3, title="Three")]

        with pytest.raises(StructuralError, match="missing \\[2\\]"):
            check_chapters(chapters)

    def test_duplicate_positions_raise(self):
        """Two chapters at the same position are rejected."""
        chapters = [Chapter(position=1, title="One"), Chapter(position=1, title="Also one")]

        with pytest.raises(StructuralError, match="Duplicate"):
            check_chapters(chapters)

    def test_positions_must_start_at_one(self):
        """A list starting at position 2 is rejected."""
        chapters = [Chapter(position=2, title="Two"), Chapter(position=3, title="Three")]

        with pytest.raises(StructuralError):
            check_chapters(chapters)

    def test_does_not_modify_input(self):
        """The caller's list keeps its order."""
        chapters = [Chapter(position=2, title="Two"), Chapter(position=1, title="One")]

        check_chapters(chapters)

        assert [c.position for c in chapters] == [2, 1]

    def test_illegal_character_in_body_raises(self):
        """A NUL byte in a body is rejected with its code point."""
        chapters = [Chapter(position=1, title="One", body="a\x00b")]

        with pytest.raises(StructuralError, match="U\\+0000 at offset 1"):
            check_chapters(chapters)

    def test_metadata_text_checked(self, metadata):
        """Metadata strings are checked when metadata is given."""
        chapters = [Chapter(position=1, title="One")]
        bad = metadata.model_copy(update={"subtitle": "A\x07Novel"})

        assert check_chapters(chapters, metadata) == chapters
        with pytest.raises(StructuralError, match="subtitle"):
            check_chapters(chapters, bad)


class TestFilters:
    """Tests for the Jinja2 template filters."""

    def test_paragraphs_split_on_blank_lines(self):
        """Blank lines separate paragraphs and single newlines fold."""
        assert paragraphs("One.\n\nTwo\nlines.\n\n\n  \nThree.") == [
            "One.",
            "Two lines.",
            "Three.",
        ]

    def test_paragraphs_handles_windows_newlines(self):
        """CRLF line endings split the same way as LF."""
        assert paragraphs("One.\r\n\r\nTwo.") == ["One.", "Two."]

    def test_paragraphs_of_empty_body(self):
        """An empty body has no paragraphs."""
        assert paragraphs("") == []

    def test_strip_markup(self):
        """Tags are removed and the text kept."""
        assert strip_markup("<p>Hello <em>there</em></p>") == "Hello there"

    def test_format_date(self):
        """Dates format without a leading zero on the day."""
        assert format_date(date(2026, 1, 5)) == "January 5, 2026"
        assert format_date(None) == ""

    def test_year(self):
        """The year filter returns the four-digit year."""
        assert year(date(2024, 6, 1)) == "2024"
