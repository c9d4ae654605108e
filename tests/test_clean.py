"""Tests for page text cleaning."""

from dnav.config import CleaningConfig
from dnav.extract.clean import (
    build_header_footer_set,
    clean_page,
    clean_pages,
    digit_ratio,
    is_all_caps_header,
    is_boilerplate,
    is_bullet,
    is_dated_commitment,
    is_footnote_line,
    is_page_number_line,
    is_table_like,
    merge_wrapped_lines,
    page_looks_low_signal,
    strip_footnote_markers,
)
from dnav.extract.models import PageText

from tests.conftest import BOILERPLATE_SENTENCE, COMMITMENT_SENTENCE, TABLE_LINE


class TestHeaderFooterDetection:
    """Tests for running header/footer detection."""

    def test_recurring_short_lines_detected(self, report_pages) -> None:
        """Lines repeated on most pages are flagged, case-insensitively."""
        frequent = build_header_footer_set(report_pages)
        assert "acme corp q4 update" in frequent
        assert "acme corp | investor relations" in frequent

    def test_single_page_has_no_headers(self) -> None:
        """A single page never yields headers."""
        pages = [PageText(page=1, text="Confidential\nWe will build it.")]
        assert build_header_footer_set(pages) == frozenset()

    def test_long_lines_not_treated_as_headers(self) -> None:
        """Lines longer than the short-line limit are kept even when repeated."""
        pages = [PageText(page=n, text=COMMITMENT_SENTENCE) for n in range(1, 4)]
        assert build_header_footer_set(pages) == frozenset()

    def test_ratio_threshold(self) -> None:
        """A line on too few pages is not a header."""
        pages = [
            PageText(page=1, text="Draft"),
            PageText(page=2, text="Other"),
            PageText(page=3, text="Text"),
            PageText(page=4, text="Draft"),
        ]
        # ceil(4 * 0.6) = 3 pages required
        assert build_header_footer_set(pages) == frozenset()
        strict = CleaningConfig(header_footer_ratio=0.5)
        assert "draft" in build_header_footer_set(pages, strict)


class TestLineFilters:
    """Tests for single-line filters."""

    def test_page_numbers(self) -> None:
        """Bare page markers are recognized."""
        assert is_page_number_line("12")
        assert is_page_number_line("Page 3")
        assert is_page_number_line("3 of 10")
        assert is_page_number_line("3/10")
        assert not is_page_number_line("3 new plants")

    def test_footnotes(self) -> None:
        """Footnote lines start with a bracketed number."""
        assert is_footnote_line("(1) Excludes one-time items.")
        assert is_footnote_line("[2] See appendix.")
        assert not is_footnote_line("We will open 2 plants.")

    def test_numbered_paren_is_bullet(self) -> None:
        assert is_bullet("(1) We will hire")
        assert not is_bullet("(1)We will hire")

    def test_strip_footnote_markers(self) -> None:
        """Glued markers go; accounting negatives stay."""
        assert strip_footnote_markers("the plant(1) in 2026[2].") == "the plant in 2026."
        assert strip_footnote_markers("Net loss of (12) million") == "Net loss of (12) million"

    def test_dated_commitment(self) -> None:
        assert is_dated_commitment("We will ramp in Q3.")
        assert not is_dated_commitment("We will ramp soon.")
        assert not is_dated_commitment("Revenue 2024 2025")

    def test_boilerplate(self) -> None:
        """Disclaimer and statement phrases are boilerplate."""
        assert is_boilerplate(BOILERPLATE_SENTENCE)
        assert is_boilerplate("Reconciliation of GAAP to Non-GAAP Financial Information")
        assert is_boilerplate("Copyright 2025 Acme Corp. All rights reserved.")
        assert is_boilerplate("Source: company filings")
        assert not is_boilerplate(COMMITMENT_SENTENCE)

    def test_all_caps_header(self) -> None:
        """Short uppercase lines are section headings."""
        assert is_all_caps_header("OUTLOOK")
        assert is_all_caps_header("Q3 2025 HIGHLIGHTS")
        assert not is_all_caps_header("We WILL ramp")
        assert not is_all_caps_header("ONE TWO THREE FOUR FIVE SIX SEVEN EIGHT NINE")


class TestTableDetection:
    """Tests for table-like line detection."""

    def test_numeric_row(self) -> None:
        """Rows of numbers are table-like."""
        assert is_table_like(TABLE_LINE)
        assert is_table_like("Revenue 1,234 1,456 1,789 2,001")

    def test_currency_and_percent(self) -> None:
        """Two or more currency or percent hits make a line table-like."""
        assert is_table_like("Margins were 18% and 21% respectively")
        assert is_table_like("Cost fell from $5 to $3 per unit")

    def test_delimited_cells(self) -> None:
        """Pipe-delimited numeric cells are table-like."""
        assert is_table_like("| 12 | 15 | 18 |")

    def test_long_digit_run(self) -> None:
        """Long digit runs are table-like."""
        assert is_table_like("Account 12345678")

    def test_prose_is_not_table(self) -> None:
        """Sentences with a few dates are prose."""
        assert not is_table_like(COMMITMENT_SENTENCE)

    def test_quarter_labels_are_not_numbers(self) -> None:
        """Q1..Q4 labels do not count as standalone numbers."""
        assert not is_table_like("Q1 Q2 Q3 Q4 plans")

    def test_short_fragment_skips_digit_ratio(self) -> None:
        """A wrapped tail with a year survives."""
        assert not is_table_like("Texas by 2025.")

    def test_digit_ratio(self) -> None:
        """Digit ratio ignores whitespace."""
        assert digit_ratio("12 ab") == 0.5
        assert digit_ratio("   ") == 0.0


class TestMergeWrappedLines:
    """Tests for rejoining wrapped lines."""

    def test_joins_unfinished_sentence(self) -> None:
        """A line continues a block that did not end a sentence."""
        blocks = merge_wrapped_lines(
            ["We plan to begin construction of the", "new plant in 2026.", "Next sentence here."]
        )
        assert blocks == [
            "We plan to begin construction of the new plant in 2026.",
            "Next sentence here.",
        ]

    def test_capitalized_continuation_joins(self) -> None:
        """A capitalized line still joins when the block is unfinished."""
        blocks = merge_wrapped_lines(["We will build the new factory in", "Texas by 2025."])
        assert blocks == ["We will build the new factory in Texas by 2025."]

    def test_dehyphenates(self) -> None:
        """A hyphen at a line break is removed before a lowercase word."""
        assert merge_wrapped_lines(["The commis-", "sioning starts."]) == ["The commissioning starts."]

    def test_bullets_start_blocks(self) -> None:
        """Every bullet starts its own block."""
        blocks = merge_wrapped_lines(["• First item", "• Second item"])
        assert blocks == ["• First item", "• Second item"]

    def test_bullet_takes_lowercase_continuation(self) -> None:
        """A wrapped bullet is rejoined."""
        blocks = merge_wrapped_lines(["• We will build the", "new plant.", "Closing remark."])
        assert blocks == ["• We will build the new plant.", "Closing remark."]


class TestCleanPage:
    """Tests for whole-page cleaning."""

    def test_report_page(self, report_pages) -> None:
        """Headers, footers, headings and page numbers are removed."""
        frequent = build_header_footer_set(report_pages)
        cleaned = clean_page(report_pages[0], frequent, file_name="report.pdf")

        assert cleaned.page_number == 1
        assert cleaned.file_name == "report.pdf"
        assert cleaned.lines == (
            "Revenue grew to a record level in the quarter, driven by strong demand.",
            "We plan to begin construction of the new cathode plant in Texas in the first half of 2026.",
        )

    def test_table_and_boilerplate_removed(self, report_pages) -> None:
        """Table rows and disclaimers do not survive cleaning."""
        frequent = build_header_footer_set(report_pages)
        page_two = clean_page(report_pages[1], frequent)
        page_three = clean_page(report_pages[2], frequent)

        assert page_two.lines == (COMMITMENT_SENTENCE,)
        assert page_three.lines == ("Our dashboard includes several views of regional performance data.",)

    def test_clean_pages_drops_empty(self) -> None:
        """Pages with nothing left are dropped."""
        pages = [
            PageText(page=1, text=BOILERPLATE_SENTENCE),
            PageText(page=2, text=COMMITMENT_SENTENCE),
        ]
        cleaned = clean_pages(pages, file_name="deck.pdf")
        assert [p.page_number for p in cleaned] == [2]

    def test_numbered_item_kept(self) -> None:
        """A "(1)" item with a commitment stays as a bullet."""
        text = "(1) We will open the new Austin cathode plant in Q2 2026.\n(2) Excludes one-time items."
        cleaned = clean_page(PageText(page=1, text=text))
        assert cleaned.lines == ("(1) We will open the new Austin cathode plant in Q2 2026.",)

    def test_bracket_footnote_marker_stripped(self) -> None:
        """A leading "[2]" is dropped from a line that states a commitment."""
        cleaned = clean_page(PageText(page=1, text="[2] We will ramp the Berlin line in 2026."))
        assert cleaned.lines == ("We will ramp the Berlin line in 2026.",)

    def test_inline_markers_stripped(self) -> None:
        """Markers glued to words are removed before the table test."""
        cleaned = clean_page(PageText(page=1, text="We will begin production at the Berlin plant(1) in Q2 2026(2)."))
        assert cleaned.lines == ("We will begin production at the Berlin plant in Q2 2026.",)

    def test_dated_commitment_table_line_kept(self) -> None:
        """Figures alone do not remove a dated commitment."""
        line = "We will invest $2 billion to build 3 new plants with 500 GWh of capacity by 2026."
        assert is_table_like(line)
        assert clean_page(PageText(page=1, text=f"{line}\n{TABLE_LINE}")).lines == (line,)


class TestLowSignalPages:
    """Tests for low-signal page detection."""

    def test_numeric_page_is_low_signal(self) -> None:
        """A page of numeric rows is low signal."""
        text = "2024 2025 2026 2027\n1,234 1,456 1,789 2,001\n5.5% 6.1% 7.2% 8.0%\nRevenue"
        assert page_looks_low_signal(text)

    def test_prose_page_is_not_low_signal(self) -> None:
        """A prose page is kept."""
        assert not page_looks_low_signal(COMMITMENT_SENTENCE)
