"""Unit tests for the PDF report builder."""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

import re
from datetime import datetime, timedelta, timezone
import fitz  # PyMuPDF
import pytest
from models.conversation import Turn
from services.report_builder import (
    ReportBuilder,
    CONTENT_WIDTH,
    report_filename,
    sanitize_content,
    text_width,
    wrap_text,
)

GENERATED_AT = datetime(2026, 10, 19, 14, 30, 5, tzinfo=timezone.utc)


def read_pdf(data):
    doc = fitz.open(stream=data, filetype="pdf")
    pages = [page.get_text() for page in doc]
    doc.close()
    return pages


def stat(text, label):
    match = re.search(rf"{label}: (\d+)", text)
    assert match, f"{label} not found"
    return int(match.group(1))


@pytest.fixture
def builder():
    return ReportBuilder()


@pytest.fixture
def conversation():
    return [
        Turn(role="user", content="How much protein should I eat?"),
        Turn(role="assistant", content="Aim for 1.6g per kg. Yoga helps recovery too."),
        Turn(role="user", content="Thanks!"),
    ]


class TestHelpers:
    """Test suite for text helpers."""

    def test_sanitize_strips_non_ascii(self):
        """Test emoji and other non-printable characters are removed."""
        assert sanitize_content("  💪 Let's go!\tNow\n") == "Let's go!Now"

    def test_sanitize_keeps_newlines(self):
        """Test newlines inside content survive."""
        assert sanitize_content("a\nb") == "a\nb"

    def test_wrap_fits_width(self):
        """Test wrapped lines never exceed the requested width."""
        text = "Squats lunges deadlifts and presses " * 30

        lines = wrap_text(text, CONTENT_WIDTH - 4, 10)

        assert len(lines) > 1
        assert all(text_width(line, 10) <= CONTENT_WIDTH - 4 for line in lines)
        assert " ".join(lines).split() == text.split()

    def test_wrap_keeps_blank_lines(self):
        """Test paragraph breaks are preserved."""
        assert wrap_text("one\n\ntwo", 100, 10) == ["one", "", "two"]

    def test_wrap_splits_long_words(self):
        """Test a word wider than the line is broken up."""
        word = "x" * 400

        lines = wrap_text(word, 50, 10)

        assert len(lines) > 1
        assert "".join(lines) == word

    def test_report_filename_uses_date(self):
        """Test the file name carries the ISO date."""
        assert report_filename(GENERATED_AT) == "FitCoach_Report_2026-10-19.pdf"

    def test_report_filename_uses_utc_day(self):
        """Test a late-evening local timestamp is filed under the UTC date."""
        evening = datetime(2026, 10, 19, 22, 15, tzinfo=timezone(timedelta(hours=-5)))

        assert report_filename(evening) == "FitCoach_Report_2026-10-20.pdf"


class TestReportBuilder:
    """Test suite for ReportBuilder."""

    def test_build_returns_pdf(self, builder, conversation):
        """Test the output is a PDF document."""
        data = builder.build(conversation, GENERATED_AT)

        assert data.startswith(b"%PDF")

    def test_summary_counts_match_transcript(self, builder, conversation):
        """Test total and per-role counts match the input."""
        text = read_pdf(builder.build(conversation, GENERATED_AT))[0]

        total = stat(text, "Total Messages")
        questions = stat(text, "Your Questions")
        responses = stat(text, "Coach Responses")
        assert total == len(conversation)
        assert questions + responses == total
        assert questions == 2

    def test_banner_and_sections(self, builder, conversation):
        """Test title, date, and the section headings are rendered."""
        text = read_pdf(builder.build(conversation, GENERATED_AT))[0]

        assert "FitCoach AI" in text
        assert "Personal Fitness Report" in text
        assert "Monday, October 19, 2026" in text
        assert "Session Summary" in text
        assert "Topics Discussed" in text
        assert "Protein & Macros" in text
        assert "Conversation Log" in text
        assert "YOU" in text
        assert "FITCOACH AI" in text

    def test_no_topics_section_without_topics(self, builder):
        """Test the topics block is skipped when nothing matched."""
        text = read_pdf(builder.build([Turn(role="user", content="Hello")], GENERATED_AT))[0]

        assert "Topics Discussed" not in text

    def test_long_transcript_paginates_with_footers(self, builder):
        """Test long sessions break across pages with numbered footers."""
        turns = [
            Turn(role="user" if i % 2 == 0 else "assistant", content=f"Message {i} " + "rep " * 120)
            for i in range(20)
        ]

        pages = read_pdf(builder.build(turns, GENERATED_AT))

        assert len(pages) > 1
        for number, text in enumerate(pages, start=1):
            assert f"Page {number} of {len(pages)}" in text
            assert "Generated by FitCoach AI" in text
        assert "FitCoach AI - Fitness Report" in pages[1]

    def test_content_is_sanitized(self, builder):
        """Test emoji never reach the document."""
        text = read_pdf(builder.build([Turn(role="user", content="💪 Best exercises for abs")], GENERATED_AT))[0]

        assert "Best exercises for abs" in text
        assert "💪" not in text

    def test_empty_transcript(self, builder):
        """Test an empty transcript still renders a one-page report."""
        pages = read_pdf(builder.build([], GENERATED_AT))

        assert len(pages) == 1
        assert stat(pages[0], "Total Messages") == 0

    def test_save_writes_dated_file(self, builder, conversation, tmp_path):
        """Test save writes FitCoach_Report_<date>.pdf into the directory."""
        path = builder.save(conversation, tmp_path, GENERATED_AT)

        assert path == tmp_path / "FitCoach_Report_2026-10-19.pdf"
        assert path.read_bytes().startswith(b"%PDF")
