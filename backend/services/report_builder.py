"""PDF session report generation with PyMuPDF."""
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import fitz  # PyMuPDF

from config import REPORT_DIR
from models.conversation import Turn
from services.session_summary import SessionSummary, summarize_session

logger = logging.getLogger(__name__)

Color = Tuple[float, float, float]

# Layout is expressed in millimetres on A4 and converted to PDF points
MM = 72 / 25.4
PAGE_WIDTH = 210.0
PAGE_HEIGHT = 297.0
MARGIN = 20.0
CONTENT_WIDTH = PAGE_WIDTH - MARGIN * 2

REGULAR_FONT = "helv"
BOLD_FONT = "hebo"

TITLE = "FitCoach AI"
SUBTITLE = "Personal Fitness Report"
RUNNING_HEADER = "FitCoach AI - Fitness Report"
FOOTER_TEXT = "Generated by FitCoach AI - Your Personal Fitness Coach"
USER_LABEL = "YOU"
COACH_LABEL = "FITCOACH AI"

NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E\n]")


def _rgb(r: int, g: int, b: int) -> Color:
    return (r / 255, g / 255, b / 255)


EMERALD = _rgb(16, 185, 129)
EMERALD_DARK = _rgb(13, 148, 103)
EMERALD_PILL = _rgb(240, 253, 244)
EMERALD_PILL_TEXT = _rgb(16, 150, 110)
WHITE = _rgb(255, 255, 255)
BODY_TEXT = _rgb(60, 60, 60)
MESSAGE_TEXT = _rgb(50, 50, 50)
COACH_PILL = _rgb(243, 244, 246)
COACH_PILL_TEXT = _rgb(55, 65, 81)
HEADER_GREY = _rgb(120, 120, 120)
HEADER_RULE = _rgb(220, 220, 220)
DIVIDER = _rgb(230, 230, 230)
FOOTER_GREY = _rgb(150, 150, 150)


def report_filename(generated_at: datetime) -> str:
    """File name dated by the UTC day; naive timestamps are taken as local time."""
    return f"FitCoach_Report_{generated_at.astimezone(timezone.utc):%Y-%m-%d}.pdf"


def sanitize_content(text: str) -> str:
    """Drop characters outside printable ASCII (newlines survive) and trim."""
    return NON_PRINTABLE_RE.sub("", text).strip()


def text_width(text: str, fontsize: float, bold: bool = False) -> float:
    """Rendered width of text in millimetres."""
    fontname = BOLD_FONT if bold else REGULAR_FONT
    return fitz.get_text_length(text, fontname=fontname, fontsize=fontsize) / MM


def wrap_text(text: str, max_width: float, fontsize: float) -> List[str]:
    """
    Word-wrap text to a width in millimetres.

    Explicit newlines start a new line, blank lines are kept, and words
    wider than the line are split across lines.
    """
    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if text_width(candidate, fontsize) <= max_width:
                current = candidate
                continue

            if current:
                lines.append(current)
            while len(word) > 1 and text_width(word, fontsize) > max_width:
                cut = len(word) - 1
                while cut > 1 and text_width(word[:cut], fontsize) > max_width:
                    cut -= 1
                lines.append(word[:cut])
                word = word[cut:]
            current = word
        lines.append(current)
    return lines


class _Canvas:
    """Cursor-based drawing surface over a PyMuPDF document."""

    def __init__(self):
        self.doc = fitz.open()
        self.page = self._new_page()
        self.y = MARGIN

    def _new_page(self):
        return self.doc.new_page(width=PAGE_WIDTH * MM, height=PAGE_HEIGHT * MM)

    def text(
        self,
        x: float,
        y: float,
        text: str,
        fontsize: float,
        color: Color,
        bold: bool = False,
        align: str = "left"
    ) -> None:
        if align == "right":
            x -= text_width(text, fontsize, bold)
        elif align == "center":
            x -= text_width(text, fontsize, bold) / 2
        self.page.insert_text(
            fitz.Point(x * MM, y * MM),
            text,
            fontsize=fontsize,
            fontname=BOLD_FONT if bold else REGULAR_FONT,
            color=color
        )

    def rect(self, x: float, y: float, w: float, h: float, fill: Color, radius: float = 0) -> None:
        # PyMuPDF takes corner radii relative to the rectangle's sides
        relative = (min(0.5, radius / w), min(0.5, radius / h)) if radius else None
        self.page.draw_rect(
            fitz.Rect(x * MM, y * MM, (x + w) * MM, (y + h) * MM),
            color=None,
            fill=fill,
            width=0,
            radius=relative
        )

    def line(self, x1: float, y1: float, x2: float, y2: float, color: Color, width: float = 0.2) -> None:
        self.page.draw_line(
            fitz.Point(x1 * MM, y1 * MM),
            fitz.Point(x2 * MM, y2 * MM),
            color=color,
            width=width * MM
        )

    def dot(self, x: float, y: float, radius: float, fill: Color) -> None:
        self.page.draw_circle(fitz.Point(x * MM, y * MM), radius * MM, color=None, fill=fill, width=0)

    def ensure_space(self, needed: float) -> None:
        """Start a new page when `needed` mm do not fit above the bottom margin."""
        if self.y + needed <= PAGE_HEIGHT - MARGIN:
            return
        self.page = self._new_page()
        self.text(MARGIN, 12, RUNNING_HEADER, 8, HEADER_GREY)
        self.line(MARGIN, 14, PAGE_WIDTH - MARGIN, 14, HEADER_RULE)
        self.y = 22


class ReportBuilder:
    """Renders a chat transcript as a paginated FitCoach PDF report."""

    def build(self, turns: Sequence[Turn], generated_at: Optional[datetime] = None) -> bytes:
        """
        Render the report.

        Args:
            turns: Full transcript, oldest first
            generated_at: Timestamp printed on the report (defaults to now)

        Returns:
            PDF document bytes
        """
        generated_at = generated_at or datetime.now()
        summary = summarize_session(turns)

        canvas = _Canvas()
        canvas.doc.set_metadata({
            "title": f"{TITLE} {SUBTITLE}",
            "author": TITLE,
            "creator": TITLE,
        })

        self._draw_banner(canvas, generated_at)
        self._draw_summary(canvas, summary, generated_at)
        if summary.topics:
            self._draw_topics(canvas, summary.topics)
        self._draw_conversation(canvas, turns)
        self._draw_footers(canvas)

        page_count = canvas.doc.page_count
        data = canvas.doc.tobytes()
        canvas.doc.close()

        logger.info(
            f"Built report: {summary.total_messages} messages, "
            f"{len(summary.topics)} topics, {page_count} pages"
        )
        return data

    def save(
        self,
        turns: Sequence[Turn],
        directory: Union[str, Path] = REPORT_DIR,
        generated_at: Optional[datetime] = None
    ) -> Path:
        """Render the report and write it as FitCoach_Report_<date>.pdf."""
        generated_at = generated_at or datetime.now()
        path = Path(directory) / report_filename(generated_at)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.build(turns, generated_at))
        logger.info(f"Saved report to {path}")
        return path

    def _draw_banner(self, canvas: _Canvas, generated_at: datetime) -> None:
        canvas.rect(0, 0, PAGE_WIDTH, 45, EMERALD)
        canvas.rect(0, 42, PAGE_WIDTH, 3, EMERALD_DARK)

        canvas.text(MARGIN, 22, TITLE, 24, WHITE, bold=True)
        canvas.text(MARGIN, 32, SUBTITLE, 11, WHITE)

        date = f"{generated_at:%A, %B} {generated_at.day}, {generated_at.year}"
        canvas.text(PAGE_WIDTH - MARGIN, 32, date, 9, WHITE, align="right")
        canvas.y = 55

    def _draw_heading(self, canvas: _Canvas, title: str, gap: float = 8) -> None:
        canvas.text(MARGIN, canvas.y, title, 14, EMERALD, bold=True)
        canvas.y += 3
        canvas.line(MARGIN, canvas.y, MARGIN + 40, canvas.y, EMERALD, width=0.5)
        canvas.y += gap

    def _draw_summary(self, canvas: _Canvas, summary: SessionSummary, generated_at: datetime) -> None:
        self._draw_heading(canvas, "Session Summary")

        stats = [
            f"Total Messages: {summary.total_messages}",
            f"Your Questions: {summary.user_messages}",
            f"Coach Responses: {summary.assistant_messages}",
            f"Report Generated: {generated_at:%I:%M:%S %p}",
        ]
        for stat in stats:
            canvas.dot(MARGIN + 3, canvas.y - 1.2, 0.6, BODY_TEXT)
            canvas.text(MARGIN + 6, canvas.y, stat, 10, BODY_TEXT)
            canvas.y += 6
        canvas.y += 6

    def _draw_topics(self, canvas: _Canvas, topics: Sequence[str]) -> None:
        canvas.ensure_space(30)
        self._draw_heading(canvas, "Topics Discussed")

        for topic in topics:
            canvas.ensure_space(8)
            canvas.rect(MARGIN + 2, canvas.y - 4, text_width(topic, 10) + 8, 7, EMERALD_PILL, radius=2)
            canvas.text(MARGIN + 6, canvas.y, topic, 10, EMERALD_PILL_TEXT)
            canvas.y += 10
        canvas.y += 4

    def _draw_conversation(self, canvas: _Canvas, turns: Sequence[Turn]) -> None:
        canvas.ensure_space(20)
        self._draw_heading(canvas, "Conversation Log", gap=10)

        for turn in turns:
            label = USER_LABEL if turn.is_user else COACH_LABEL
            pill, pill_text = (EMERALD, WHITE) if turn.is_user else (COACH_PILL, COACH_PILL_TEXT)

            canvas.ensure_space(16)
            canvas.rect(MARGIN, canvas.y - 4, text_width(label, 8, bold=True) + 8, 7, pill, radius=2)
            canvas.text(MARGIN + 4, canvas.y, label, 8, pill_text, bold=True)
            canvas.y += 8

            for line in wrap_text(sanitize_content(turn.content), CONTENT_WIDTH - 4, 10):
                canvas.ensure_space(6)
                if line:
                    canvas.text(MARGIN + 2, canvas.y, line, 10, MESSAGE_TEXT)
                canvas.y += 5
            canvas.y += 6

            canvas.ensure_space(4)
            canvas.line(MARGIN, canvas.y, PAGE_WIDTH - MARGIN, canvas.y, DIVIDER)
            canvas.y += 8

    def _draw_footers(self, canvas: _Canvas) -> None:
        total_pages = canvas.doc.page_count
        for number, page in enumerate(canvas.doc, start=1):
            canvas.page = page
            canvas.text(PAGE_WIDTH / 2, PAGE_HEIGHT - 10, FOOTER_TEXT, 8, FOOTER_GREY, align="center")
            canvas.text(
                PAGE_WIDTH - MARGIN, PAGE_HEIGHT - 10,
                f"Page {number} of {total_pages}", 8, FOOTER_GREY, align="right"
            )
