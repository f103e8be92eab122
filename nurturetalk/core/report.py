"""
PDF report generation.

Layout (A4, millimetres): 15 mm margins, Helvetica 12, a bold centred title
on every page, the body 10 mm below the title and 7 mm between lines. A page
is full when the next line would come within 10 mm of the bottom margin.
Body text is wrapped on whitespace only, so words are never split; a word
wider than the page gets a line to itself.
"""

import base64
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from fpdf import FPDF

from ..errors import NothingToReportError
from ..models.chat import Message
from .prompts import PDF_REQUEST_TAG

logger = logging.getLogger(__name__)

REPORT_TITLE = "NurtureTalk Conversation Report"
FONT = "helvetica"
FONT_SIZE = 12
MARGIN = 15.0
TITLE_GAP = 10.0
LINE_HEIGHT = 7.0
BOTTOM_CLEARANCE = 10.0

NO_BOT_RESPONSE = "There is no bot response to generate a report from."
NO_SUMMARIZABLE_RESPONSE = "Could not find a previous bot response to summarize."

# Core PDF fonts only cover Latin-1
_TYPOGRAPHY = str.maketrans({
    "\u2018": "'", "\u2019": "'", "\u201c": "\"", "\u201d": "\"",
    "\u2013": "-", "\u2014": "-", "\u2026": "...", "\u2022": "*", "\u00a0": " ",
})


@dataclass
class RenderedReport:
    data: bytes
    pages: int

    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:application/pdf;base64,{encoded}"


def strip_tags(text: str) -> str:
    return text.replace(PDF_REQUEST_TAG, "").strip()


def select_report_text(messages: Sequence[Message]) -> str:
    """
    Pick the text a report is built from: the latest bot answer that is not
    itself a report confirmation.

    Raises:
        NothingToReportError: the conversation has no usable bot answer
    """
    if len(messages) < 2:
        raise NothingToReportError(NO_BOT_RESPONSE)

    for message in reversed(messages):
        if message.role == "bot" and PDF_REQUEST_TAG not in message.content:
            return f"NurtureTalk: {strip_tags(message.content)}"

    raise NothingToReportError(NO_SUMMARIZABLE_RESPONSE)


def build_transcript(messages: Sequence[Message]) -> str:
    """Plain transcript for summarization."""
    if not messages:
        raise NothingToReportError(NO_BOT_RESPONSE)
    return "\n".join(f"{m.role}: {strip_tags(m.content)}" for m in messages)


def to_latin1(text: str) -> str:
    return text.translate(_TYPOGRAPHY).encode("latin-1", "replace").decode("latin-1")


def wrap_text(text: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """
    Greedy word wrap.

    Args:
        text: Body text; newlines start new paragraphs
        max_width: Usable line width
        measure: Width of a string in the same unit as max_width

    Returns:
        Lines, each a whitespace-joined run of whole words
    """
    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        current = words[0]
        for word in words[1:]:
            candidate = f"{current} {word}"
            if measure(candidate) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
    return lines


def paginate(lines: Sequence[str], page_height: float, margin: float = MARGIN) -> List[List[str]]:
    """Split wrapped lines into pages using the report's cursor arithmetic."""
    pages: List[List[str]] = [[]]
    y = margin + TITLE_GAP
    for line in lines:
        if y + BOTTOM_CLEARANCE > page_height - margin:
            pages.append([])
            y = margin + TITLE_GAP
        pages[-1].append(line)
        y += LINE_HEIGHT
    return pages


class ReportGenerator:
    """Renders conversation text into a paginated PDF."""

    def __init__(self, report_dir: Path = Path("data/reports")):
        self.report_dir = Path(report_dir)

    def layout(self, text: str) -> List[List[str]]:
        """Wrapped and paginated body lines for ``text``."""
        pdf = self._new_document()
        return self._layout(pdf, to_latin1(text))

    def render(self, text: str) -> RenderedReport:
        pdf = self._new_document()
        pages = self._layout(pdf, to_latin1(text))

        for page_lines in pages:
            pdf.add_page()
            y = self._draw_title(pdf)
            pdf.set_font(FONT, size=FONT_SIZE)
            for line in page_lines:
                if line:
                    pdf.text(MARGIN, y, line)
                y += LINE_HEIGHT

        data = bytes(pdf.output())
        logger.info("Rendered report: %d pages, %d bytes", len(pages), len(data))
        return RenderedReport(data=data, pages=len(pages))

    def save(self, report: RenderedReport, filename: Optional[str] = None) -> Path:
        """Write a rendered report under the report directory."""
        if filename is None:
            stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
            filename = f"NurtureTalk-Report-{stamp}.pdf"
        filename = re.sub(r"[^A-Za-z0-9._-]", "_", filename)
        self.report_dir.mkdir(parents=True, exist_ok=True)
        path = self.report_dir / filename
        path.write_bytes(report.data)
        logger.info("Saved report to %s", path)
        return path

    def _new_document(self) -> FPDF:
        pdf = FPDF(orientation="P", unit="mm", format="A4")
        pdf.set_auto_page_break(False)
        pdf.set_margins(MARGIN, MARGIN, MARGIN)
        pdf.set_font(FONT, size=FONT_SIZE)
        return pdf

    def _layout(self, pdf: FPDF, text: str) -> List[List[str]]:
        pdf.set_font(FONT, size=FONT_SIZE)
        usable_width = pdf.w - MARGIN * 2
        lines = wrap_text(text, usable_width, pdf.get_string_width)
        return paginate(lines, pdf.h, MARGIN)

    def _draw_title(self, pdf: FPDF) -> float:
        pdf.set_font(FONT, style="B", size=FONT_SIZE)
        x = (pdf.w - pdf.get_string_width(REPORT_TITLE)) / 2
        pdf.text(x, MARGIN, REPORT_TITLE)
        return MARGIN + TITLE_GAP
