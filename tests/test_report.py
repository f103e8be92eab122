"""Tests for PDF report generation."""

import base64

import pytest

from nurturetalk.core.report import (
    NO_BOT_RESPONSE,
    NO_SUMMARIZABLE_RESPONSE,
    ReportGenerator,
    build_transcript,
    paginate,
    select_report_text,
    to_latin1,
    wrap_text,
)
from nurturetalk.core.prompts import PDF_REQUEST_TAG
from nurturetalk.errors import NothingToReportError
from nurturetalk.models.chat import Message


def char_width(s: str) -> float:
    return float(len(s))


# -- text selection ----------------------------------------------------------


def test_empty_conversation_has_nothing_to_report() -> None:
    with pytest.raises(NothingToReportError, match=NO_BOT_RESPONSE):
        select_report_text([])


def test_single_message_has_nothing_to_report() -> None:
    with pytest.raises(NothingToReportError):
        select_report_text([Message(role="user", content="hello")])


def test_only_confirmation_has_nothing_to_summarize() -> None:
    messages = [
        Message(role="user", content="pdf please"),
        Message(role="bot", content=f"Of course! {PDF_REQUEST_TAG}"),
    ]
    with pytest.raises(NothingToReportError, match=NO_SUMMARIZABLE_RESPONSE):
        select_report_text(messages)


def test_picks_latest_real_bot_answer() -> None:
    messages = [
        Message(role="user", content="What is CSR?"),
        Message(role="bot", content="Corporate social responsibility."),
        Message(role="user", content="What is an FCRA licence?"),
        Message(role="bot", content="A licence to receive foreign contributions."),
        Message(role="user", content="Give me a PDF"),
        Message(role="bot", content=f"Of course! {PDF_REQUEST_TAG}"),
    ]
    assert select_report_text(messages) == "NurtureTalk: A licence to receive foreign contributions."


def test_transcript_strips_tags() -> None:
    transcript = build_transcript([
        Message(role="user", content="pdf"),
        Message(role="bot", content=f"Sure {PDF_REQUEST_TAG}"),
    ])
    assert transcript == "user: pdf\nbot: Sure"


# -- layout ------------------------------------------------------------------


def test_wrap_never_splits_words() -> None:
    text = "Community based organisations often partner with larger international NGOs"

    lines = wrap_text(text, 20, char_width)

    assert all(len(line) <= 20 for line in lines)
    assert " ".join(lines).split() == text.split()


def test_wrap_overlong_word_gets_own_line() -> None:
    lines = wrap_text("a supercalifragilisticexpialidocious b", 10, char_width)
    assert lines == ["a", "supercalifragilisticexpialidocious", "b"]


def test_wrap_keeps_paragraphs() -> None:
    assert wrap_text("one\n\ntwo", 50, char_width) == ["one", "", "two"]


def test_paginate_single_page() -> None:
    assert paginate(["line"] * 5, page_height=297) == [["line"] * 5]


def test_paginate_breaks_on_cursor_position() -> None:
    # A4: body starts at y=25, each line 7mm, break when y + 10 > 282
    pages = paginate([f"l{i}" for i in range(100)], page_height=297)

    assert len(pages) > 1
    assert len(pages[0]) == 36
    assert sum(len(p) for p in pages) == 100


def test_long_text_renders_multiple_pages(tmp_path) -> None:
    text = "NurtureTalk: " + " ".join(["Fundraising requires patience and planning."] * 400)
    generator = ReportGenerator(tmp_path)

    pages = generator.layout(text)
    report = generator.render(text)

    assert len(pages) > 1
    assert report.pages == len(pages)
    assert report.data.startswith(b"%PDF")
    words = [w for page in pages for line in page for w in line.split()]
    assert words == text.split()


def test_short_text_is_one_page(tmp_path) -> None:
    report = ReportGenerator(tmp_path).render("NurtureTalk: short answer")
    assert report.pages == 1


def test_data_uri(tmp_path) -> None:
    report = ReportGenerator(tmp_path).render("NurtureTalk: hi")
    uri = report.data_uri()
    assert uri.startswith("data:application/pdf;base64,")
    assert base64.b64decode(uri.split(",", 1)[1]) == report.data


def test_save_writes_file(tmp_path) -> None:
    generator = ReportGenerator(tmp_path / "reports")
    report = generator.render("NurtureTalk: hi")

    path = generator.save(report, "my report.pdf")

    assert path.name == "my_report.pdf"
    assert path.read_bytes() == report.data


def test_non_latin_text_is_replaced(tmp_path) -> None:
    assert to_latin1("“quoted” — ok") == '"quoted" - ok'
    report = ReportGenerator(tmp_path).render("NurtureTalk: नमस्ते NGO")
    assert report.pages == 1
