"""Tests for branded PDF export."""

import re
from datetime import date

import pytest

from complipilot.core.errors import ValidationError
from complipilot.features.export.pdf import (
    ICON_SIZE,
    MARGIN_LEFT,
    MARGIN_TOP,
    PAGE_HEIGHT,
    PdfExporter,
    build_filename,
    export_result_to_pdf,
    export_results_to_pdf,
    load_icon,
    parse_blocks,
    select_results,
)
from complipilot.features.toolkits.registry import get_toolkit

TODAY = date(2025, 3, 14)


def _long_report(paragraphs: int = 60) -> str:
    body = []
    for i in range(paragraphs):
        body.append(f"## Section {i + 1}")
        body.append("This paragraph is long enough to wrap across several lines of the page. " * 4)
    return "\n\n".join(body)


def _exporter(**kwargs):
    return PdfExporter(get_toolkit("complipilot"), icon_source="", page_compression=0, today=TODAY, **kwargs)


def test_short_report_is_one_page():
    document = _exporter().export_result("# Title\n\nOne paragraph.")
    assert document.content.startswith(b"%PDF")
    assert document.page_count == 1
    assert b"Page 1 of 1" in document.content
    assert b"Powered by YourBizGuru.com" in document.content


def test_multi_page_footers_carry_total():
    document = _exporter().export_result(_long_report())
    total = document.page_count
    assert total > 1
    for page in range(1, total + 1):
        assert f"Page {page} of {total}".encode() in document.content
    assert f"Page {total + 1} of".encode() not in document.content


def test_header_shows_toolkit_name_on_every_page():
    document = _exporter().export_result(_long_report())
    assert len(re.findall(rb"\(CompliPilot\) Tj", document.content)) == document.page_count


def test_filename_format():
    assert build_filename("Elev8 Analyzer", "Report", TODAY) == "2025-03-14_YBG_Elev8_Analyzer_Report.pdf"
    assert build_filename("  Grant--Genie! ", "All_Results", TODAY) == "2025-03-14_YBG_Grant_Genie_All_Results.pdf"


def test_single_export_filename():
    document = export_result_to_pdf("text", get_toolkit("elev8analyzer"), icon_source="", today=TODAY)
    assert document.filename == "2025-03-14_YBG_Elev8_Analyzer_Report.pdf"
    assert document.content_disposition == 'attachment; filename="2025-03-14_YBG_Elev8_Analyzer_Report.pdf"'


def test_latest_mode_keeps_newest_result():
    results = [
        {"title": "Old", "text": "old", "timestamp": "2025-01-01T00:00:00Z"},
        {"title": "New", "text": "new", "timestamp": "2025-02-01T00:00:00Z"},
        {"title": "Mid", "text": "mid", "timestamp": "2025-01-15T00:00:00Z"},
    ]
    assert [r["title"] for r in select_results(results, "latest")] == ["New"]
    assert len(select_results(results, "all")) == 3

    document = export_results_to_pdf(results, "latest", icon_source="", page_compression=0, today=TODAY)
    assert document.filename.endswith("_Latest_Result.pdf")
    assert b"(New) Tj" in document.content
    assert b"(Old) Tj" not in document.content


def test_all_mode_titles_default_when_missing():
    results = [{"text": "first"}, {"title": "Named", "text": "second"}]
    document = export_results_to_pdf(results, "all", icon_source="", page_compression=0, today=TODAY)
    assert document.filename.endswith("_All_Results.pdf")
    assert b"(Result 1) Tj" in document.content
    assert b"(Named) Tj" in document.content


def test_unknown_mode_rejected():
    with pytest.raises(ValidationError):
        _exporter().export_results([{"text": "x"}], "some")


def test_missing_icon_is_skipped():
    document = PdfExporter(icon_source="/nonexistent/icon.png", page_compression=0).export_result("hello")
    assert document.page_count == 1


def test_parse_blocks():
    blocks = parse_blocks("# Heading\n\n**Bold** line\nnext line\n\n---\n### Small ✓")
    assert blocks == [
        ("heading", (1, "Heading")),
        ("paragraph", ["Bold line", "next line"]),
        ("rule", None),
        ("heading", (3, "Small [x]")),
    ]


def test_export_endpoints(client):
    resp = client.post("/api/export/pdf", json={"text": "# Hello\n\nWorld", "toolkit": "grantgenie"})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert "_YBG_GrantGenie_Report.pdf" in resp.headers["content-disposition"]
    assert resp.headers["x-page-count"] == "1"

    batch = client.post(
        "/api/export/pdf/batch",
        json={"results": [{"text": "a"}, {"text": "b"}], "mode": "all"},
    )
    assert batch.status_code == 200
    assert "_All_Results.pdf" in batch.headers["content-disposition"]

    bad = client.post("/api/export/pdf/batch", json={"results": [{"text": "a"}], "mode": "first"})
    assert bad.status_code == 400

    empty = client.post("/api/export/pdf", json={"text": "   "})
    assert empty.status_code == 400


_FONT_OP = re.compile(rb"(/F\d+) ([\d.]+) Tf ([\d.]+) TL")
BODY_FONT = (b"/F1", b"12", b"18")
HEADER_TITLE_FONT = (b"/F2", b"16", b"19.2")


def _page_streams(content: bytes):
    streams = re.findall(rb"\bstream\r?\n(.*?)endstream", content, re.S)
    return [s for s in streams if b"(CompliPilot) Tj" in s]


def test_body_style_restored_after_headings_and_page_breaks():
    document = _exporter().export_result(_long_report())
    pages = _page_streams(document.content)
    assert len(pages) == document.page_count > 1

    for stream in pages:
        fonts = _FONT_OP.findall(stream)
        title = fonts.index(HEADER_TITLE_FONT)
        assert fonts[title + 1] == BODY_FONT
        for current, following in zip(fonts, fonts[1:]):
            if current[0] == b"/F2":
                assert following == BODY_FONT


def test_icon_is_cached_and_centred_in_ring(tmp_path):
    from PIL import Image

    icon = tmp_path / "icon.png"
    Image.new("RGB", (8, 8), (79, 195, 247)).save(icon)
    load_icon.cache_clear()
    exporter = PdfExporter(get_toolkit("complipilot"), icon_source=str(icon), page_compression=0, today=TODAY)

    document = exporter.export_result(_long_report())
    exporter.export_result("# Short")
    info = load_icon.cache_info()
    assert (info.misses, info.hits) == (1, 1)

    placements = [
        re.search(rb"32 0 0 32 ([\d.]+) ([\d.]+) cm\s+/(\S+) Do", stream)
        for stream in _page_streams(document.content)
    ]
    assert len(placements) == document.page_count
    assert all(placements)
    assert len({m.group(3) for m in placements}) == 1

    ring_cx = MARGIN_LEFT + ICON_SIZE / 2
    ring_cy = PAGE_HEIGHT - (MARGIN_TOP - 24)
    for m in placements:
        assert abs(float(m.group(1)) + ICON_SIZE / 2 - ring_cx) < 0.01
        assert abs(float(m.group(2)) + ICON_SIZE / 2 - ring_cy) < 0.01
    load_icon.cache_clear()
