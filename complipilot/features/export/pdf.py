"""
PDF export of generated results.

Renders Markdown-ish text (``#``/``##``/``###`` headings and blank-line
separated paragraphs) onto A4 pages with a branded header. Footers
("Powered by ..." and "Page X of Y") are drawn in a second pass once the
final page count is known.

All layout values are points with the origin at the top-left corner of the
page; ``_PageWriter`` converts to reportlab's bottom-left origin.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from io import BytesIO
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

import httpx
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from complipilot.core.config import settings
from complipilot.core.errors import ValidationError
from complipilot.features.toolkits.registry import Toolkit, get_toolkit

logger = logging.getLogger("complipilot")

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN_LEFT = 56
MARGIN_RIGHT = 56
MARGIN_TOP = 72
FOOTER_HEIGHT = 36
MARGIN_BOTTOM = 56 + FOOTER_HEIGHT
CONTENT_WIDTH = PAGE_WIDTH - MARGIN_LEFT - MARGIN_RIGHT
CONTENT_BOTTOM = PAGE_HEIGHT - MARGIN_BOTTOM

ICON_SIZE = 32
HEADER_CURSOR = MARGIN_TOP + 24
PARAGRAPH_GAP = 6
ENTRY_GAP = 8

RING_COLOR = (79, 195, 247)
TITLE_COLOR = (17, 24, 39)
DIVIDER_COLOR = (230, 236, 244)
FOOTER_COLOR = (90, 96, 110)

MODE_LATEST = "latest"
MODE_ALL = "all"

ICON_FETCH_TIMEOUT = 5.0

_HEADING = re.compile(r"^(#{1,3})\s+(.*)$")
_BOLD = re.compile(r"\*\*(.+?)\*\*")
# Standard PDF fonts have no glyphs for these
_GLYPH_MAP = str.maketrans({"✓": "[x]", "□": "[ ]", "—": "-", "–": "-"})


@dataclass(frozen=True)
class TextStyle:
    font: str
    size: float
    leading: float
    color: Tuple[int, int, int]
    space_before: float = 0


BODY = TextStyle("Helvetica", 12, 18, (50, 50, 50))
ENTRY_TITLE = TextStyle("Helvetica-Bold", 14, 18, (20, 20, 20))
HEADING_STYLES = {
    1: TextStyle("Helvetica-Bold", 16, 22, TITLE_COLOR, space_before=6),
    2: TextStyle("Helvetica-Bold", 14, 20, TITLE_COLOR, space_before=6),
    3: TextStyle("Helvetica-Bold", 12.5, 18, TITLE_COLOR, space_before=4),
}


@dataclass
class PdfDocument:
    filename: str
    content: bytes
    page_count: int

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


def _rgb(color: Tuple[int, int, int]) -> Tuple[float, float, float]:
    return tuple(channel / 255.0 for channel in color)


def build_filename(toolkit_name: str, suffix: str, today: Optional[date] = None) -> str:
    stamp = (today or date.today()).isoformat()
    safe = re.sub(r"[^A-Za-z0-9]+", "_", toolkit_name).strip("_")
    return f"{stamp}_YBG_{safe}_{suffix}.pdf"


@lru_cache(maxsize=8)
def load_icon(source: Optional[str]) -> Optional[ImageReader]:
    """Fetch the header icon once per process. Failures return None (icon skipped)."""
    if not source:
        return None
    try:
        if source.startswith(("http://", "https://")):
            response = httpx.get(source, timeout=ICON_FETCH_TIMEOUT, follow_redirects=True)
            response.raise_for_status()
            return ImageReader(BytesIO(response.content))
        path = Path(source)
        if not path.is_file():
            logger.warning("pdf.icon_missing", extra={"event_type": "pdf_export"})
            return None
        return ImageReader(str(path))
    except Exception as e:
        logger.warning("pdf.icon_unavailable", extra={"event_type": "pdf_export", "error_message": str(e)})
        return None


class FooterCanvas(canvas.Canvas):
    """Canvas that defers footers until every page exists."""

    def __init__(self, *args, brand: str = "YourBizGuru.com", **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states: List[dict] = []
        self._brand = brand
        self.page_count = 0

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self.draw_footer(self.getPageNumber(), total)
            canvas.Canvas.showPage(self)
        self.page_count = total
        canvas.Canvas.save(self)

    def draw_footer(self, page_number: int, total_pages: int) -> None:
        baseline = PAGE_HEIGHT - FOOTER_HEIGHT
        self.saveState()
        self.setFont("Helvetica", 9)
        self.setFillColorRGB(*_rgb(FOOTER_COLOR))
        self.drawString(MARGIN_LEFT, PAGE_HEIGHT - baseline, f"Powered by {self._brand}")
        self.drawRightString(MARGIN_LEFT + CONTENT_WIDTH, PAGE_HEIGHT - baseline, f"Page {page_number} of {total_pages}")
        self.restoreState()


def _clean(text: str) -> str:
    return _BOLD.sub(r"\1", text).translate(_GLYPH_MAP)


def parse_blocks(text: str) -> List[Tuple[str, Any]]:
    """Split text into ("heading", (level, text)), ("paragraph", [lines]) and ("rule", None) blocks."""
    blocks: List[Tuple[str, Any]] = []
    paragraph: List[str] = []

    def flush():
        if paragraph:
            blocks.append(("paragraph", list(paragraph)))
            paragraph.clear()

    for raw in str(text or "").replace("\r\n", "\n").split("\n"):
        line = raw.rstrip()
        stripped = line.strip()
        heading = _HEADING.match(stripped)
        if heading:
            flush()
            blocks.append(("heading", (len(heading.group(1)), _clean(heading.group(2).strip()))))
        elif not stripped:
            flush()
        elif stripped == "---":
            flush()
            blocks.append(("rule", None))
        else:
            paragraph.append(_clean(line))
    flush()
    return blocks


class _PageWriter:
    def __init__(self, pdf: FooterCanvas, toolkit: Toolkit, icon: Optional[ImageReader]):
        self.pdf = pdf
        self.toolkit = toolkit
        self.icon = icon
        self.y = self._draw_header()

    # -- page chrome ------------------------------------------------------

    def _draw_header(self) -> float:
        pdf = self.pdf
        title_x = MARGIN_LEFT
        if self.icon is not None:
            cx = MARGIN_LEFT + ICON_SIZE / 2
            cy = MARGIN_TOP - 24
            pdf.saveState()
            pdf.setStrokeColorRGB(*_rgb(self.toolkit.primary_color_rgb or RING_COLOR))
            pdf.setLineWidth(1.5)
            pdf.circle(cx, PAGE_HEIGHT - cy, ICON_SIZE / 2 + 3, stroke=1, fill=0)
            try:
                pdf.drawImage(
                    self.icon,
                    MARGIN_LEFT,
                    PAGE_HEIGHT - (MARGIN_TOP - 8),
                    width=ICON_SIZE,
                    height=ICON_SIZE,
                    mask="auto",
                )
            except Exception as e:
                logger.warning("pdf.icon_draw_failed", extra={"event_type": "pdf_export", "error_message": str(e)})
            pdf.restoreState()
            title_x = MARGIN_LEFT + ICON_SIZE + 10

        pdf.setFont("Helvetica-Bold", 16)
        pdf.setFillColorRGB(*_rgb(TITLE_COLOR))
        pdf.drawString(title_x, PAGE_HEIGHT - (MARGIN_TOP - 4), self.toolkit.name)

        pdf.setStrokeColorRGB(*_rgb(DIVIDER_COLOR))
        pdf.setLineWidth(0.5)
        divider_y = PAGE_HEIGHT - (MARGIN_TOP + 8)
        pdf.line(MARGIN_LEFT, divider_y, MARGIN_LEFT + CONTENT_WIDTH, divider_y)

        self._apply(BODY)
        return HEADER_CURSOR

    def new_page(self) -> None:
        self.pdf.showPage()
        self.y = self._draw_header()

    @property
    def at_page_top(self) -> bool:
        return self.y <= HEADER_CURSOR

    def _apply(self, style: TextStyle) -> None:
        self.pdf.setFont(style.font, style.size)
        self.pdf.setFillColorRGB(*_rgb(style.color))

    # -- content ----------------------------------------------------------

    @staticmethod
    def wrap(lines: Iterable[str], style: TextStyle) -> List[str]:
        wrapped: List[str] = []
        for line in lines:
            wrapped.extend(simpleSplit(line, style.font, style.size, CONTENT_WIDTH) or [""])
        return wrapped

    def write(self, lines: Sequence[str], style: TextStyle) -> None:
        wrapped = self.wrap(lines, style)
        block_height = style.space_before + len(wrapped) * style.leading

        if not self.at_page_top and self.y + block_height > CONTENT_BOTTOM:
            self.new_page()
        if not self.at_page_top:
            self.y += style.space_before

        self._apply(style)
        for line in wrapped:
            # Blocks taller than one page continue line by line
            if self.y + style.leading > CONTENT_BOTTOM:
                self.new_page()
                self._apply(style)
            self.pdf.drawString(MARGIN_LEFT, PAGE_HEIGHT - self.y, line)
            self.y += style.leading

        if style is not BODY:
            self._apply(BODY)

    def spacer(self, amount: float) -> None:
        self.y += amount

    def rule(self) -> None:
        if self.y + 12 > CONTENT_BOTTOM:
            self.new_page()
            return
        self.pdf.saveState()
        self.pdf.setStrokeColorRGB(*_rgb(DIVIDER_COLOR))
        self.pdf.setLineWidth(0.5)
        self.pdf.line(MARGIN_LEFT, PAGE_HEIGHT - (self.y + 2), MARGIN_LEFT + CONTENT_WIDTH, PAGE_HEIGHT - (self.y + 2))
        self.pdf.restoreState()
        self.y += 12

    def body(self, text: str) -> None:
        first = True
        for kind, payload in parse_blocks(text):
            if kind == "heading":
                level, heading = payload
                self.write([heading], HEADING_STYLES[level])
            elif kind == "rule":
                self.rule()
            else:
                if not first:
                    self.spacer(PARAGRAPH_GAP)
                self.write(payload, BODY)
            first = False

    def finish(self) -> None:
        self.pdf.showPage()


def _timestamp_key(value: Any) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).timestamp()
        except ValueError:
            return float("-inf")
    return float("-inf")


def select_results(results: Sequence[Mapping[str, Any]], mode: str) -> List[Mapping[str, Any]]:
    """``all`` keeps every result; ``latest`` keeps the newest by timestamp."""
    items = [r for r in results if isinstance(r, Mapping)]
    if mode != MODE_LATEST or not items:
        return items
    newest = max(enumerate(items), key=lambda pair: (_timestamp_key(pair[1].get("timestamp")), pair[0]))
    return [newest[1]]


class PdfExporter:
    def __init__(
        self,
        toolkit: Optional[Toolkit] = None,
        *,
        icon_source: Optional[str] = None,
        brand: Optional[str] = None,
        page_compression: int = 1,
        today: Optional[date] = None,
    ):
        self.toolkit = toolkit or get_toolkit(None)
        self.icon_source = icon_source if icon_source is not None else settings.TOOLKIT_ICON
        self.brand = brand or settings.PDF_BRAND
        self.page_compression = page_compression
        self.today = today

    def _render(self, draw) -> Tuple[bytes, int]:
        buffer = BytesIO()
        pdf = FooterCanvas(buffer, pagesize=A4, pageCompression=self.page_compression, brand=self.brand)
        pdf.setTitle(self.toolkit.pdf_filename_prefix.replace("_", " "))
        pdf.setAuthor(self.brand)

        writer = _PageWriter(pdf, self.toolkit, load_icon(self.icon_source))
        draw(writer)
        writer.finish()
        pdf.save()
        return buffer.getvalue(), pdf.page_count

    def export_result(self, text: str) -> PdfDocument:
        content, pages = self._render(lambda writer: writer.body(text))
        logger.info("pdf.exported", extra={"event_type": "pdf_export", "tool": self.toolkit.code})
        return PdfDocument(build_filename(self.toolkit.name, "Report", self.today), content, pages)

    def export_results(self, results: Sequence[Mapping[str, Any]], mode: str = MODE_LATEST) -> PdfDocument:
        if mode not in (MODE_LATEST, MODE_ALL):
            raise ValidationError(f"Unknown export mode: {mode}")
        items = select_results(results, mode)

        def draw(writer: _PageWriter) -> None:
            for idx, item in enumerate(items):
                if idx > 0:
                    writer.spacer(ENTRY_GAP)
                    if mode == MODE_ALL:
                        writer.rule()
                writer.write([_clean(str(item.get("title") or f"Result {idx + 1}"))], ENTRY_TITLE)
                writer.body(str(item.get("text") or ""))

        content, pages = self._render(draw)
        suffix = "Latest_Result" if mode == MODE_LATEST else "All_Results"
        logger.info("pdf.exported", extra={"event_type": "pdf_export", "tool": self.toolkit.code})
        return PdfDocument(build_filename(self.toolkit.name, suffix, self.today), content, pages)


def export_result_to_pdf(text: str, toolkit: Optional[Toolkit] = None, **kwargs) -> PdfDocument:
    return PdfExporter(toolkit, **kwargs).export_result(text)


def export_results_to_pdf(
    results: Sequence[Mapping[str, Any]],
    mode: str = MODE_LATEST,
    toolkit: Optional[Toolkit] = None,
    **kwargs,
) -> PdfDocument:
    return PdfExporter(toolkit, **kwargs).export_results(results, mode)

