"""HTML allow-list sanitization for stored reports."""

import html
import re

import nh3

HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
ALLOWED_TAGS = set(nh3.ALLOWED_TAGS) | HEADING_TAGS
GLOBAL_ATTRIBUTES = {"style", "class"}

_BLOCK_BREAK = re.compile(r"</?(p|div|br|li|tr|h[1-6]|ul|ol|table|blockquote|pre)\b[^>]*>", re.IGNORECASE)


def _attributes():
    attrs = {tag: set(values) for tag, values in nh3.ALLOWED_ATTRIBUTES.items()}
    attrs["*"] = set(GLOBAL_ATTRIBUTES)
    return attrs


def sanitize_html(content: str) -> str:
    """Strip scripts, event handlers and anything outside the allow-list."""
    return nh3.clean(
        content or "",
        tags=ALLOWED_TAGS,
        clean_content_tags={"script", "style"},
        attributes=_attributes(),
    )


def html_to_text(content: str) -> str:
    """Plain text rendition of stored HTML (used for PDF export)."""
    with_breaks = _BLOCK_BREAK.sub("\n", content or "")
    stripped = nh3.clean(with_breaks, tags=set(), clean_content_tags={"script", "style"})
    text = html.unescape(stripped)
    lines = [line.strip() for line in text.splitlines()]
    return re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip()
