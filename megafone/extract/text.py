"""Plain-text and title extraction from raw HTML pages."""

import re
import html
from typing import Optional

import html2text

from megafone.utils import collapse_whitespace

_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_OG_TITLE_RES = (
    re.compile(r"""<meta[^>]*property=["']og:title["'][^>]*content=["']([^"']+)["']""", re.IGNORECASE),
    re.compile(r"""<meta[^>]*content=["']([^"']+)["'][^>]*property=["']og:title["']""", re.IGNORECASE),
)


def strip_tags(raw_html: str) -> str:
    """Drop scripts and styles, convert to text, collapse whitespace."""
    cleaned = _SCRIPT_RE.sub("", raw_html or "")
    cleaned = _STYLE_RE.sub("", cleaned)

    h = html2text.HTML2Text()
    h.ignore_links = True
    h.ignore_images = True
    h.ignore_emphasis = True
    h.body_width = 0
    return collapse_whitespace(h.handle(cleaned))


def extract_title(raw_html: str) -> Optional[str]:
    """``<title>`` first, then ``og:title``; ``None`` when neither exists."""
    m = _TITLE_RE.search(raw_html or "")
    if m and m.group(1).strip():
        return html.unescape(m.group(1).strip())

    for pattern in _OG_TITLE_RES:
        m = pattern.search(raw_html or "")
        if m:
            return html.unescape(m.group(1).strip())
    return None
