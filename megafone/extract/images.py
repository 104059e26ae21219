"""Hero image discovery in README markdown and in HTML pages.

Both paths are regex heuristics. The README path collects every candidate and
leaves the choice to the caller; the HTML path walks an ordered list of rules
and stops at the first one that yields an image.
"""

from __future__ import annotations

import re
import html
from typing import Callable, List, Optional
from urllib.parse import urljoin, urlparse

from megafone.config.constants import (
    HERO_CLASS_HINTS,
    IMAGE_BLACKLIST,
    IMAGE_EXTENSIONS,
    RAW_GITHUB_BASE,
    README_BRANCH,
)
from megafone.models import ImageCandidate, ImageOrigin

_MD_IMAGE_RE = re.compile(r"""!\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+["'][^"']*["'])?\s*\)""")
_IMG_SRC_RE = re.compile(r"""<img\b[^>]*?\bsrc\s*=\s*["']([^"']+)["']""", re.IGNORECASE)
_IMG_TAG_RE = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
_CLASS_ATTR_RE = re.compile(r"""\bclass\s*=\s*["']([^"']*)["']""", re.IGNORECASE)
_ARTICLE_RE = re.compile(r"<article\b[^>]*>(.*?)</article>", re.IGNORECASE | re.DOTALL)


def _meta_patterns(key: str) -> List[re.Pattern]:
    k = re.escape(key)
    return [
        re.compile(rf"""<meta[^>]*(?:property|name)\s*=\s*["']{k}["'][^>]*content\s*=\s*["']([^"']+)["']""", re.IGNORECASE),
        re.compile(rf"""<meta[^>]*content\s*=\s*["']([^"']+)["'][^>]*(?:property|name)\s*=\s*["']{k}["']""", re.IGNORECASE),
    ]


_OG_IMAGE_RES = _meta_patterns("og:image")
_TWITTER_IMAGE_RES = _meta_patterns("twitter:image")


def is_image_url(url: str) -> bool:
    """Whitelisted extension on the URL path (query string ignored)."""
    path = urlparse(url or "").path.lower()
    return path.endswith(IMAGE_EXTENSIONS)


def absolutize(page_url: str, src: str) -> str:
    """Resolve ``src`` against the page URL; ``<base>`` is not consulted."""
    return urljoin(page_url, html.unescape(src.strip()))


# ---------- README (GitHub mode) ----------

def _readme_url(raw: str, owner: str, repo: str) -> Optional[str]:
    raw = raw.strip()
    if raw.startswith(("http://", "https://")):
        return raw
    if raw.startswith("//"):
        return "https:" + raw
    if "://" in raw or raw.startswith(("data:", "#", "mailto:")):
        return None
    path = raw
    while path.startswith(("./", "/")):
        path = path[2:] if path.startswith("./") else path[1:]
    # Relative paths assume the default branch is called "main".
    return f"{RAW_GITHUB_BASE}/{owner}/{repo}/{README_BRANCH}/{path}"


def extract_readme_images(markdown: str, owner: str, repo: str) -> List[ImageCandidate]:
    urls: List[str] = []
    for line in (markdown or "").splitlines():
        found = []
        if "![" in line:
            found.extend(_MD_IMAGE_RE.findall(line))
        if "<img" in line.lower():
            found.extend(_IMG_SRC_RE.findall(line))
        for raw in found:
            url = _readme_url(raw, owner, repo)
            if url and is_image_url(url) and url not in urls:
                urls.append(url)
    return [ImageCandidate(url=u, origin=ImageOrigin.MARKDOWN_README) for u in urls]


# ---------- HTML (website mode) ----------

def _first_meta(raw_html: str, patterns: List[re.Pattern]) -> Optional[str]:
    for pattern in patterns:
        m = pattern.search(raw_html)
        if m:
            return m.group(1)
    return None


def _hero_class_img(raw_html: str) -> Optional[str]:
    for tag in _IMG_TAG_RE.findall(raw_html):
        cls = _CLASS_ATTR_RE.search(tag)
        src = _IMG_SRC_RE.search(tag)
        if not (cls and src):
            continue
        classes = cls.group(1).lower()
        if any(hint in classes for hint in HERO_CLASS_HINTS):
            return src.group(1)
    return None


def _passes_article_filters(src: str, page_url: str) -> bool:
    lower = src.lower()
    if any(bad in lower for bad in IMAGE_BLACKLIST):
        return False
    return is_image_url(absolutize(page_url, src))


def _article_img(raw_html: str, page_url: str) -> Optional[str]:
    for body in _ARTICLE_RE.findall(raw_html):
        for src in _IMG_SRC_RE.findall(body):
            if _passes_article_filters(src, page_url):
                return src
    return None


def extract_best_image(raw_html: str, page_url: str) -> Optional[ImageCandidate]:
    """Ordered fallback: og:image, twitter:image, hero-class img, article img."""
    if not raw_html:
        return None

    rules: List[tuple[ImageOrigin, Callable[[], Optional[str]]]] = [
        (ImageOrigin.OG_META, lambda: _first_meta(raw_html, _OG_IMAGE_RES)),
        (ImageOrigin.TWITTER_META, lambda: _first_meta(raw_html, _TWITTER_IMAGE_RES)),
        (ImageOrigin.HERO_CLASS, lambda: _hero_class_img(raw_html)),
        (ImageOrigin.ARTICLE_IMG, lambda: _article_img(raw_html, page_url)),
    ]
    for origin, rule in rules:
        src = rule()
        if src:
            return ImageCandidate(url=absolutize(page_url, src), origin=origin)
    return None
