"""Plain webpage fetcher."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlparse

from megafone.extract import extract_title, strip_tags
from megafone.models import SourceMaterial, WebsiteURL
from megafone.net import get_ok, http_session

logger = logging.getLogger(__name__)


def fetch(site: WebsiteURL, session=None, log: Optional[logging.Logger] = None) -> SourceMaterial:
    """One blocking GET with the default client; anything but 200 is fatal."""
    log = log or logger
    session = session or http_session()

    log.info("Fetching website content: %s", site.url)
    response = get_ok(session, site.url, what="website fetch")
    raw_html = response.text or ""

    title = extract_title(raw_html) or urlparse(site.url).netloc
    body = strip_tags(raw_html)
    log.info("Fetched content from: %s (%d chars)", title, len(body))
    return SourceMaterial(title=title, body=body, raw_html=raw_html)


def website_context(site: WebsiteURL, material: SourceMaterial) -> str:
    return (
        f"Website URL: {site.url}\n"
        f"Title: {material.title}\n"
        f"\nContent:\n{material.body}\n"
    )
