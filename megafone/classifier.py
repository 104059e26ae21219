"""Topic classification and prompt template selection.

``classify`` is a best-effort heuristic, not a URL validator: a research topic
that quotes a domain name (say "blog.example.com") is treated as a website.
"""

from __future__ import annotations

import re

from megafone.config.constants import NEWS_KEYWORDS, TECHNICAL_KEYWORDS, WEBSITE_TLDS
from megafone.errors import InvalidTopicFormat
from megafone.models import GitHubRepo, ResearchTopic, TemplateSelection, Topic, WebsiteURL

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_HOST_RE = re.compile(r"^[^/]*github\.com/", re.IGNORECASE)


def parse_github_repo(value: str) -> GitHubRepo:
    """Accepts ``https://github.com/o/r``, ``github.com/o/r`` and ``o/r(.git)``."""
    path = _SCHEME_RE.sub("", value.strip())
    path = _HOST_RE.sub("", path)
    if path.endswith(".git"):
        path = path[: -len(".git")]

    parts = [p for p in path.split("/") if p]
    if len(parts) < 2:
        raise InvalidTopicFormat(f"invalid GitHub URL format: {value!r}")
    name = parts[1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return GitHubRepo(owner=parts[0], name=name)


def classify(topic: str) -> Topic:
    text = (topic or "").strip()
    if not text:
        raise InvalidTopicFormat("topic must not be empty")

    if "github.com" in text:
        return parse_github_repo(text)
    if text.startswith(("http://", "https://")):
        return WebsiteURL(url=text)
    if any(tld in text for tld in WEBSITE_TLDS):
        return WebsiteURL(url=f"https://{text}")
    return ResearchTopic(text=text)


def _website_template(url: str) -> TemplateSelection:
    lower = url.lower()
    if any(k in lower for k in NEWS_KEYWORDS):
        return TemplateSelection.NEWS_ARTICLE
    if any(k in lower for k in TECHNICAL_KEYWORDS):
        return TemplateSelection.TECHNICAL_ARTICLE
    return TemplateSelection.NEWS_ARTICLE


def select_template(topic: Topic) -> TemplateSelection:
    if isinstance(topic, GitHubRepo):
        return TemplateSelection.GITHUB_PROJECT
    if isinstance(topic, ResearchTopic):
        return TemplateSelection.RESEARCH_TOPIC
    if isinstance(topic, WebsiteURL):
        return _website_template(topic.url)
    raise TypeError(f"unsupported topic kind: {type(topic).__name__}")


def describe(topic: Topic) -> str:
    """Human label for log lines."""
    if isinstance(topic, GitHubRepo):
        return f"github repository {topic.slug}"
    if isinstance(topic, WebsiteURL):
        return f"website {topic.url}"
    if isinstance(topic, ResearchTopic):
        return f"research topic {topic.text!r}"
    raise TypeError(f"unsupported topic kind: {type(topic).__name__}")
