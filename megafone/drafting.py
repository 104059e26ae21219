"""Draft and filename generation.

The draft prompt concatenates the post template, a context block for the
topic kind, an optional hero directive, tags and the current date. The
filename call is independent of the draft call and may fail without
aborting the run; the draft call may not.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

import openai

from megafone.config.constants import FILENAME_MAX_LEN, HERO_URL_PREFIX
from megafone.errors import EmptyGenerationError, LLMError
from megafone.llm import LLMClient
from megafone.models import GitHubRepo, ResearchTopic, SourceMaterial, Topic, WebsiteURL
from megafone.prompt_loader import PostTemplate, render_prompt
from megafone.utils import redact_secrets, today_iso

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:markdown|md)?\s*\n(.*)\n```\s*$", re.DOTALL)

RESEARCH_LENGTH = "Target length: 800-1200 words (a 4-5 minute read)."

TROUBLESHOOTING = (
    "\n\nTroubleshooting:\n"
    "- Check your API key is valid\n"
    "- Verify your OpenAI account has credits: https://platform.openai.com/usage\n"
    "- Try a different model with --model gpt-4o-mini\n"
    "- Check rate limits: https://platform.openai.com/account/limits"
)


def _intro(topic: Topic) -> str:
    if isinstance(topic, GitHubRepo):
        return "Please generate a blog post for this GitHub repository:"
    if isinstance(topic, WebsiteURL):
        return "Please generate a blog post about this website/article:"
    if isinstance(topic, ResearchTopic):
        return "Please generate a blog post about this topic, based on the research findings below:"
    raise TypeError(f"unsupported topic kind: {type(topic).__name__}")


def build_draft_prompt(template: PostTemplate, topic: Topic, context: str,
                       hero_image: Optional[str] = None, tags: str = "",
                       date: Optional[str] = None) -> str:
    _, task = render_prompt(
        "draft",
        template_text=template.text,
        intro=_intro(topic),
        context=context.strip(),
        hero_image=hero_image or "",
        hero_path=f"{HERO_URL_PREFIX}{hero_image}" if hero_image else "",
        extra=RESEARCH_LENGTH if isinstance(topic, ResearchTopic) else "",
        tags=tags,
        date=date or today_iso(),
    )
    return task


def generate_draft(llm: LLMClient, template: PostTemplate, user_prompt: str,
                   temperature: float = 0.7) -> str:
    """Main drafting call; any failure here ends the run."""
    try:
        content = llm.chat(template.system, user_prompt, temperature=temperature)
    except openai.OpenAIError as e:
        raise LLMError(f"OpenAI API error: {redact_secrets(str(e))}{TROUBLESHOOTING}") from e
    return unwrap_code_fence(content)


def unwrap_code_fence(content: str) -> str:
    """Drop a single ```markdown fence wrapped around the whole reply."""
    m = _FENCE_RE.match(content)
    return m.group(1).strip() + "\n" if m else content


# ---------- Filenames ----------

def sanitize_filename(s: str) -> str:
    s = re.sub(r"[^a-z0-9]+", "-", (s or "").lower()).strip("-")
    return s[:FILENAME_MAX_LEN].strip("-")


def clean_slug(raw: str) -> str:
    """Normalize an LLM filename reply; only ``[a-z0-9-]`` survives."""
    slug = re.sub(r"\s+", "-", raw.strip().lower())
    slug = slug.strip("`\"'").replace("/", "-")
    if slug.endswith(".md"):
        slug = slug[: -len(".md")]
    slug = re.sub(r"[^a-z0-9-]+", "", slug)
    return re.sub(r"-{2,}", "-", slug).strip("-")


def generate_filename(llm: LLMClient, content: str) -> str:
    system, task = render_prompt("filename", content=content)
    slug = clean_slug(llm.chat(system, task, temperature=0.3, max_tokens=20))
    if not slug:
        raise EmptyGenerationError("no filename generated")
    return slug


def fallback_filename(topic: Topic, material: SourceMaterial) -> str:
    if isinstance(topic, GitHubRepo):
        return topic.name.lower()
    if isinstance(topic, WebsiteURL):
        return sanitize_filename(material.title or topic.url) or "post"
    if isinstance(topic, ResearchTopic):
        return sanitize_filename(topic.text) or "post"
    raise TypeError(f"unsupported topic kind: {type(topic).__name__}")


def choose_filename(llm: LLMClient, content: str, topic: Topic, material: SourceMaterial,
                    log: Optional[logging.Logger] = None) -> str:
    """LLM slug, or the deterministic fallback; never raises for LLM failures."""
    log = log or logger
    try:
        return generate_filename(llm, content)
    except (openai.OpenAIError, EmptyGenerationError) as e:
        fallback = fallback_filename(topic, material)
        log.error("Failed to generate filename, using %s: %s", fallback, redact_secrets(str(e)))
        return fallback
