"""Research mode: the LLM itself produces the source material."""

from __future__ import annotations

import logging
from typing import Optional

import openai

from megafone.errors import LLMError
from megafone.llm import LLMClient
from megafone.models import ResearchTopic, SourceMaterial
from megafone.prompt_loader import render_prompt
from megafone.utils import redact_secrets, truncate

logger = logging.getLogger(__name__)


def fetch(topic: ResearchTopic, llm: LLMClient, max_tokens: int, max_chars: int,
          log: Optional[logging.Logger] = None) -> SourceMaterial:
    """Expand the topic into a research brief, capped at ``max_chars``."""
    log = log or logger
    log.info("Researching topic: %s", topic.text)

    system, task = render_prompt("research_brief", topic=topic.text)
    try:
        brief = llm.chat(system, task, temperature=0.5, max_tokens=max_tokens)
    except openai.OpenAIError as e:
        raise LLMError(f"research request failed: {redact_secrets(str(e))}") from e

    if len(brief) > max_chars:
        log.info("Research brief truncated from %d to %d chars", len(brief), max_chars)
        brief = truncate(brief, max_chars)
    return SourceMaterial(title=topic.text, body=brief)


def research_context(topic: ResearchTopic, material: SourceMaterial) -> str:
    return (
        f"Topic: {topic.text}\n"
        f"\nResearch findings:\n{material.body}\n"
    )
