"""Error taxonomy for a generation run."""

from __future__ import annotations

from typing import Optional


class MegafoneError(Exception):
    """Base class for errors surfaced to the command line."""


class ConfigError(MegafoneError):
    """Missing API key, invalid site path, unreadable config or image."""


class FetchError(MegafoneError):
    """Non-200 HTTP status or transport failure."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class EmptyGenerationError(MegafoneError):
    """The LLM returned no choices or empty content."""

    def __init__(self, message: str, refusal: Optional[str] = None):
        super().__init__(message)
        self.refusal = refusal


class LLMError(MegafoneError):
    """The OpenAI API call itself failed."""


class FormatError(MegafoneError):
    """Malformed topic string."""


class InvalidTopicFormat(FormatError):
    pass


class OutputError(MegafoneError):
    """The post or the generation log could not be written under the site root."""
