"""Thin wrapper around the OpenAI SDK for chat and image generation.

Every call blocks until the API answers. No retries are attempted; API
errors (``openai.OpenAIError``) propagate to the caller, which decides whether
the failure is fatal for the run.
"""

from __future__ import annotations

import base64
import logging
from typing import Optional, Union

from megafone.errors import EmptyGenerationError

logger = logging.getLogger(__name__)


class LLMClient:
    def __init__(self, api_key: str, model: str, client=None, log: Optional[logging.Logger] = None):
        if client is None:
            from openai import OpenAI
            client = OpenAI(api_key=api_key)
        self.client = client
        self.model = model
        self.log = log or logger

    def chat(self, system: str, user: str, temperature: float = 0.7,
             max_tokens: Optional[int] = None) -> str:
        """Run one chat completion and return the stripped message text."""
        kwargs = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": temperature,
        }
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        resp = self.client.chat.completions.create(**kwargs)
        choices = getattr(resp, "choices", None) or []
        if not choices:
            raise EmptyGenerationError("no response from OpenAI (empty choice list)")

        message = choices[0].message
        content = (getattr(message, "content", None) or "").strip()
        if not content:
            refusal = getattr(message, "refusal", None)
            if refusal:
                self.log.error("OpenAI refused the request: %s", refusal)
            raise EmptyGenerationError("OpenAI returned empty content", refusal=refusal)
        return content

    def generate_image(self, prompt: str, model: str, size: str) -> Union[str, bytes]:
        """Return a download URL, or raw bytes when the API inlines base64."""
        resp = self.client.images.generate(model=model, prompt=prompt, size=size, n=1)
        data = getattr(resp, "data", None) or []
        if not data:
            raise EmptyGenerationError("image generation returned no data")
        item = data[0]
        url = getattr(item, "url", None)
        if url:
            return url
        b64 = getattr(item, "b64_json", None)
        if b64:
            return base64.b64decode(b64)
        raise EmptyGenerationError("image generation returned neither url nor b64_json")
