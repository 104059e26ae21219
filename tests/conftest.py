import base64
import logging
from types import SimpleNamespace

import pytest

from megafone.llm import LLMClient


class DummyResponse:
    def __init__(self, status_code=200, payload=None, text="", content=b"", headers=None):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text
        self.content = content
        self.headers = headers or {}

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class DummySession:
    """Routes GET by exact URL; unknown URLs answer 404."""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.calls = []
        self.headers = {}

    def get(self, url):
        self.calls.append(url)
        response = self.routes.get(url)
        if isinstance(response, Exception):
            raise response
        return response or DummyResponse(404, text="not found")


class ExplodingSession:
    def get(self, url):
        raise AssertionError(f"unexpected network call to {url}")


class FakeCompletions:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if not self.replies:
            raise AssertionError("unexpected chat completion call")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if reply is None:
            return SimpleNamespace(choices=[])
        if isinstance(reply, SimpleNamespace):
            return SimpleNamespace(choices=[SimpleNamespace(message=reply)])
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply, refusal=None))])


class FakeImages:
    def __init__(self, result=None):
        self.result = result
        self.calls = []

    def generate(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.result, Exception):
            raise self.result
        if isinstance(self.result, bytes):
            item = SimpleNamespace(url=None, b64_json=base64.b64encode(self.result).decode("ascii"))
        else:
            item = SimpleNamespace(url=self.result, b64_json=None)
        return SimpleNamespace(data=[item])


class FakeOpenAI:
    def __init__(self, replies=(), image_result=None):
        self.chat = SimpleNamespace(completions=FakeCompletions(replies))
        self.images = FakeImages(image_result)


@pytest.fixture
def make_llm():
    def _make(replies=(), image_result=None, model="gpt-4o-mini"):
        fake = FakeOpenAI(replies, image_result)
        return LLMClient(api_key="sk-test", model=model, client=fake), fake

    return _make


@pytest.fixture
def test_log():
    log = logging.getLogger("megafone.test")
    log.setLevel(logging.DEBUG)
    log.propagate = True
    return log


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "site"
    (root / "content").mkdir(parents=True)
    return root
