"""Shared fixtures: path setup, fake providers and canned HTTP transports."""

import base64
import io
import sys
from pathlib import Path

import httpx
import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.config import ANTHROPIC_KEY_ENV, GEMINI_KEY_ENV, OPENAI_KEY_ENV  # noqa: E402
from core.text_providers import TextProvider  # noqa: E402


class FakeTextProvider(TextProvider):
    provider_name = "fake"

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def complete(self, prompt, max_tokens=900):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def fake_text_provider():
    return FakeTextProvider


@pytest.fixture
def png_b64():
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), (180, 20, 40)).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode()


@pytest.fixture
def sequence_transport():
    """Build a MockTransport replaying responses (or raising exceptions) in order."""

    def build(*items):
        calls = []

        def handle(request):
            calls.append(request)
            item = items[min(len(calls), len(items)) - 1]
            if isinstance(item, Exception):
                raise item
            # fresh copy so the last response can be replayed
            return httpx.Response(item.status_code, headers=item.headers, content=item.content)

        return httpx.MockTransport(handle), calls

    return build


@pytest.fixture
def clear_key_env(monkeypatch):
    for name in ANTHROPIC_KEY_ENV + OPENAI_KEY_ENV + GEMINI_KEY_ENV + ("IMAGE_PROVIDERS",):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
