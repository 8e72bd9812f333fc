"""Text generation provider interface and implementations."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx

from core.config import ANTHROPIC_KEY_ENV, GEMINI_KEY_ENV, Settings, resolve_api_key
from core.errors import (
    ProviderError,
    ProviderHTTPError,
    ProviderMalformedResponse,
    ProviderUnavailable,
    RequestTimeout,
)
from core.models import ProviderResult
from prompts.templates import PING_PROMPT

logger = logging.getLogger(__name__)


class TextProvider(ABC):
    """A single-shot text completion. Implementations raise ``ProviderError`` only."""

    provider_name: str = "base"

    @abstractmethod
    def complete(self, prompt: str, max_tokens: int = 900) -> str:
        ...

    def ping(self) -> str:
        return self.complete(PING_PROMPT, max_tokens=5)


class AnthropicTextProvider(TextProvider):
    """Anthropic Messages API over plain HTTP."""

    provider_name = "anthropic"
    api_url = "https://api.anthropic.com/v1/messages"
    api_version = "2023-06-01"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-3-5-sonnet-20241022",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = resolve_api_key(api_key, *ANTHROPIC_KEY_ENV)
        self.model = model
        self.timeout = timeout
        self.transport = transport
        if not self.api_key:
            raise ProviderUnavailable(
                self.provider_name, "API key is required. Set ANTHROPIC_API_KEY or pass api_key."
            )

    def complete(self, prompt: str, max_tokens: int = 900) -> str:
        logger.info("Requesting text via Anthropic model=%s", self.model)
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as http:
                resp = http.post(
                    self.api_url,
                    headers={
                        "x-api-key": self.api_key,
                        "anthropic-version": self.api_version,
                        "content-type": "application/json",
                    },
                    json={
                        "model": self.model,
                        "max_tokens": max_tokens,
                        "messages": [{"role": "user", "content": prompt}],
                    },
                )
        except httpx.TimeoutException as e:
            raise RequestTimeout(self.provider_name, str(e) or "request timed out") from e
        except httpx.HTTPError as e:
            raise ProviderHTTPError(self.provider_name, None, str(e) or "network error") from e

        if not resp.is_success:
            raise ProviderHTTPError(self.provider_name, resp.status_code, resp.text[:200])

        try:
            payload = resp.json()
        except ValueError as e:
            raise ProviderMalformedResponse(self.provider_name, "response body is not JSON") from e

        blocks = payload.get("content") if isinstance(payload, dict) else None
        for block in blocks or []:
            if isinstance(block, dict) and block.get("type", "text") == "text" and block.get("text"):
                return block["text"]
        raise ProviderMalformedResponse(self.provider_name, "no text content in response")


class GeminiTextProvider(TextProvider):
    """Google Gemini text generation through the google-genai SDK."""

    provider_name = "gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gemini-2.0-flash",
        timeout: float = 30.0,
    ) -> None:
        self.api_key = resolve_api_key(api_key, *GEMINI_KEY_ENV)
        self.model = model
        self.timeout = timeout
        self._client = None
        if not self.api_key:
            raise ProviderUnavailable(
                self.provider_name, "API key is required. Set GEMINI_API_KEY or pass api_key."
            )

    def _get_client(self):
        if self._client is None:
            from google import genai
            from google.genai import types

            self._client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
            )
        return self._client

    def complete(self, prompt: str, max_tokens: int = 900) -> str:
        from google.genai import errors

        logger.info("Requesting text via Gemini model=%s", self.model)
        try:
            response = self._get_client().models.generate_content(
                model=self.model,
                contents=prompt,
                config={"temperature": 0.9, "max_output_tokens": max_tokens},
            )
        except errors.APIError as e:
            raise ProviderHTTPError(self.provider_name, e.code, e.message or "") from e
        except httpx.TimeoutException as e:
            raise RequestTimeout(self.provider_name, str(e) or "request timed out") from e
        except httpx.HTTPError as e:
            raise ProviderHTTPError(self.provider_name, None, str(e) or "network error") from e
        except Exception as e:
            # SDK-side parsing and validation failures
            raise ProviderMalformedResponse(self.provider_name, str(e) or "unexpected SDK failure") from e

        text = getattr(response, "text", None)
        if not text:
            raise ProviderMalformedResponse(self.provider_name, "no text content in response")
        return text


def get_text_provider(name: str, **kwargs) -> TextProvider:
    """Factory function to get a text provider by name."""
    providers: dict[str, type[TextProvider]] = {
        "anthropic": AnthropicTextProvider,
        "gemini": GeminiTextProvider,
    }
    if name not in providers:
        raise ValueError(f"Unknown text provider: {name}. Available: {list(providers.keys())}")
    return providers[name](**kwargs)


def build_text_provider(settings: Settings) -> TextProvider | None:
    """Anthropic when keyed, else Gemini, else None (fallback-only)."""
    if settings.anthropic_api_key:
        return AnthropicTextProvider(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            timeout=settings.text_timeout_s,
        )
    if settings.gemini_api_key:
        return GeminiTextProvider(
            api_key=settings.gemini_api_key,
            model=settings.gemini_text_model,
            timeout=settings.text_timeout_s,
        )
    return None


def call_text_provider(
    prompt: str,
    provider: TextProvider | None,
    max_tokens: int = 900,
) -> ProviderResult:
    """One attempt, no retries. Failures come back as ``ProviderResult.error``."""
    if provider is None:
        return ProviderResult(error=ProviderUnavailable("text", "no text provider configured"))
    try:
        return ProviderResult(value=provider.complete(prompt, max_tokens=max_tokens))
    except ProviderError as e:
        logger.warning("Text provider %s failed: %s", provider.provider_name, e)
        return ProviderResult(error=e)
