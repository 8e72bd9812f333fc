"""Image generation provider interface and implementations."""

from __future__ import annotations

import base64
import binascii
import io
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable

import httpx
from PIL import Image, UnidentifiedImageError

from core.config import GEMINI_KEY_ENV, OPENAI_KEY_ENV, Settings, resolve_api_key
from core.errors import (
    ProviderError,
    ProviderHTTPError,
    ProviderMalformedResponse,
    ProviderUnavailable,
    RequestTimeout,
)
from core.models import GeneratedImage
from prompts.templates import IMAGE_NEGATIVE_PROMPT

logger = logging.getLogger(__name__)

# --- Response shapes ---

ShapeMatcher = Callable[[Any], str | None]


def _dig(node: Any, *path: str | int) -> Any:
    for step in path:
        if isinstance(step, int):
            if not isinstance(node, list) or len(node) <= step:
                return None
        elif not isinstance(node, dict):
            return None
        node = node[step] if isinstance(step, int) else node.get(step)
    return node


def _b64(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def match_imagen_predictions(body: Any) -> str | None:
    """Imagen ``:predict`` - ``predictions[0].bytesBase64Encoded``."""
    return _b64(_dig(body, "predictions", 0, "bytesBase64Encoded"))


def match_generated_images(body: Any) -> str | None:
    """``generatedImages[0].image.imageBytes`` or its flat variant."""
    return _b64(_dig(body, "generatedImages", 0, "image", "imageBytes")) or _b64(
        _dig(body, "generatedImages", 0, "bytesBase64Encoded")
    )


def match_inline_data_parts(body: Any) -> str | None:
    """Gemini ``generateContent`` - first part carrying ``inlineData.data``."""
    parts = _dig(body, "candidates", 0, "content", "parts")
    for part in parts if isinstance(parts, list) else []:
        data = _b64(_dig(part, "inlineData", "data")) or _b64(_dig(part, "inline_data", "data"))
        if data:
            return data
    return None


def match_openai_b64(body: Any) -> str | None:
    return _b64(_dig(body, "data", 0, "b64_json"))


RESPONSE_SHAPES: tuple[ShapeMatcher, ...] = (
    match_imagen_predictions,
    match_generated_images,
    match_inline_data_parts,
    match_openai_b64,
)


def extract_image_base64(body: Any, shapes: tuple[ShapeMatcher, ...] = RESPONSE_SHAPES) -> str | None:
    for shape in shapes:
        data = shape(body)
        if data:
            return data
    return None


def decode_image(data: str, provider: str, attempts: int = 1) -> GeneratedImage:
    """Check the payload really is an image and work out its MIME type."""
    try:
        raw = base64.b64decode(data)
        with Image.open(io.BytesIO(raw)) as img:
            fmt = img.format or "PNG"
    except (binascii.Error, ValueError, UnidentifiedImageError) as e:
        raise ProviderMalformedResponse(provider, "image data could not be decoded") from e
    mime = Image.MIME.get(fmt, "image/png")
    return GeneratedImage(base64_data=data, mime_type=mime, provider=provider, attempts=attempts)


# --- Providers ---


class ImageProvider(ABC):
    """Base interface for image generation providers.

    ``generate`` makes up to ``max_attempts`` calls, sleeping
    ``backoff_base * 2**n`` between them. Only 5xx responses and timeouts
    are retried.
    """

    provider_name: str = "base"
    key_env: tuple[str, ...] = ()

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "",
        timeout: float = 45.0,
        max_attempts: int = 3,
        backoff_base: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = resolve_api_key(api_key, *self.key_env)
        self.model = model
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.backoff_base = backoff_base
        self.sleep = sleep
        self.transport = transport
        if not self.api_key:
            raise ProviderUnavailable(
                self.provider_name,
                f"API key is required. Set {self.key_env[0]} or pass api_key.",
            )

    @abstractmethod
    def _request(self, http: httpx.Client, prompt: str) -> httpx.Response:
        ...

    @abstractmethod
    def _ping_request(self, http: httpx.Client) -> httpx.Response:
        ...

    def _send(self, call: Callable[[httpx.Client], httpx.Response]) -> httpx.Response:
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as http:
                resp = call(http)
        except httpx.TimeoutException as e:
            raise RequestTimeout(self.provider_name, str(e) or "request timed out") from e
        except httpx.HTTPError as e:
            raise ProviderHTTPError(self.provider_name, None, str(e) or "network error") from e
        if not resp.is_success:
            raise ProviderHTTPError(self.provider_name, resp.status_code, resp.text[:200])
        return resp

    def _attempt(self, prompt: str) -> str:
        resp = self._send(lambda http: self._request(http, prompt))
        try:
            body = resp.json()
        except ValueError as e:
            raise ProviderMalformedResponse(self.provider_name, "response body is not JSON") from e
        data = extract_image_base64(body)
        if not data:
            raise ProviderMalformedResponse(self.provider_name, "No image data found in response")
        return data

    def generate(self, prompt: str) -> GeneratedImage:
        attempt = 1
        delay = self.backoff_base
        while True:
            logger.info(
                "Generating image via %s model=%s (attempt %d/%d)",
                self.provider_name, self.model, attempt, self.max_attempts,
            )
            try:
                data = self._attempt(prompt)
            except ProviderError as e:
                if not e.retryable or attempt >= self.max_attempts:
                    raise
                logger.warning(
                    "%s attempt %d failed (%s); retrying in %.1fs",
                    self.provider_name, attempt, e, delay,
                )
                self.sleep(delay)
                delay *= 2
                attempt += 1
                continue
            return decode_image(data, self.provider_name, attempts=attempt)

    def timed_generate(self, prompt: str) -> tuple[GeneratedImage, float]:
        start = time.time()
        img = self.generate(prompt)
        elapsed = time.time() - start
        return img, elapsed

    def ping(self) -> None:
        """Cheap authenticated call that does not generate anything."""
        self._send(self._ping_request)


class GeminiImageProvider(ImageProvider):
    """Google Imagen (``:predict``) or Gemini image models (``:generateContent``)."""

    provider_name = "gemini"
    key_env = GEMINI_KEY_ENV
    base_url = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(self, api_key: str | None = None, model: str = "imagen-3.0-generate-002", **kwargs) -> None:
        super().__init__(api_key=api_key, model=model, **kwargs)

    @property
    def _headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self.api_key, "content-type": "application/json"}

    def _request(self, http: httpx.Client, prompt: str) -> httpx.Response:
        if self.model.startswith("imagen"):
            return http.post(
                f"{self.base_url}/models/{self.model}:predict",
                headers=self._headers,
                json={
                    "instances": [{"prompt": prompt}],
                    "parameters": {"sampleCount": 1, "aspectRatio": "1:1"},
                },
            )
        return http.post(
            f"{self.base_url}/models/{self.model}:generateContent",
            headers=self._headers,
            json={
                "contents": [{"parts": [{"text": f"{prompt}. Avoid: {IMAGE_NEGATIVE_PROMPT}"}]}],
                "generationConfig": {"responseModalities": ["IMAGE"]},
            },
        )

    def _ping_request(self, http: httpx.Client) -> httpx.Response:
        return http.get(f"{self.base_url}/models/{self.model}", headers=self._headers)


class OpenAIImageProvider(ImageProvider):
    """OpenAI Images API, base64 response format."""

    provider_name = "openai"
    key_env = OPENAI_KEY_ENV
    base_url = "https://api.openai.com/v1"

    def __init__(self, api_key: str | None = None, model: str = "dall-e-3", **kwargs) -> None:
        super().__init__(api_key=api_key, model=model, **kwargs)

    @property
    def _headers(self) -> dict[str, str]:
        return {"authorization": f"Bearer {self.api_key}", "content-type": "application/json"}

    def _request(self, http: httpx.Client, prompt: str) -> httpx.Response:
        payload: dict[str, Any] = {"model": self.model, "prompt": prompt, "n": 1, "size": "1024x1024"}
        if self.model.startswith("dall-e"):
            payload["response_format"] = "b64_json"
        return http.post(f"{self.base_url}/images/generations", headers=self._headers, json=payload)

    def _ping_request(self, http: httpx.Client) -> httpx.Response:
        return http.get(f"{self.base_url}/models/{self.model}", headers=self._headers)


def get_provider(name: str, **kwargs) -> ImageProvider:
    """Factory function to get a provider by name."""
    providers: dict[str, type[ImageProvider]] = {
        "gemini": GeminiImageProvider,
        "openai": OpenAIImageProvider,
    }
    if name not in providers:
        raise ValueError(f"Unknown provider: {name}. Available: {list(providers.keys())}")
    return providers[name](**kwargs)


def build_image_providers(settings: Settings, preferred: str | None = None) -> list[ImageProvider]:
    """Keyed providers in configured order, with ``preferred`` moved to the front."""
    names = settings.image_provider_names
    if preferred and preferred in names:
        names = [preferred] + [n for n in names if n != preferred]
    models = {"gemini": settings.gemini_image_model, "openai": settings.openai_image_model}

    providers: list[ImageProvider] = []
    for name in names:
        if name not in models:
            logger.warning("Skipping unknown image provider %r", name)
            continue
        providers.append(get_provider(
            name,
            api_key=settings.key_for(name),
            model=models[name],
            timeout=settings.image_timeout_s,
            max_attempts=settings.image_max_attempts,
            backoff_base=settings.image_backoff_base_s,
        ))
    return providers
