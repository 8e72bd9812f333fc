"""Environment configuration: API keys, model identifiers and timeouts."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

ANTHROPIC_KEY_ENV: tuple[str, ...] = (
    "ANTHROPIC_API_KEY", "anthropic_api_key", "ANTHROPIC_KEY", "CLAUDE_API_KEY",
)
OPENAI_KEY_ENV: tuple[str, ...] = ("OPENAI_API_KEY", "openai_api_key", "OPENAI_KEY")
GEMINI_KEY_ENV: tuple[str, ...] = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "gemini_api_key")

KEY_PREFIXES: dict[str, str] = {
    "anthropic": "sk-ant-",
    "openai": "sk-",
    "gemini": "AIza",
}

DEFAULT_IMAGE_PROVIDERS = ("gemini", "openai")


def resolve_api_key(explicit: str | None, *env_names: str) -> str:
    """Return the explicit key if given, else the first non-empty env var."""
    if explicit and explicit.strip():
        return explicit.strip()
    for name in env_names:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return ""


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", name, raw)
        return default


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, float(default)))


@dataclass
class Settings:
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    gemini_api_key: str = ""
    anthropic_model: str = "claude-3-5-sonnet-20241022"
    gemini_text_model: str = "gemini-2.0-flash"
    gemini_image_model: str = "imagen-3.0-generate-002"
    openai_image_model: str = "dall-e-3"
    text_timeout_s: float = 30.0
    image_timeout_s: float = 45.0
    image_max_attempts: int = 3
    image_backoff_base_s: float = 1.0
    image_providers: list[str] = field(default_factory=lambda: list(DEFAULT_IMAGE_PROVIDERS))
    environment: str = "local"
    region: str = "local"

    @property
    def has_text_provider(self) -> bool:
        return bool(self.anthropic_api_key or self.gemini_api_key)

    def key_for(self, provider: str) -> str:
        return {
            "anthropic": self.anthropic_api_key,
            "openai": self.openai_api_key,
            "gemini": self.gemini_api_key,
        }.get(provider, "")

    @property
    def image_provider_names(self) -> list[str]:
        """Configured image providers, in preference order, that have a key."""
        return [name for name in self.image_providers if self.key_for(name)]


def load_settings() -> Settings:
    """Read settings from the environment. Missing keys never raise."""
    order = [
        p.strip().lower()
        for p in os.environ.get("IMAGE_PROVIDERS", "").split(",")
        if p.strip()
    ] or list(DEFAULT_IMAGE_PROVIDERS)

    settings = Settings(
        anthropic_api_key=resolve_api_key(None, *ANTHROPIC_KEY_ENV),
        openai_api_key=resolve_api_key(None, *OPENAI_KEY_ENV),
        gemini_api_key=resolve_api_key(None, *GEMINI_KEY_ENV),
        image_providers=order,
        text_timeout_s=_env_float("TEXT_TIMEOUT_S", 30.0),
        image_timeout_s=_env_float("IMAGE_TIMEOUT_S", 45.0),
        image_max_attempts=max(1, _env_int("IMAGE_MAX_ATTEMPTS", 3)),
        image_backoff_base_s=_env_float("IMAGE_BACKOFF_BASE_S", 1.0),
        environment=os.environ.get("VERCEL_ENV", "local"),
        region=os.environ.get("VERCEL_REGION", "local"),
    )
    for attr, env_name in (
        ("anthropic_model", "ANTHROPIC_MODEL"),
        ("gemini_text_model", "GEMINI_TEXT_MODEL"),
        ("gemini_image_model", "GEMINI_IMAGE_MODEL"),
        ("openai_image_model", "OPENAI_IMAGE_MODEL"),
    ):
        value = os.environ.get(env_name, "").strip()
        if value:
            setattr(settings, attr, value)

    logger.info(
        "Settings loaded (env=%s): anthropic=%s openai=%s gemini=%s",
        settings.environment,
        bool(settings.anthropic_api_key),
        bool(settings.openai_api_key),
        bool(settings.gemini_api_key),
    )
    return settings


def validate_api_keys(settings: Settings) -> dict[str, dict[str, object]]:
    """Presence, length and prefix check per provider. Never exposes key material."""
    report: dict[str, dict[str, object]] = {}
    for provider, prefix in KEY_PREFIXES.items():
        key = settings.key_for(provider)
        report[provider] = {
            "exists": bool(key),
            "validFormat": key.startswith(prefix) if key else False,
            "length": len(key),
        }
    return report
