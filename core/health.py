"""Health report and live provider connectivity checks."""

from __future__ import annotations

import logging
import os
import platform
import sys
import time
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from core.config import Settings, validate_api_keys
from core.errors import ProviderError
from core.providers import build_image_providers
from core.text_providers import get_text_provider

logger = logging.getLogger(__name__)

RELATED_ENV_MARKERS: dict[str, tuple[str, ...]] = {
    "anthropic": ("anthropic", "claude"),
    "openai": ("openai", "gpt"),
    "gemini": ("gemini", "google"),
}


def _related_env_names(environ: Mapping[str, str], markers: tuple[str, ...]) -> list[str]:
    return sorted(k for k in environ if any(m in k.lower() for m in markers))


def build_health_report(settings: Settings, environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Key presence flags and deployment info. Variable names only, never values."""
    env = os.environ if environ is None else environ
    keys = validate_api_keys(settings)

    api_keys: dict[str, Any] = {}
    for provider, info in keys.items():
        api_keys[provider] = info["exists"]
        api_keys[f"{provider}Length"] = info["length"]
        api_keys[f"{provider}ValidFormat"] = info["validFormat"]

    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": "Vercel Serverless" if env.get("VERCEL") else "local",
        "vercelEnv": settings.environment,
        "region": settings.region,
        "apiKeys": api_keys,
        "textProviderReady": settings.has_text_provider,
        "imageProviders": settings.image_provider_names,
        "debug": {
            **{
                f"{provider}EnvKeys": _related_env_names(env, markers)
                for provider, markers in RELATED_ENV_MARKERS.items()
            },
            "totalEnvVars": len(env),
            "pythonVersion": sys.version.split()[0],
            "platform": platform.system().lower(),
            "hasVercelKeys": sum(1 for k in env if k.startswith("VERCEL_")),
        },
    }


def timed_check(check: Callable[[], Any]) -> dict[str, Any]:
    start = time.time()
    try:
        check()
    except ProviderError as e:
        return {"ok": False, "latencyMs": int((time.time() - start) * 1000), "error": str(e)}
    return {"ok": True, "latencyMs": int((time.time() - start) * 1000), "error": None}


def check_connectivity(settings: Settings) -> dict[str, dict[str, Any]]:
    """One minimal live call per configured provider."""
    results: dict[str, dict[str, Any]] = {}

    text_models = {"anthropic": settings.anthropic_model, "gemini": settings.gemini_text_model}
    for name, model in text_models.items():
        key = settings.key_for(name)
        if not key:
            results[f"text:{name}"] = {"ok": False, "latencyMs": 0, "error": "not configured"}
            continue
        provider = get_text_provider(name, api_key=key, model=model, timeout=settings.text_timeout_s)
        results[f"text:{name}"] = timed_check(provider.ping)

    for provider in build_image_providers(settings):
        results[f"image:{provider.provider_name}"] = timed_check(provider.ping)

    logger.info(
        "Connectivity check: %s",
        ", ".join(f"{k}={'ok' if v['ok'] else 'fail'}" for k, v in results.items()),
    )
    return results
