"""Vercel serverless entrypoint for the poster concept API.

All traffic is routed here. ``handler`` takes a Lambda/Vercel style event
(``httpMethod`` or ``method``, ``path``, ``body``) and returns
``{"statusCode", "headers", "body"}``.
"""

from __future__ import annotations

import json
import logging
import random
from typing import Any, Callable, Mapping

from dotenv import load_dotenv

from core.config import load_settings
from core.errors import ProviderError, ProviderUnavailable
from core.fallback import ensure_valid_song, fallback_concept
from core.health import build_health_report, check_connectivity
from core.models import Concept, parse_flag
from core.pipeline import generate_concept, generate_image, recommend_song
from core.prompt_builder import current_time_ms, derive_seed, resolve_decade
from core.providers import build_image_providers
from core.text_providers import build_text_provider

load_dotenv()
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "access-control-allow-credentials": "true",
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET,OPTIONS,POST",
    "access-control-allow-headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version"
    ),
    "x-content-type-options": "nosniff",
}


def _response(status: int, body: dict[str, Any] | None = None) -> dict[str, Any]:
    headers = dict(CORS_HEADERS)
    if body is None:
        return {"statusCode": status, "headers": headers, "body": ""}
    headers["content-type"] = "application/json"
    return {"statusCode": status, "headers": headers, "body": json.dumps(body)}


def _method(request: Mapping[str, Any]) -> str:
    return str(request.get("httpMethod") or request.get("method") or "GET").upper()


def _path(request: Mapping[str, Any]) -> str:
    path = str(request.get("path") or request.get("rawPath") or "/").split("?", 1)[0]
    path = "/" + path.strip("/")
    if path.startswith("/api/"):
        path = path[len("/api"):]
    if path.startswith("/generate-"):
        path = "/" + path[len("/generate-"):]
    return path


def _json_body(request: Mapping[str, Any]) -> dict[str, Any]:
    body = request.get("body")
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        try:
            body = json.loads(body) if body.strip() else {}
        except ValueError:
            logger.warning("Ignoring request body that is not JSON")
            return {}
    return body if isinstance(body, dict) else {}


def handle_concept(body: dict[str, Any]) -> dict[str, Any]:
    genre_filter = body.get("genreFilter", "any")
    era_filter = body.get("eraFilter", "any")
    hardcore_mode = parse_flag(body.get("nodTheme", body.get("hardcoreMode", False)))

    try:
        settings = load_settings()
        concept = generate_concept(
            build_text_provider(settings),
            genre_filter=genre_filter,
            era_filter=era_filter,
            hardcore_mode=hardcore_mode,
        )
    except Exception:
        logger.exception("Concept pipeline crashed; serving fallback concept")
        seed = derive_seed(current_time_ms())
        concept = fallback_concept(
            resolve_decade(era_filter, random.Random()), genre_filter, seed, hardcore_mode,
        )
    return _response(200, {"success": True, "concept": concept.to_dict()})


def handle_image(body: dict[str, Any]) -> dict[str, Any]:
    concept = Concept.from_dict(body.get("concept") or {})
    visual_elements = str(body.get("visualElements") or "")
    preferred = body.get("preferredGenerator")

    try:
        settings = load_settings()
        providers = build_image_providers(settings, preferred=preferred)
        image = generate_image(concept, providers, visual_elements)
    except ProviderUnavailable as e:
        logger.error("Image generation unavailable: %s", e)
        return _response(503, {"success": False, "error": e.message})
    except ProviderError as e:
        return _response(502, {"success": False, "error": f"{e.provider}: {e.message}"})
    except Exception as e:
        logger.exception("Image pipeline crashed")
        return _response(500, {"success": False, "error": str(e) or "Unknown error occurred"})

    return _response(200, {
        "success": True,
        "imageUrl": image.data_uri,
        "generator": image.provider,
    })


def handle_song(body: dict[str, Any]) -> dict[str, Any]:
    concept = Concept.from_dict(body.get("concept") or {})
    try:
        settings = load_settings()
        song = recommend_song(concept, build_text_provider(settings))
    except Exception:
        logger.exception("Song pipeline crashed; serving fallback song")
        song = ensure_valid_song(None, concept)
    return _response(200, {"success": True, "recommendation": song.to_dict()})


def _health(connectivity: bool) -> dict[str, Any]:
    try:
        settings = load_settings()
        report = build_health_report(settings)
        if connectivity:
            report["connectivity"] = check_connectivity(settings)
    except Exception as e:
        logger.exception("Health check crashed")
        return _response(500, {"success": False, "error": str(e) or "Unknown error occurred"})
    return _response(200, report)


def handle_health(body: dict[str, Any]) -> dict[str, Any]:
    return _health(connectivity=False)


def handle_health_check(body: dict[str, Any]) -> dict[str, Any]:
    """POST /health: the GET report plus a live round-trip to every configured provider."""
    return _health(connectivity=True)


Route = Callable[[dict[str, Any]], dict[str, Any]]

ROUTES: dict[str, dict[str, Route]] = {
    "/concept": {"POST": handle_concept},
    "/image": {"POST": handle_image},
    "/song": {"POST": handle_song},
    "/health": {"GET": handle_health, "POST": handle_health_check},
}


def handler(request):
    """Vercel Python serverless function handler."""
    method = _method(request)
    path = _path(request)

    if method == "OPTIONS":
        return _response(200)

    methods = ROUTES.get(path)
    if methods is None:
        return _response(404, {"success": False, "error": f"Unknown route: {path}"})

    func = methods.get(method)
    if func is None:
        return _response(405, {"success": False, "error": "Method not allowed"})

    return func(_json_body(request))
