import json

import httpx
import pytest

from api import index
from api.index import handler
from core.providers import GeminiImageProvider
from core.text_providers import AnthropicTextProvider
from prompts.templates import FALLBACK_TITLES


def _post(path, body):
    return handler({"httpMethod": "POST", "path": path, "body": json.dumps(body)})


def _body(response):
    return json.loads(response["body"])


@pytest.fixture
def text_provider(monkeypatch):
    """Install a text provider for the handler and return a setter."""

    def install(provider):
        monkeypatch.setattr(index, "build_text_provider", lambda settings: provider)
        return provider

    return install


def test_options_preflight_returns_200_with_cors():
    response = handler({"httpMethod": "OPTIONS", "path": "/api/concept"})
    assert response["statusCode"] == 200
    assert response["body"] == ""
    assert response["headers"]["access-control-allow-origin"] == "*"


@pytest.mark.parametrize("path", ["/concept", "/image", "/song"])
def test_non_post_is_405(path):
    response = handler({"httpMethod": "GET", "path": path})
    assert response["statusCode"] == 405
    assert _body(response)["success"] is False


def test_unknown_route_is_404():
    assert handler({"httpMethod": "POST", "path": "/nope"})["statusCode"] == 404


def test_concept_end_to_end(text_provider, fake_text_provider):
    text_provider(fake_text_provider(text=json.dumps({
        "title": "Test Film",
        "decade": "1980s",
        "genre": "Horror",
        "visual_spec": {"palette": ["#1", "#2", "#3"]},
    })))
    response = _post("/api/generate-concept", {"genreFilter": "horror", "eraFilter": "1980s", "nodTheme": False})

    assert response["statusCode"] == 200
    body = _body(response)
    assert body["success"] is True
    concept = body["concept"]
    assert concept["title"] == "Test Film"
    assert concept["decade"] == "1980s"
    assert concept["genre"] == "Horror"
    assert concept["nod_theme"] is False
    assert "gore" in concept["visual_spec"]["banned"]


@pytest.mark.parametrize("flag, expected", [("false", False), ("0", False), ("no", False), ("true", True), ("TRUE", True)])
def test_concept_string_nod_theme_is_parsed_strictly(text_provider, fake_text_provider, flag, expected):
    provider = text_provider(fake_text_provider(text=json.dumps({
        "title": "Test Film",
        "decade": "1980s",
        "genre": "Horror",
        "visual_spec": {},
    })))
    response = _post("/concept", {"eraFilter": "1980s", "nodTheme": flag})

    assert _body(response)["concept"]["nod_theme"] is expected
    assert ("Hardcore mode:" in provider.prompts[0]) is expected


def test_concept_network_error_still_succeeds(text_provider, sequence_transport):
    transport, _ = sequence_transport(httpx.ConnectError("dns failure"))
    text_provider(AnthropicTextProvider(api_key="sk-ant-test", transport=transport))
    response = _post("/concept", {"genreFilter": "horror", "eraFilter": "1970s"})

    assert response["statusCode"] == 200
    body = _body(response)
    assert body["success"] is True
    assert body["concept"]["title"] in FALLBACK_TITLES[False]


def test_concept_without_key_and_with_garbage_body(text_provider):
    text_provider(None)
    response = handler({"httpMethod": "POST", "path": "/concept", "body": "not json"})
    assert response["statusCode"] == 200
    assert _body(response)["concept"]["decade"]


def test_concept_pipeline_crash_serves_fallback(monkeypatch):
    def explode(settings):
        raise RuntimeError("settings exploded")

    monkeypatch.setattr(index, "build_text_provider", explode)
    response = _post("/concept", {"eraFilter": "1960s", "nodTheme": True})
    concept = _body(response)["concept"]
    assert response["statusCode"] == 200
    assert concept["decade"] == "1960s"
    assert concept["title"] in FALLBACK_TITLES[True]


def _install_image_provider(monkeypatch, provider):
    monkeypatch.setattr(index, "build_image_providers", lambda settings, preferred=None: [provider])


def test_image_retries_then_returns_data_uri(monkeypatch, sequence_transport, png_b64):
    transport, calls = sequence_transport(
        httpx.Response(503),
        httpx.Response(503),
        httpx.Response(200, json={"predictions": [{"bytesBase64Encoded": png_b64}]}),
    )
    sleeps = []
    _install_image_provider(
        monkeypatch, GeminiImageProvider(api_key="AIza-test", transport=transport, sleep=sleeps.append)
    )
    response = _post("/image", {"visualElements": "a lighthouse keeper", "concept": {"decade": "1950s"}})

    assert response["statusCode"] == 200
    body = _body(response)
    assert body["imageUrl"] == f"data:image/png;base64,{png_b64}"
    assert body["generator"] == "gemini"
    assert sleeps == [1.0, 2.0]
    assert "a lighthouse keeper" in json.loads(calls[0].content)["instances"][0]["prompt"]


def test_image_exhaustion_is_surfaced(monkeypatch, sequence_transport):
    transport, _ = sequence_transport(httpx.Response(503))
    _install_image_provider(
        monkeypatch, GeminiImageProvider(api_key="AIza-test", transport=transport, sleep=[].append)
    )
    response = _post("/image", {"concept": {}})

    assert response["statusCode"] == 502
    body = _body(response)
    assert body["success"] is False
    assert "imageUrl" not in body


def test_image_without_providers_is_503(monkeypatch):
    monkeypatch.setattr(index, "build_image_providers", lambda settings, preferred=None: [])
    response = _post("/image", {})
    assert response["statusCode"] == 503
    assert _body(response)["success"] is False


def test_song_always_succeeds(text_provider):
    text_provider(None)
    response = _post("/song", {"concept": {"title": "Echo Garden", "decade": "1970s", "genre": "Sci-Fi"}})
    assert response["statusCode"] == 200
    recommendation = _body(response)["recommendation"]
    assert recommendation["title"] == "Space Truckin'"


def test_song_without_concept_still_succeeds(text_provider):
    text_provider(None)
    response = _post("/song", {})
    assert response["statusCode"] == 200
    assert _body(response)["success"] is True


def test_health_get_reports_flags_without_secrets(clear_key_env):
    clear_key_env.setenv("ANTHROPIC_API_KEY", "sk-ant-supersecretvalue")
    response = handler({"httpMethod": "GET", "path": "/api/health"})

    assert response["statusCode"] == 200
    body = _body(response)
    assert body["status"] == "OK"
    assert body["apiKeys"]["anthropic"] is True
    assert body["apiKeys"]["openai"] is False
    assert "ANTHROPIC_API_KEY" in body["debug"]["anthropicEnvKeys"]
    assert "connectivity" not in body
    assert "supersecret" not in response["body"]


def test_health_post_adds_connectivity(monkeypatch, clear_key_env):
    monkeypatch.setattr(
        index, "check_connectivity", lambda settings: {"text:anthropic": {"ok": True, "latencyMs": 3, "error": None}}
    )
    response = handler({"httpMethod": "POST", "path": "/health"})
    assert _body(response)["connectivity"]["text:anthropic"]["ok"] is True


def test_health_rejects_other_methods():
    response = handler({"httpMethod": "PUT", "path": "/health"})
    assert response["statusCode"] == 405
