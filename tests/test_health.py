import httpx

from core import health
from core.config import Settings
from core.errors import ProviderHTTPError
from core.health import build_health_report, check_connectivity, timed_check
from core.providers import OpenAIImageProvider
from core.text_providers import GeminiTextProvider


def test_report_lists_related_env_names_only():
    env = {"VERCEL": "1", "VERCEL_REGION": "iad1", "OPENAI_KEY": "sk-hidden", "PATH": "/usr/bin"}
    report = build_health_report(Settings(openai_api_key="sk-hidden", region="iad1"), environ=env)

    assert report["environment"] == "Vercel Serverless"
    assert report["region"] == "iad1"
    assert report["apiKeys"]["openai"] is True
    assert report["apiKeys"]["openaiLength"] == len("sk-hidden")
    assert report["debug"]["openaiEnvKeys"] == ["OPENAI_KEY"]
    assert report["debug"]["totalEnvVars"] == 4
    assert report["debug"]["hasVercelKeys"] == 1
    assert report["imageProviders"] == ["openai"]
    assert "sk-hidden" not in repr(report)


def test_timed_check_records_failures():
    def fail():
        raise ProviderHTTPError("fake", 401, "bad key")

    result = timed_check(fail)
    assert result["ok"] is False
    assert "bad key" in result["error"]
    assert timed_check(lambda: None)["ok"] is True


class _PingingText:
    provider_name = "anthropic"

    def ping(self):
        return "OK"


def test_connectivity_covers_configured_providers(monkeypatch, sequence_transport):
    transport, calls = sequence_transport(httpx.Response(200, json={"id": "dall-e-3"}))
    image = OpenAIImageProvider(api_key="sk-test", transport=transport)
    monkeypatch.setattr(health, "get_text_provider", lambda name, **kwargs: _PingingText())
    monkeypatch.setattr(health, "build_image_providers", lambda settings: [image])

    results = check_connectivity(Settings(anthropic_api_key="sk-ant-x", openai_api_key="sk-test"))

    assert results["text:anthropic"]["ok"] is True
    assert results["text:gemini"] == {"ok": False, "latencyMs": 0, "error": "not configured"}
    assert results["image:openai"]["ok"] is True
    assert calls[0].method == "GET"
    assert calls[0].url.path == "/v1/models/dall-e-3"


class _BrokenModels:
    def generate_content(self, **kwargs):
        raise ValueError("sdk could not parse response")


def test_connectivity_reports_unexpected_sdk_failure(monkeypatch):
    gemini = GeminiTextProvider(api_key="AIza-test")
    gemini._client = type("Client", (), {"models": _BrokenModels()})()
    monkeypatch.setattr(health, "get_text_provider", lambda name, **kwargs: gemini)
    monkeypatch.setattr(health, "build_image_providers", lambda settings: [])

    results = check_connectivity(Settings(gemini_api_key="AIza-test"))

    assert results["text:gemini"]["ok"] is False
    assert "could not parse" in results["text:gemini"]["error"]
