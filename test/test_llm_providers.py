import json

import httpx
import pytest

from llm.llm_client import LLMClient, build_provider
from llm.providers.gemini_provider import GeminiProvider
from llm.providers.mock_provider import MockProvider
from llm.providers.ollama_provider import OllamaProvider
from llm.providers.openai_provider import OpenAIProvider
from study_schedule.errors import UpstreamError


def _gemini_ok(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_gemini_request_shape():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_gemini_ok("[]"))

    provider = GeminiProvider(
        api_key="secret-key",
        model="gemini-test",
        base_url="https://example.test/v1beta",
        transport=httpx.MockTransport(handler),
    )
    out = provider.generate(system="INSTRUCTIONS", user="Essay due Monday")

    assert out == "[]"
    assert seen["url"] == "https://example.test/v1beta/models/gemini-test:generateContent"
    assert seen["key"] == "secret-key"
    assert "secret-key" not in seen["url"]
    text = seen["body"]["contents"][0]["parts"][0]["text"]
    assert text == "INSTRUCTIONS\n\nUser input: Essay due Monday"
    assert seen["body"]["generationConfig"] == {
        "temperature": 0.3,
        "topK": 40,
        "topP": 0.95,
        "maxOutputTokens": 2048,
    }


def test_gemini_error_status_raises_upstream_error():
    def handler(request):
        return httpx.Response(400, json={"error": {"message": "API key not valid"}})

    provider = GeminiProvider(api_key="bad", transport=httpx.MockTransport(handler))
    with pytest.raises(UpstreamError) as exc:
        provider.generate(system="s", user="u")
    assert exc.value.status_code == 400
    assert "API key not valid" in str(exc.value)


def test_gemini_without_candidates_raises_upstream_error():
    provider = GeminiProvider(
        api_key="k", transport=httpx.MockTransport(lambda r: httpx.Response(200, json={}))
    )
    with pytest.raises(UpstreamError):
        provider.generate(system="s", user="u")


def test_gemini_timeout_raises_upstream_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    provider = GeminiProvider(api_key="k", timeout_s=0.1, transport=httpx.MockTransport(handler))
    with pytest.raises(UpstreamError, match="timed out"):
        provider.generate(system="s", user="u")


def test_gemini_requires_key_and_hides_it():
    with pytest.raises(UpstreamError):
        GeminiProvider(api_key="  ")
    assert "top-secret" not in repr(GeminiProvider(api_key="top-secret"))


def test_openai_request_shape():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "[]"}}]})

    provider = OpenAIProvider(api_key="sk-test", model="m", transport=httpx.MockTransport(handler))
    assert provider.generate(system="S", user="U") == "[]"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["temperature"] == 0.3
    assert seen["body"]["max_tokens"] == 2048
    assert seen["body"]["messages"][1]["content"] == "User input: U"


def test_ollama_error_status():
    provider = OllamaProvider(transport=httpx.MockTransport(lambda r: httpx.Response(503)))
    with pytest.raises(UpstreamError) as exc:
        provider.generate(system="S", user="U")
    assert exc.value.status_code == 503


def test_build_provider_by_name():
    assert isinstance(build_provider("gemini", api_key="k"), GeminiProvider)
    assert isinstance(build_provider("openai", api_key="k"), OpenAIProvider)
    assert isinstance(build_provider("ollama"), OllamaProvider)
    assert isinstance(build_provider("mock"), MockProvider)
    with pytest.raises(ValueError):
        build_provider("nope")


def test_mock_provider_through_client():
    client = LLMClient(provider=MockProvider())
    out = client.complete("Today's date: June 11th, 2025 (2025-06-11, Wednesday)", "Read chapter 4\n\nEssay draft")
    items = json.loads(out[out.index("["):])
    assert [i["title"] for i in items] == ["Read chapter 4", "Essay draft"]
    assert {i["date"] for i in items} == {"2025-06-18"}


def _html_gateway(request):
    return httpx.Response(200, text="<html>gateway</html>")


@pytest.mark.parametrize(
    "make_provider",
    [
        lambda t: GeminiProvider(api_key="k", transport=t),
        lambda t: OpenAIProvider(api_key="k", transport=t),
        lambda t: OllamaProvider(transport=t),
    ],
    ids=["gemini", "openai", "ollama"],
)
def test_non_json_success_body_raises_upstream_error(make_provider):
    provider = make_provider(httpx.MockTransport(_html_gateway))
    with pytest.raises(UpstreamError, match="non-JSON") as exc:
        provider.generate(system="S", user="U")
    assert exc.value.status_code == 200


def test_ollama_body_without_message_raises_upstream_error():
    provider = OllamaProvider(
        transport=httpx.MockTransport(
            lambda r: httpx.Response(200, json={"error": "model not loaded"})
        )
    )
    with pytest.raises(UpstreamError, match="no message"):
        provider.generate(system="S", user="U")


def test_openai_without_choices_raises_upstream_error():
    provider = OpenAIProvider(
        api_key="k", transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"choices": []}))
    )
    with pytest.raises(UpstreamError, match="no choices"):
        provider.generate(system="S", user="U")
