"""
Unit Tests for reasoning providers and the provider factory.

HTTP traffic is served by httpx.MockTransport.
"""

import json

import httpx
import pytest

from rakshak.config.settings import Config
from rakshak.errors import ReasoningClientError
from rakshak.providers.gemini import GeminiReasoningClient
from rakshak.providers.ollama import OllamaReasoningClient
from rakshak.providers.provider_factory import create_reasoning_client


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


# ============================================================================
# Gemini
# ============================================================================

class TestGeminiReasoningClient:

    @pytest.mark.asyncio
    async def test_classify_returns_text(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("x-goog-api-key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_gemini_body('{"ok": true}'))

        client = GeminiReasoningClient(
            api_key="test-key",
            model="gemini-1.5-flash",
            base_url="https://gemini.test/v1beta",
            client=_mock_client(handler),
        )

        text = await client.classify("prompt text")

        assert text == '{"ok": true}'
        assert seen["url"] == "https://gemini.test/v1beta/models/gemini-1.5-flash:generateContent"
        assert seen["key"] == "test-key"
        assert seen["body"]["contents"][0]["parts"][0]["text"] == "prompt text"
        assert seen["body"]["generationConfig"]["responseMimeType"] == "application/json"

    @pytest.mark.asyncio
    async def test_http_error(self):
        client = GeminiReasoningClient(
            api_key="k",
            client=_mock_client(lambda request: httpx.Response(503, text="overloaded")),
        )

        with pytest.raises(ReasoningClientError, match="HTTP 503"):
            await client.classify("p")

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = GeminiReasoningClient(api_key="k", timeout=0.5, client=_mock_client(handler))

        with pytest.raises(ReasoningClientError, match="timed out"):
            await client.classify("p")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = GeminiReasoningClient(api_key="k", client=_mock_client(handler))

        with pytest.raises(ReasoningClientError, match="request failed"):
            await client.classify("p")

    @pytest.mark.asyncio
    async def test_blocked_prompt_without_candidates(self):
        client = GeminiReasoningClient(
            api_key="k",
            client=_mock_client(lambda request: httpx.Response(
                200, json={"promptFeedback": {"blockReason": "SAFETY"}}
            )),
        )

        with pytest.raises(ReasoningClientError, match="no candidates"):
            await client.classify("p")

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        client = GeminiReasoningClient(
            api_key="k",
            client=_mock_client(lambda request: httpx.Response(200, text="<html>")),
        )

        with pytest.raises(ReasoningClientError, match="non-JSON"):
            await client.classify("p")

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            GeminiReasoningClient(api_key="")


# ============================================================================
# Ollama
# ============================================================================

class TestOllamaReasoningClient:

    @pytest.mark.asyncio
    async def test_classify_returns_response_field(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": '{"isAccident": false}', "done": True})

        client = OllamaReasoningClient(
            base_url="ollama:11434", model="llama3", client=_mock_client(handler)
        )

        text = await client.classify("prompt")

        assert text == '{"isAccident": false}'
        assert seen["url"] == "http://ollama:11434/api/generate"
        assert seen["body"]["format"] == "json"
        assert seen["body"]["stream"] is False
        assert seen["body"]["model"] == "llama3"

    @pytest.mark.asyncio
    async def test_empty_response(self):
        client = OllamaReasoningClient(
            client=_mock_client(lambda request: httpx.Response(200, json={"response": ""}))
        )

        with pytest.raises(ReasoningClientError, match="empty"):
            await client.classify("p")

    @pytest.mark.asyncio
    async def test_single_attempt_on_failure(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        client = OllamaReasoningClient(client=_mock_client(handler))

        with pytest.raises(ReasoningClientError):
            await client.classify("p")

        assert len(calls) == 1


# ============================================================================
# Factory
# ============================================================================

class TestProviderFactory:

    def test_none_provider(self, clean_env):
        clean_env.setenv("REASONING_PROVIDER", "none")

        assert create_reasoning_client(Config()) is None

    def test_gemini_without_key_degrades(self, clean_env):
        clean_env.setenv("REASONING_PROVIDER", "gemini")

        assert create_reasoning_client(Config()) is None

    def test_gemini_with_key(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "abc")
        clean_env.setenv("GEMINI_MODEL", "gemini-2.0-flash")
        clean_env.setenv("REASONING_TIMEOUT_SECONDS", "7")

        client = create_reasoning_client(Config())

        assert isinstance(client, GeminiReasoningClient)
        assert client.model == "gemini-2.0-flash"
        assert client.timeout == 7.0

    def test_ollama(self, clean_env):
        clean_env.setenv("REASONING_PROVIDER", "ollama")
        clean_env.setenv("OLLAMA_URL", "localhost:11434")

        client = create_reasoning_client(Config())

        assert isinstance(client, OllamaReasoningClient)
        assert client.base_url == "http://localhost:11434"
