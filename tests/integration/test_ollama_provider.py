"""Tests for the Ollama HTTP adapter against a mocked transport."""

import json

import httpx
import pytest

from ai_orchestrator.config.models import ProviderDescriptor
from ai_orchestrator.core.exceptions import ProviderError
from ai_orchestrator.core.resilience import TransientError
from ai_orchestrator.core.router import Router
from ai_orchestrator.utils.providers.base import ChatMessage, CompletionOptions
from ai_orchestrator.utils.providers.ollama import OllamaProvider

from conftest import fast_config


BASE_URL = "http://ollama.test"
MESSAGES = [
    ChatMessage(role="system", content="Answer in one word."),
    ChatMessage(role="user", content="Capital of France?"),
]


def make_provider(handler) -> OllamaProvider:
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return OllamaProvider(
        ProviderDescriptor.from_profile("ollama", base_url=BASE_URL), client=client
    )


class TestOllamaProvider:
    """Tests for chat, streaming and embeddings over HTTP."""

    @pytest.mark.asyncio
    async def test_complete(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "message": {"role": "assistant", "content": "Paris"},
                    "prompt_eval_count": 12,
                    "eval_count": 1,
                    "done": True,
                    "done_reason": "stop",
                },
            )

        provider = make_provider(handler)
        result = await provider.complete(
            MESSAGES, CompletionOptions(temperature=0, max_tokens=5)
        )

        assert result.content == "Paris"
        assert result.model == "llama3.1"
        assert result.usage.total_tokens == 13
        assert seen["path"] == "/api/chat"
        assert seen["body"]["stream"] is False
        assert seen["body"]["options"] == {"temperature": 0, "num_predict": 5}
        assert seen["body"]["messages"][0] == {
            "role": "system",
            "content": "Answer in one word.",
        }

    @pytest.mark.asyncio
    async def test_stream_reads_ndjson(self):
        lines = [
            {"message": {"content": "Pa"}, "done": False},
            {"message": {"content": ""}, "done": False},
            {"message": {"content": "ris"}, "done": False},
            {"message": {"content": ""}, "done": True},
        ]

        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content)["stream"] is True
            body = "\n".join(json.dumps(line) for line in lines) + "\n"
            return httpx.Response(200, content=body.encode())

        provider = make_provider(handler)
        fragments = [f async for f in provider.stream(MESSAGES, CompletionOptions())]

        assert fragments == ["Pa", "ris"]

    @pytest.mark.asyncio
    async def test_stream_error_line_raises(self):
        lines = [
            {"message": {"content": "Pa"}, "done": False},
            {"error": "model runner has unexpectedly stopped"},
        ]

        def handler(request: httpx.Request) -> httpx.Response:
            body = "\n".join(json.dumps(line) for line in lines) + "\n"
            return httpx.Response(200, content=body.encode())

        provider = make_provider(handler)
        fragments = []

        with pytest.raises(TransientError, match="unexpectedly stopped"):
            async for fragment in provider.stream(MESSAGES, CompletionOptions()):
                fragments.append(fragment)
        assert fragments == ["Pa"]

    @pytest.mark.asyncio
    async def test_complete_error_body_raises(self):
        provider = make_provider(
            lambda request: httpx.Response(200, json={"error": "out of memory"})
        )

        with pytest.raises(TransientError, match="out of memory"):
            await provider.complete(MESSAGES, CompletionOptions())

    @pytest.mark.asyncio
    async def test_router_falls_back_on_stream_error_line(self, scripted_provider):
        provider = make_provider(
            lambda request: httpx.Response(200, content=b'{"error": "busy"}\n')
        )
        backup = scripted_provider("backup", ["Paris"])
        router = Router(
            [provider, backup],
            fast_config(default_provider="ollama", fallback_providers=("backup",), max_retries=0),
        )

        chunks = [chunk async for chunk in router.stream(MESSAGES)]

        assert "".join(c.content for c in chunks) == "Paris"
        assert chunks[-1].provider == "backup"
        await router.aclose()

    @pytest.mark.asyncio
    async def test_embed_many(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            assert request.url.path == "/api/embed"
            assert body["model"] == "nomic-embed-text"
            return httpx.Response(
                200, json={"embeddings": [[float(len(t))] for t in body["input"]]}
            )

        provider = make_provider(handler)
        results = await provider.embed_many(["a", "abc"])

        assert [r.embedding for r in results] == [[1.0], [3.0]]
        assert (await provider.embed("ab")).embedding == [2.0]

    @pytest.mark.asyncio
    async def test_server_error_is_transient(self):
        provider = make_provider(lambda request: httpx.Response(503, json={"error": "busy"}))

        with pytest.raises(TransientError):
            await provider.complete(MESSAGES, CompletionOptions())

    @pytest.mark.asyncio
    async def test_missing_model_is_permanent(self):
        provider = make_provider(
            lambda request: httpx.Response(404, json={"error": "model not found"})
        )

        with pytest.raises(ProviderError):
            await provider.complete(MESSAGES, CompletionOptions())

    @pytest.mark.asyncio
    async def test_router_retries_http_failures(self):
        responses = iter(
            [
                httpx.Response(502),
                httpx.Response(200, json={"message": {"content": "Paris"}, "done": True}),
            ]
        )
        provider = make_provider(lambda request: next(responses))
        router = Router([provider], fast_config(default_provider="ollama"))

        result = await router.complete(MESSAGES)

        assert result.content == "Paris"
        assert result.provider == "ollama"
        await router.aclose()
