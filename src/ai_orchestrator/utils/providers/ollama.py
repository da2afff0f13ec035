"""Ollama local provider over its HTTP API via httpx."""

import json
from typing import Any, AsyncIterator

import httpx

from ai_orchestrator.config.models import ProviderDescriptor
from ai_orchestrator.core.resilience import TransientError, wrap_httpx_errors
from ai_orchestrator.utils.logging import get_logger
from ai_orchestrator.utils.providers.base import (
    BaseLLMProvider,
    ChatMessage,
    CompletionOptions,
    CompletionResult,
    EmbeddingResult,
    TokenUsage,
)


logger = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaProvider(BaseLLMProvider):
    """
    Local models served by Ollama.

    Keyless; only a base URL is required. Streaming reads the newline
    delimited JSON the server emits; an `error` line there is raised as a
    TransientError instead of ending the reply early.
    """

    def __init__(self, descriptor: ProviderDescriptor, client: httpx.AsyncClient | None = None):
        super().__init__(descriptor)
        self._client = client or httpx.AsyncClient(
            base_url=descriptor.base_url or DEFAULT_BASE_URL,
            timeout=120.0,
        )

    @property
    def supports_embeddings(self) -> bool:
        return True

    def _build_payload(
        self, messages: list[ChatMessage], options: CompletionOptions, model: str, stream: bool
    ) -> dict[str, Any]:
        wire_messages = []
        for message in messages:
            if message.role == "function":
                label = message.name or "function"
                wire_messages.append({"role": "user", "content": f"[{label}] {message.content}"})
            else:
                wire_messages.append({"role": message.role, "content": message.content})

        model_options = {
            "temperature": options.temperature,
            "num_predict": options.max_tokens,
            "top_p": options.top_p,
            "frequency_penalty": options.frequency_penalty,
            "presence_penalty": options.presence_penalty,
            "stop": options.stop,
        }
        return {
            "model": model,
            "messages": wire_messages,
            "stream": stream,
            "options": {k: v for k, v in model_options.items() if v is not None},
        }

    @wrap_httpx_errors("ollama")
    async def complete(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> CompletionResult:
        model = self.resolve_model(options.model)
        logger.debug("Calling Ollama API", model=model, message_count=len(messages))

        resp = await self._client.post(
            "/api/chat", json=self._build_payload(messages, options, model, stream=False)
        )
        resp.raise_for_status()
        data = resp.json()
        if data.get("error"):
            raise TransientError(f"Ollama error: {data['error']}")

        return CompletionResult(
            content=data.get("message", {}).get("content", ""),
            provider=self.name,
            model=model,
            usage=TokenUsage.of(data.get("prompt_eval_count"), data.get("eval_count")),
            finish_reason=data.get("done_reason") or "stop",
        )

    @wrap_httpx_errors("ollama")
    async def stream(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> AsyncIterator[str]:
        model = self.resolve_model(options.model)
        logger.debug("Starting Ollama stream", model=model, message_count=len(messages))

        async with self._client.stream(
            "POST", "/api/chat", json=self._build_payload(messages, options, model, stream=True)
        ) as resp:
            resp.raise_for_status()
            async for line in resp.aiter_lines():
                if not line.strip():
                    continue
                data = json.loads(line)
                if data.get("error"):
                    raise TransientError(f"Ollama stream error: {data['error']}")
                text = data.get("message", {}).get("content", "")
                if text:
                    yield text
                if data.get("done"):
                    break

    @wrap_httpx_errors("ollama")
    async def embed(self, text: str, model: str | None = None) -> EmbeddingResult:
        results = await self.embed_many([text], model)
        return results[0]

    @wrap_httpx_errors("ollama")
    async def embed_many(
        self, texts: list[str], model: str | None = None
    ) -> list[EmbeddingResult]:
        if not texts:
            return []
        embedding_model = self.embedding_model(model)
        resp = await self._client.post(
            "/api/embed", json={"model": embedding_model, "input": texts}
        )
        resp.raise_for_status()
        return [
            EmbeddingResult(embedding=vector, provider=self.name, model=embedding_model)
            for vector in resp.json().get("embeddings", [])
        ]

    async def aclose(self) -> None:
        await self._client.aclose()
