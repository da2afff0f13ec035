"""OpenAI chat completions provider with streaming and embeddings."""

from typing import Any, AsyncIterator

import openai
from openai import AsyncOpenAI

from ai_orchestrator.config.models import ProviderDescriptor
from ai_orchestrator.core.resilience import (
    RateLimitError,
    TransientError,
    classify_http_error,
    wrap_provider_errors,
)
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


def classify_openai_error(error: Exception) -> Exception | None:
    """Translate OpenAI SDK exceptions into resilience-aware ones."""
    if isinstance(error, openai.RateLimitError):
        return RateLimitError(f"OpenAI rate limit: {error}")
    if isinstance(error, openai.APIConnectionError):  # includes APITimeoutError
        return TransientError(f"OpenAI connection error: {error}")
    if isinstance(error, openai.APIStatusError):
        return classify_http_error(error.status_code, "openai")
    return None


class OpenAIProvider(BaseLLMProvider):
    """
    OpenAI provider using the official async SDK.

    Also serves any OpenAI-compatible endpoint through `base_url`.
    """

    def __init__(self, descriptor: ProviderDescriptor, client: Any = None):
        super().__init__(descriptor)
        self._client = client or AsyncOpenAI(
            api_key=descriptor.api_key or None,
            base_url=descriptor.base_url,
            max_retries=0,  # The router owns retries
        )

    @property
    def supports_embeddings(self) -> bool:
        return True

    def _convert_messages(self, messages: list[ChatMessage]) -> list[dict[str, Any]]:
        converted = []
        for message in messages:
            if message.role == "function":
                label = message.name or "function"
                converted.append({"role": "user", "content": f"[{label}] {message.content}"})
            else:
                item: dict[str, Any] = {"role": message.role, "content": message.content}
                if message.name:
                    item["name"] = message.name
                converted.append(item)
        return converted

    def _build_params(
        self, messages: list[ChatMessage], options: CompletionOptions, model: str
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": model,
            "messages": self._convert_messages(messages),
        }
        optional = {
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
            "top_p": options.top_p,
            "frequency_penalty": options.frequency_penalty,
            "presence_penalty": options.presence_penalty,
            "stop": options.stop,
        }
        params.update({k: v for k, v in optional.items() if v is not None})
        return params

    @wrap_provider_errors(classify_openai_error)
    async def complete(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> CompletionResult:
        model = self.resolve_model(options.model)
        logger.debug("Calling OpenAI API", model=model, message_count=len(messages))

        response = await self._client.chat.completions.create(
            **self._build_params(messages, options, model)
        )

        choice = response.choices[0] if response.choices else None
        text = choice.message.content if choice and choice.message else ""
        usage = response.usage

        return CompletionResult(
            content=text or "",
            provider=self.name,
            model=model,
            usage=TokenUsage.of(
                usage.prompt_tokens if usage else 0,
                usage.completion_tokens if usage else 0,
                usage.total_tokens if usage else 0,
            ),
            finish_reason=(choice.finish_reason if choice else None) or "stop",
        )

    @wrap_provider_errors(classify_openai_error)
    async def stream(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> AsyncIterator[str]:
        model = self.resolve_model(options.model)
        logger.debug("Starting OpenAI stream", model=model, message_count=len(messages))

        stream = await self._client.chat.completions.create(
            stream=True, **self._build_params(messages, options, model)
        )
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                yield delta

    @wrap_provider_errors(classify_openai_error)
    async def embed(self, text: str, model: str | None = None) -> EmbeddingResult:
        embedding_model = self.embedding_model(model)
        response = await self._client.embeddings.create(model=embedding_model, input=text)
        return EmbeddingResult(
            embedding=list(response.data[0].embedding),
            provider=self.name,
            model=embedding_model,
        )

    @wrap_provider_errors(classify_openai_error)
    async def embed_many(
        self, texts: list[str], model: str | None = None
    ) -> list[EmbeddingResult]:
        if not texts:
            return []
        embedding_model = self.embedding_model(model)
        response = await self._client.embeddings.create(model=embedding_model, input=texts)
        ordered = sorted(response.data, key=lambda item: item.index)
        return [
            EmbeddingResult(
                embedding=list(item.embedding),
                provider=self.name,
                model=embedding_model,
            )
            for item in ordered
        ]

    async def aclose(self) -> None:
        await self._client.close()
