"""Google Gemini provider using the google-genai SDK."""

from typing import Any, AsyncIterator

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ai_orchestrator.config.models import ProviderDescriptor
from ai_orchestrator.core.resilience import (
    classify_http_error,
    classify_httpx_error,
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


def classify_google_error(error: Exception) -> Exception | None:
    """Translate google-genai exceptions into resilience-aware ones."""
    if isinstance(error, genai_errors.APIError):
        return classify_http_error(error.code or 500, "google")
    return classify_httpx_error(error, "google")


class GoogleProvider(BaseLLMProvider):
    """
    Google AI (Gemini) provider.

    Assistant turns map to Gemini's "model" role; system messages become
    the system instruction.
    """

    def __init__(self, descriptor: ProviderDescriptor, client: Any = None):
        super().__init__(descriptor)
        self._client = client or genai.Client(api_key=descriptor.api_key or None)

    @property
    def supports_embeddings(self) -> bool:
        return True

    def _build_request(
        self, messages: list[ChatMessage], options: CompletionOptions
    ) -> tuple[list[dict[str, Any]], types.GenerateContentConfig]:
        system_parts = [m.content for m in messages if m.role == "system"]
        contents = []
        for message in messages:
            if message.role == "system":
                continue
            role = "model" if message.role == "assistant" else "user"
            text = message.content
            if message.role == "function":
                text = f"[{message.name or 'function'}] {text}"
            contents.append({"role": role, "parts": [{"text": text}]})

        config = types.GenerateContentConfig(
            system_instruction="\n\n".join(system_parts) if system_parts else None,
            temperature=options.temperature,
            max_output_tokens=options.max_tokens,
            top_p=options.top_p,
            frequency_penalty=options.frequency_penalty,
            presence_penalty=options.presence_penalty,
            stop_sequences=options.stop,
        )
        return contents, config

    @wrap_provider_errors(classify_google_error)
    async def complete(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> CompletionResult:
        model = self.resolve_model(options.model)
        contents, config = self._build_request(messages, options)
        logger.debug("Calling Google AI API", model=model, message_count=len(messages))

        response = await self._client.aio.models.generate_content(
            model=model, contents=contents, config=config
        )

        usage = response.usage_metadata
        finish_reason = "stop"
        if response.candidates and response.candidates[0].finish_reason:
            reason = response.candidates[0].finish_reason
            finish_reason = str(getattr(reason, "value", reason)).lower()

        return CompletionResult(
            content=response.text or "",
            provider=self.name,
            model=model,
            usage=TokenUsage.of(
                usage.prompt_token_count if usage else 0,
                usage.candidates_token_count if usage else 0,
                usage.total_token_count if usage else 0,
            ),
            finish_reason=finish_reason,
        )

    @wrap_provider_errors(classify_google_error)
    async def stream(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> AsyncIterator[str]:
        model = self.resolve_model(options.model)
        contents, config = self._build_request(messages, options)
        logger.debug("Starting Google AI stream", model=model, message_count=len(messages))

        stream = await self._client.aio.models.generate_content_stream(
            model=model, contents=contents, config=config
        )
        async for chunk in stream:
            if chunk.text:
                yield chunk.text

    @wrap_provider_errors(classify_google_error)
    async def embed(self, text: str, model: str | None = None) -> EmbeddingResult:
        results = await self.embed_many([text], model)
        return results[0]

    @wrap_provider_errors(classify_google_error)
    async def embed_many(
        self, texts: list[str], model: str | None = None
    ) -> list[EmbeddingResult]:
        if not texts:
            return []
        embedding_model = self.embedding_model(model)
        response = await self._client.aio.models.embed_content(
            model=embedding_model, contents=texts
        )
        return [
            EmbeddingResult(
                embedding=list(item.values or []),
                provider=self.name,
                model=embedding_model,
            )
            for item in response.embeddings or []
        ]
