"""Anthropic direct API provider.

System messages are lifted out of the dialogue into Anthropic's dedicated
`system` parameter; `max_tokens` is mandatory for the Messages API and
defaults to 4096.
"""

from typing import Any, AsyncIterator

import anthropic
from anthropic import AsyncAnthropic

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
    TokenUsage,
)


logger = get_logger(__name__)

DEFAULT_MAX_TOKENS = 4096


def classify_anthropic_error(error: Exception) -> Exception | None:
    """Translate Anthropic SDK exceptions into resilience-aware ones."""
    if isinstance(error, anthropic.RateLimitError):
        return RateLimitError(f"Anthropic rate limit: {error}")
    if isinstance(error, anthropic.APIConnectionError):
        return TransientError(f"Anthropic connection error: {error}")
    if isinstance(error, anthropic.APIStatusError):
        if error.status_code == 529:  # Overloaded
            return TransientError(f"Anthropic overloaded: {error}")
        return classify_http_error(error.status_code, "anthropic")
    return None


class AnthropicProvider(BaseLLMProvider):
    """
    Direct Anthropic API provider.

    Uses the official Anthropic Python SDK to call Claude models directly.
    """

    def __init__(self, descriptor: ProviderDescriptor, client: Any = None):
        super().__init__(descriptor)
        self._client = client or AsyncAnthropic(
            api_key=descriptor.api_key or None,
            base_url=descriptor.base_url,
            max_retries=0,  # The router owns retries
        )

    def _build_params(
        self, messages: list[ChatMessage], options: CompletionOptions, model: str
    ) -> dict[str, Any]:
        system_parts = [m.content for m in messages if m.role == "system"]
        dialogue = []
        for message in messages:
            if message.role == "system":
                continue
            if message.role == "function":
                label = message.name or "function"
                dialogue.append({"role": "user", "content": f"[{label}] {message.content}"})
            else:
                dialogue.append({"role": message.role, "content": message.content})

        params: dict[str, Any] = {
            "model": model,
            "max_tokens": options.max_tokens or DEFAULT_MAX_TOKENS,
            "messages": dialogue,
        }
        if system_parts:
            params["system"] = "\n\n".join(system_parts)
        if options.temperature is not None:
            params["temperature"] = options.temperature
        if options.top_p is not None:
            params["top_p"] = options.top_p
        if options.stop:
            params["stop_sequences"] = options.stop
        return params

    @wrap_provider_errors(classify_anthropic_error)
    async def complete(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> CompletionResult:
        model = self.resolve_model(options.model)
        logger.debug("Calling Anthropic API", model=model, message_count=len(messages))

        response = await self._client.messages.create(
            **self._build_params(messages, options, model)
        )

        content = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )

        logger.debug(
            "Anthropic response received",
            model=model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            stop_reason=response.stop_reason,
        )

        return CompletionResult(
            content=content,
            provider=self.name,
            model=model,
            usage=TokenUsage.of(response.usage.input_tokens, response.usage.output_tokens),
            finish_reason=response.stop_reason or "stop",
        )

    @wrap_provider_errors(classify_anthropic_error)
    async def stream(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> AsyncIterator[str]:
        model = self.resolve_model(options.model)
        logger.debug("Starting Anthropic stream", model=model, message_count=len(messages))

        async with self._client.messages.stream(
            **self._build_params(messages, options, model)
        ) as stream:
            async for text in stream.text_stream:
                if text:
                    yield text

    async def aclose(self) -> None:
        await self._client.close()
