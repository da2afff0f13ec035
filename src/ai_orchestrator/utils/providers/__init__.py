"""LLM provider implementations.

Supports multiple LLM backends with a unified interface:
- OpenAI: Chat completions and embeddings (also OpenAI-compatible endpoints)
- Anthropic: Direct API access to Claude models
- Google: Gemini models and embeddings via google-genai
- Ollama: Local models over HTTP

Usage:
    from ai_orchestrator.config import ProviderDescriptor
    from ai_orchestrator.utils.providers import create_provider

    provider = create_provider(ProviderDescriptor.from_profile("openai", api_key="sk-..."))
"""

from ai_orchestrator.config.models import ProviderDescriptor
from ai_orchestrator.utils.providers.anthropic import AnthropicProvider
from ai_orchestrator.utils.providers.base import (
    BaseLLMProvider,
    ChatMessage,
    CompletionOptions,
    CompletionResult,
    EmbeddingResult,
    StreamChunk,
    TokenUsage,
)
from ai_orchestrator.utils.providers.google import GoogleProvider
from ai_orchestrator.utils.providers.ollama import OllamaProvider
from ai_orchestrator.utils.providers.openai import OpenAIProvider

PROVIDER_CLASSES: dict[str, type[BaseLLMProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "google": GoogleProvider,
    "ollama": OllamaProvider,
}


def create_provider(descriptor: ProviderDescriptor) -> BaseLLMProvider:
    """
    Factory function to create the adapter for a descriptor.

    Raises:
        ValueError: If the descriptor's kind has no adapter
    """
    provider_class = PROVIDER_CLASSES.get(descriptor.kind)
    if provider_class is None:
        raise ValueError(
            f"Unknown provider kind: {descriptor.kind}. "
            f"Expected one of: {', '.join(PROVIDER_CLASSES)}"
        )
    return provider_class(descriptor)


__all__ = [
    "AnthropicProvider",
    "BaseLLMProvider",
    "ChatMessage",
    "CompletionOptions",
    "CompletionResult",
    "EmbeddingResult",
    "GoogleProvider",
    "OllamaProvider",
    "OpenAIProvider",
    "PROVIDER_CLASSES",
    "StreamChunk",
    "TokenUsage",
    "create_provider",
]
