"""Core domain modules."""

from ai_orchestrator.core.exceptions import (
    ConversationNotFoundError,
    EmbeddingNotSupportedError,
    ModelNotAllowedError,
    NoProvidersAvailableError,
    OrchestratorError,
    ProviderError,
    ProviderNotFoundError,
    ProvidersExhaustedError,
    ToolError,
)

__all__ = [
    # Exceptions
    "ConversationNotFoundError",
    "EmbeddingNotSupportedError",
    "ModelNotAllowedError",
    "NoProvidersAvailableError",
    "OrchestratorError",
    "ProviderError",
    "ProviderNotFoundError",
    "ProvidersExhaustedError",
    "ToolError",
]
