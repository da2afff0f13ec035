"""Domain exceptions for the orchestration core."""


class OrchestratorError(Exception):
    """Base exception for all orchestration errors."""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(message)
        self.recoverable = recoverable


class ProviderError(OrchestratorError):
    """Non-transient failure reported by an LLM backend (auth, bad request)."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        recoverable: bool = False,
    ):
        super().__init__(message, recoverable)
        self.provider = provider


class ProviderNotFoundError(ProviderError):
    """Requested provider is not registered or is disabled."""

    def __init__(self, provider: str):
        super().__init__(
            f"Provider '{provider}' is not registered or is disabled",
            provider=provider,
        )


class ModelNotAllowedError(ProviderError):
    """Requested model is outside the provider's allow-list."""

    def __init__(self, provider: str, model: str):
        super().__init__(
            f"Model '{model}' is not allowed for provider '{provider}'",
            provider=provider,
        )
        self.model = model


class EmbeddingNotSupportedError(ProviderError):
    """No registered provider is able to produce embeddings."""


class NoProvidersAvailableError(OrchestratorError):
    """The router has no provider it can send a request to."""

    def __init__(self, message: str = "No AI providers available"):
        super().__init__(message, recoverable=False)


class ProvidersExhaustedError(OrchestratorError):
    """Every candidate provider failed with a transient error."""

    def __init__(self, errors: list[tuple[str, Exception]]):
        summary = "; ".join(f"{name}: {error}" for name, error in errors)
        super().__init__(f"All providers failed ({summary})", recoverable=True)
        self.errors = errors


class ConversationNotFoundError(OrchestratorError):
    """Conversation id is unknown to the conversation manager."""

    def __init__(self, conversation_id: str):
        super().__init__(f"Conversation {conversation_id} not found", recoverable=False)
        self.conversation_id = conversation_id


class ToolError(OrchestratorError):
    """Error raised while executing a tool."""

    def __init__(self, message: str, tool_name: str | None = None):
        super().__init__(message, recoverable=True)
        self.tool_name = tool_name
