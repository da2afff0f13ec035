"""Provider router with strategy-based selection, retry and fallback.

The router owns a registry of provider adapters (in registration order)
and exposes one `complete`/`stream`/`embed` entry point over them:

- Selection: an explicit `options.provider`, otherwise the configured
  RoutingStrategy picks the candidate list.
- Retry: each candidate gets up to `max_retries` retries on transient
  errors with exponential backoff (tenacity).
- Fallback: once a candidate is exhausted the next one is tried; a
  non-transient error surfaces immediately.
- Timeout: every provider call is bounded and expiry counts as transient.

Streaming commits to a provider once its first fragment arrives. Failures
before that point are retried and fall back like `complete`; failures
after it propagate to the caller, so output from two providers is never
interleaved.
"""

from typing import AsyncIterator, Awaitable, Callable, Iterable, TypeVar

from ai_orchestrator.config.models import (
    RouterConfig,
    RoutingStrategy,
    build_provider_descriptors,
)
from ai_orchestrator.config.settings import Settings, get_settings
from ai_orchestrator.core.exceptions import (
    EmbeddingNotSupportedError,
    NoProvidersAvailableError,
    ProviderNotFoundError,
    ProvidersExhaustedError,
)
from ai_orchestrator.core.resilience import create_retrying, is_transient, with_timeout
from ai_orchestrator.utils.logging import get_logger
from ai_orchestrator.utils.providers import (
    BaseLLMProvider,
    ChatMessage,
    CompletionOptions,
    CompletionResult,
    EmbeddingResult,
    StreamChunk,
    create_provider,
)


logger = get_logger(__name__)

T = TypeVar("T")


class Router:
    """
    Routes requests across registered LLM providers.

    Example:
        router = Router.from_settings()
        result = await router.complete(
            [ChatMessage(role="user", content="Hello")],
            CompletionOptions(temperature=0),
        )
    """

    def __init__(
        self,
        providers: Iterable[BaseLLMProvider] = (),
        config: RouterConfig | None = None,
    ):
        self.config = config or RouterConfig()
        self._providers: dict[str, BaseLLMProvider] = {}
        self._round_robin_index = 0

        for provider in providers:
            self.register(provider)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "Router":
        """Build a router with every provider that is configured in settings."""
        settings = settings or get_settings()
        providers = [create_provider(d) for d in build_provider_descriptors(settings)]
        router = cls(providers, RouterConfig.from_settings(settings))
        logger.info(
            "Router initialized",
            strategy=router.config.strategy.value,
            providers=router.get_available_providers(),
        )
        return router

    # -------------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------------

    def register(self, provider: BaseLLMProvider) -> None:
        """Add a provider. Names are unique; registration order is kept."""
        if provider.name in self._providers:
            raise ValueError(f"Provider already registered: {provider.name}")
        self._providers[provider.name] = provider
        logger.debug(
            "Provider registered",
            provider=provider.name,
            model=provider.descriptor.default_model,
            enabled=provider.descriptor.enabled,
        )

    def get_provider(self, name: str) -> BaseLLMProvider:
        """Look up an enabled provider by name."""
        provider = self._providers.get(name)
        if provider is None or not provider.descriptor.enabled:
            raise ProviderNotFoundError(name)
        return provider

    def get_available_providers(self) -> list[str]:
        """Names of enabled providers, in registration order."""
        return [p.name for p in self._enabled()]

    def has_provider(self, name: str) -> bool:
        provider = self._providers.get(name)
        return provider is not None and provider.descriptor.enabled

    async def aclose(self) -> None:
        """Close every provider's network client."""
        for provider in self._providers.values():
            await provider.aclose()

    def _enabled(self) -> list[BaseLLMProvider]:
        return [p for p in self._providers.values() if p.descriptor.enabled]

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def _select_candidates(self, options: CompletionOptions) -> list[BaseLLMProvider]:
        """Ordered providers to try for one request."""
        if options.provider:
            return [self.get_provider(options.provider)]

        enabled = self._enabled()
        if not enabled:
            raise NoProvidersAvailableError()

        strategy = self.config.strategy

        if strategy == RoutingStrategy.ROUND_ROBIN:
            provider = enabled[self._round_robin_index % len(enabled)]
            self._round_robin_index += 1
            return [provider]

        if strategy == RoutingStrategy.COST_OPTIMIZED:
            return [min(enabled, key=lambda p: p.descriptor.cost_per_1k_tokens)]

        if strategy == RoutingStrategy.LATENCY_OPTIMIZED:
            return [min(enabled, key=lambda p: p.descriptor.avg_latency_ms)]

        # Fallback: default provider, then the configured chain
        candidates: list[BaseLLMProvider] = []
        for name in (self.config.default_provider, *self.config.fallback_providers):
            if not self.has_provider(name):
                continue
            provider = self._providers[name]
            if provider not in candidates:
                candidates.append(provider)
        return candidates or enabled[:1]

    # -------------------------------------------------------------------------
    # Resilience
    # -------------------------------------------------------------------------

    def _timeout_for(self, provider: BaseLLMProvider, options: CompletionOptions) -> float:
        if options.timeout is not None:
            return options.timeout
        if provider.descriptor.timeout is not None:
            return provider.descriptor.timeout
        return self.config.timeout

    def _max_retries_for(self, provider: BaseLLMProvider) -> int:
        if provider.descriptor.max_retries is not None:
            return provider.descriptor.max_retries
        return self.config.max_retries

    async def _call_with_retry(
        self,
        provider: BaseLLMProvider,
        call: Callable[[], Awaitable[T]],
        timeout: float,
    ) -> T:
        """Run `call` against one provider with timeout and transient retries."""
        retrying = create_retrying(
            self._max_retries_for(provider),
            backoff_base=self.config.retry_backoff_base,
            backoff_max=self.config.retry_backoff_max,
        )
        async for attempt in retrying:
            with attempt:
                attempt_number = attempt.retry_state.attempt_number
                if attempt_number > 1:
                    logger.info(
                        "Retrying provider call",
                        provider=provider.name,
                        attempt=attempt_number,
                    )
                return await with_timeout(call(), timeout)
        raise AssertionError("retry loop exited without a result")  # pragma: no cover

    def _record_failure(
        self,
        errors: list[tuple[str, Exception]],
        provider: BaseLLMProvider,
        error: Exception,
        remaining: int,
    ) -> None:
        errors.append((provider.name, error))
        logger.warning(
            "Provider failed",
            provider=provider.name,
            error=str(error),
            error_type=type(error).__name__,
            falling_back=remaining > 0,
        )

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def complete(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions | None = None,
    ) -> CompletionResult:
        """
        Get a complete response from the first candidate that succeeds.

        Raises:
            ProviderNotFoundError: Explicit provider unknown or disabled
            NoProvidersAvailableError: Nothing registered to route to
            ProvidersExhaustedError: Every candidate failed transiently
            ProviderError: A non-transient backend failure
        """
        options = options or CompletionOptions()
        candidates = self._select_candidates(options)
        errors: list[tuple[str, Exception]] = []

        for index, provider in enumerate(candidates):
            logger.debug("Routing completion", provider=provider.name, model=options.model)
            try:
                return await self._call_with_retry(
                    provider,
                    lambda: provider.complete(messages, options),
                    self._timeout_for(provider, options),
                )
            except Exception as e:
                if not is_transient(e):
                    raise
                self._record_failure(errors, provider, e, len(candidates) - index - 1)

        raise ProvidersExhaustedError(errors) from errors[-1][1]

    async def _open_stream(
        self,
        provider: BaseLLMProvider,
        messages: list[ChatMessage],
        options: CompletionOptions,
        timeout: float,
    ) -> tuple[AsyncIterator[str], str | None]:
        """Start a provider stream and wait for its first fragment."""

        async def first_fragment() -> tuple[AsyncIterator[str], str | None]:
            iterator = provider.stream(messages, options)
            try:
                return iterator, await with_timeout(iterator.__anext__(), timeout)
            except StopAsyncIteration:
                return iterator, None
            except BaseException:
                await iterator.aclose()
                raise

        return await self._call_with_retry(provider, first_fragment, timeout=0)

    async def stream(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions | None = None,
    ) -> AsyncIterator[StreamChunk]:
        """
        Stream a response as StreamChunk objects.

        Yields content chunks in generation order, then exactly one
        terminal chunk with done=True naming the provider and model.
        """
        options = options or CompletionOptions()
        candidates = self._select_candidates(options)
        errors: list[tuple[str, Exception]] = []

        for index, provider in enumerate(candidates):
            timeout = self._timeout_for(provider, options)
            logger.debug("Routing stream", provider=provider.name, model=options.model)
            try:
                iterator, first = await self._open_stream(provider, messages, options, timeout)
            except Exception as e:
                if not is_transient(e):
                    raise
                self._record_failure(errors, provider, e, len(candidates) - index - 1)
                continue

            try:
                if first is not None:
                    yield StreamChunk(content=first)
                    while True:
                        try:
                            fragment = await with_timeout(iterator.__anext__(), timeout)
                        except StopAsyncIteration:
                            break
                        yield StreamChunk(content=fragment)
            finally:
                await iterator.aclose()

            yield StreamChunk(
                done=True,
                provider=provider.name,
                model=provider.resolve_model(options.model),
            )
            return

        raise ProvidersExhaustedError(errors) from errors[-1][1]

    def _embedding_provider(self, name: str | None) -> BaseLLMProvider:
        if name:
            provider = self.get_provider(name)
            if not provider.supports_embeddings:
                raise EmbeddingNotSupportedError(
                    f"Provider {name} does not support embeddings", provider=name
                )
            return provider

        if self.has_provider(self.config.default_provider):
            default = self._providers[self.config.default_provider]
            if default.supports_embeddings:
                return default

        for provider in self._enabled():
            if provider.supports_embeddings:
                return provider

        raise EmbeddingNotSupportedError("No provider supports embeddings")

    async def embed(
        self,
        text: str,
        provider: str | None = None,
        model: str | None = None,
    ) -> EmbeddingResult:
        """Embed one text with the requested or first embedding-capable provider."""
        target = self._embedding_provider(provider)
        return await self._call_with_retry(
            target, lambda: target.embed(text, model), self._timeout_for(target, CompletionOptions())
        )

    async def embed_many(
        self,
        texts: list[str],
        provider: str | None = None,
        model: str | None = None,
    ) -> list[EmbeddingResult]:
        """Embed several texts in one batch, preserving order."""
        if not texts:
            return []
        target = self._embedding_provider(provider)
        return await self._call_with_retry(
            target,
            lambda: target.embed_many(texts, model),
            self._timeout_for(target, CompletionOptions()),
        )

    def __repr__(self) -> str:
        return (
            f"Router(strategy={self.config.strategy.value}, "
            f"providers={self.get_available_providers()})"
        )
