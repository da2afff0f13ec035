"""Provider and routing configuration.

Defines the immutable descriptors the router builds its registry from:
- Static provider profiles (default model, relative cost, typical latency)
- Provider descriptors created from settings at startup
- Router-level policy (strategy, fallback chain, retries, timeout)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ai_orchestrator.config.settings import Settings


class RoutingStrategy(str, Enum):
    """Policies the router uses to pick a provider."""

    FALLBACK = "fallback"
    ROUND_ROBIN = "round-robin"
    COST_OPTIMIZED = "cost-optimized"
    LATENCY_OPTIMIZED = "latency-optimized"


@dataclass(frozen=True)
class ProviderProfile:
    """Static metadata about a provider family."""

    kind: str
    default_model: str
    cost_per_1k_tokens: float  # USD, blended input/output
    avg_latency_ms: float  # Typical time to first token
    supports_embeddings: bool = False
    default_embedding_model: str = ""


PROVIDER_PROFILES: dict[str, ProviderProfile] = {
    "openai": ProviderProfile(
        kind="openai",
        default_model="gpt-4o",
        cost_per_1k_tokens=0.01,
        avg_latency_ms=900.0,
        supports_embeddings=True,
        default_embedding_model="text-embedding-3-small",
    ),
    "anthropic": ProviderProfile(
        kind="anthropic",
        default_model="claude-sonnet-4-20250514",
        cost_per_1k_tokens=0.009,
        avg_latency_ms=1100.0,
    ),
    "google": ProviderProfile(
        kind="google",
        default_model="gemini-2.0-flash-exp",
        cost_per_1k_tokens=0.0004,
        avg_latency_ms=700.0,
        supports_embeddings=True,
        default_embedding_model="text-embedding-004",
    ),
    "ollama": ProviderProfile(
        kind="ollama",
        default_model="llama3.1",
        cost_per_1k_tokens=0.0,  # Local = free
        avg_latency_ms=1500.0,
        supports_embeddings=True,
        default_embedding_model="nomic-embed-text",
    ),
}


@dataclass(frozen=True)
class ProviderDescriptor:
    """
    Identifies one configured backend.

    Created from configuration at startup and never mutated afterwards.
    """

    name: str
    default_model: str
    kind: str = ""  # Adapter family; defaults to name
    api_key: str = field(default="", repr=False)
    base_url: str | None = None
    enabled: bool = True
    models: tuple[str, ...] = ()  # Allow-list; empty means any model
    cost_per_1k_tokens: float = 0.0
    avg_latency_ms: float = 0.0
    max_retries: int | None = None  # Overrides RouterConfig.max_retries
    timeout: float | None = None  # Overrides RouterConfig.timeout

    def __post_init__(self) -> None:
        if not self.kind:
            object.__setattr__(self, "kind", self.name)
        object.__setattr__(self, "models", tuple(self.models))

    def allows_model(self, model: str) -> bool:
        """Check a model id against the allow-list."""
        return not self.models or model in self.models

    @classmethod
    def from_profile(cls, name: str, **overrides) -> "ProviderDescriptor":
        """Build a descriptor seeded with the static profile for `name`."""
        profile = PROVIDER_PROFILES[overrides.get("kind") or name]
        values = {
            "default_model": profile.default_model,
            "kind": profile.kind,
            "cost_per_1k_tokens": profile.cost_per_1k_tokens,
            "avg_latency_ms": profile.avg_latency_ms,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(name=name, **values)


@dataclass(frozen=True)
class RouterConfig:
    """Router-level policy."""

    strategy: RoutingStrategy = RoutingStrategy.FALLBACK
    default_provider: str = "openai"
    fallback_providers: tuple[str, ...] = ("anthropic", "google")
    max_retries: int = 2
    timeout: float = 30.0  # seconds
    retry_backoff_base: float = 0.5  # seconds
    retry_backoff_max: float = 8.0  # seconds

    def __post_init__(self) -> None:
        object.__setattr__(self, "strategy", RoutingStrategy(self.strategy))
        object.__setattr__(self, "fallback_providers", tuple(self.fallback_providers))

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RouterConfig":
        return cls(
            strategy=RoutingStrategy(settings.routing_strategy),
            default_provider=settings.default_provider,
            fallback_providers=tuple(settings.fallback_providers),
            max_retries=settings.max_retries,
            timeout=settings.request_timeout_seconds,
            retry_backoff_base=settings.retry_backoff_base_seconds,
            retry_backoff_max=settings.retry_backoff_max_seconds,
        )


def _limits(settings: "Settings", prefix: str) -> dict[str, Any]:
    """Per-provider allow-list, retry and timeout overrides from settings."""
    return {
        "models": tuple(getattr(settings, f"{prefix}_models")),
        "max_retries": getattr(settings, f"{prefix}_max_retries"),
        "timeout": getattr(settings, f"{prefix}_timeout"),
    }


def build_provider_descriptors(settings: "Settings") -> list[ProviderDescriptor]:
    """
    Turn settings into provider descriptors.

    Only providers that are enabled and have credentials are returned,
    in a fixed registration order: openai, anthropic, google, ollama.
    """
    descriptors: list[ProviderDescriptor] = []

    if settings.openai_enabled and settings.openai_api_key:
        descriptors.append(
            ProviderDescriptor.from_profile(
                "openai",
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url,
                default_model=settings.openai_model,
                **_limits(settings, "openai"),
            )
        )

    if settings.anthropic_enabled and settings.anthropic_api_key:
        descriptors.append(
            ProviderDescriptor.from_profile(
                "anthropic",
                api_key=settings.anthropic_api_key,
                base_url=settings.anthropic_base_url,
                default_model=settings.anthropic_model,
                **_limits(settings, "anthropic"),
            )
        )

    if settings.google_enabled and settings.google_ai_api_key:
        descriptors.append(
            ProviderDescriptor.from_profile(
                "google",
                api_key=settings.google_ai_api_key,
                default_model=settings.google_model,
                **_limits(settings, "google"),
            )
        )

    if settings.ollama_base_url:
        descriptors.append(
            ProviderDescriptor.from_profile(
                "ollama",
                base_url=settings.ollama_base_url,
                default_model=settings.ollama_model,
                **_limits(settings, "ollama"),
            )
        )

    return descriptors
