"""Configuration: settings, provider descriptors and prompts."""

from ai_orchestrator.config.models import (
    PROVIDER_PROFILES,
    ProviderDescriptor,
    ProviderProfile,
    RouterConfig,
    RoutingStrategy,
    build_provider_descriptors,
)
from ai_orchestrator.config.settings import Settings, get_settings

__all__ = [
    "PROVIDER_PROFILES",
    "ProviderDescriptor",
    "ProviderProfile",
    "RouterConfig",
    "RoutingStrategy",
    "Settings",
    "build_provider_descriptors",
    "get_settings",
]
