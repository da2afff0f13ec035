"""Application settings via environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings via environment variables."""

    # OpenAI
    openai_api_key: str = ""
    openai_base_url: str | None = None
    openai_model: str = "gpt-4o"
    openai_enabled: bool = True
    openai_models: list[str] = []  # Allow-list; empty allows any model
    openai_max_retries: int | None = None
    openai_timeout: float | None = None

    # Anthropic
    anthropic_api_key: str = ""
    anthropic_base_url: str | None = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_enabled: bool = True
    anthropic_models: list[str] = []
    anthropic_max_retries: int | None = None
    anthropic_timeout: float | None = None

    # Google AI
    google_ai_api_key: str = ""
    google_model: str = "gemini-2.0-flash-exp"
    google_enabled: bool = True
    google_models: list[str] = []
    google_max_retries: int | None = None
    google_timeout: float | None = None

    # Ollama (local, keyless). Empty base URL disables it.
    ollama_base_url: str = ""
    ollama_model: str = "llama3.1"
    ollama_models: list[str] = []
    ollama_max_retries: int | None = None
    ollama_timeout: float | None = None

    # Routing
    routing_strategy: Literal[
        "fallback", "round-robin", "cost-optimized", "latency-optimized"
    ] = "fallback"
    default_provider: str = "openai"
    fallback_providers: list[str] = ["anthropic", "google"]
    max_retries: int = 2
    request_timeout_seconds: float = 30.0
    retry_backoff_base_seconds: float = 0.5
    retry_backoff_max_seconds: float = 8.0

    # Agent
    agent_max_iterations: int = 10
    agent_temperature: float = 0.7

    # Chat
    chat_max_messages: int = 50
    chat_temperature: float = 0.7
    chat_system_prompt: str | None = None

    # RAG
    rag_max_sources: int = 5
    rag_top_k: int = 5
    rag_min_score: float = 0.7
    rag_chunk_size: int = 1000
    rag_chunk_overlap: int = 200

    # Logging
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
