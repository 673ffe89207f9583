"""Configuration management for the priority router."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Prio Router"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"

    # Routing
    routing_mode: Literal["rule_based_only", "hybrid", "llm_preferred", "llm_only"] = "hybrid"
    escalation_threshold: float = Field(default=0.65, gt=0.0, le=1.0)
    backend_order: list[str] = Field(
        default_factory=lambda: ["local", "anthropic", "openai", "google"]
    )
    backend_timeout_seconds: float | None = Field(default=30.0, gt=0)

    # LLM Providers
    openai_api_key: SecretStr | None = None
    anthropic_api_key: SecretStr | None = None
    google_api_key: SecretStr | None = None

    anthropic_model: str = "claude-3-5-haiku-20241022"
    openai_model: str = "gpt-4o-mini"
    google_model: str = "gemini-2.5-flash"

    # Local inference server (llama.cpp compatible)
    local_server_url: str | None = None
    local_model_id: str = "phi-3-mini-4k-instruct"
    local_prompt_template: Literal[
        "phi3", "chatml", "mistral", "llama2", "llama3", "gemma", "raw"
    ] = "phi3"
    # Shorter step-by-step classification prompt for small models
    local_stepwise_prompts: bool = False

    # Observability
    otel_exporter_otlp_endpoint: str | None = None
    log_json: bool = False
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
