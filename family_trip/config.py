"""
Configuration management for the family trip planner.
Covers the companion API server, the LLM used for document extraction,
and the client-side stores (local JSON file, remote trip endpoint).
"""
from pydantic_settings import BaseSettings
from typing import Literal, Optional
from pathlib import Path


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # LLM Configuration (document extraction on the companion server)
    llm_provider: Literal["openai", "mistral", "openrouter", "ollama"] = "openai"
    llm_api_key: Optional[str] = None
    llm_base_url: Optional[str] = None
    llm_model: str = "gpt-4o-mini"

    # LLM Parameters
    llm_temperature: float = 0.1
    llm_max_tokens: int = 4096
    llm_max_input_chars: int = 12000

    # Server Configuration
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = True
    data_dir: Path = Path("data")

    # Client Configuration
    extraction_base_url: Optional[str] = "http://localhost:3000"
    trip_api_url: Optional[str] = "http://localhost:3000/api/trip"
    local_storage_dir: Path = Path(".trip_storage")
    storage_key: str = "karens_greece_trip"
    save_debounce_seconds: float = 1.2
    http_timeout_seconds: float = 120.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()


def get_llm_config() -> dict:
    """Get LLM configuration based on provider."""
    config = {
        "api_key": settings.llm_api_key,
        "model": settings.llm_model,
        "temperature": settings.llm_temperature,
        "max_tokens": settings.llm_max_tokens,
    }

    # Set base URL based on provider
    if settings.llm_provider == "ollama":
        config["base_url"] = settings.llm_base_url or "http://localhost:11434/v1"
        # Ollama ignores the key but the client requires one
        config["api_key"] = settings.llm_api_key or "ollama"
    elif settings.llm_provider == "mistral":
        config["base_url"] = settings.llm_base_url or "https://api.mistral.ai/v1"
    elif settings.llm_provider == "openrouter":
        config["base_url"] = settings.llm_base_url or "https://openrouter.ai/api/v1"
    else:  # openai
        config["base_url"] = settings.llm_base_url or "https://api.openai.com/v1"

    return config


def extraction_enabled() -> bool:
    """True when an LLM is configured for document extraction."""
    return bool(settings.llm_api_key) or settings.llm_provider == "ollama"
