"""
Settings module for the Taskforce engine.

Environment-based configuration with sensible defaults.
All settings can be overridden via environment variables (or a .env file).
"""

import os
from functools import lru_cache
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    All settings have sensible defaults for development.
    In production, the advisory model key and Redis credentials should be
    set via environment variables.
    """

    # Environment
    environment: str = Field(
        default="development",
        description="Environment name (development, staging, production)"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Advisory model (OpenAI-compatible chat completions endpoint)
    llm_provider: str = Field(
        default="groq",
        description="Advisory model provider name, used for logging only"
    )
    llm_api_url: str = Field(
        default="https://api.groq.com/openai/v1/chat/completions",
        description="Chat completions endpoint"
    )
    llm_model: str = Field(
        default="llama-3.3-70b-versatile",
        description="Advisory model name"
    )
    llm_api_key: Optional[str] = Field(
        default=None,
        description="Advisory model API key (set via LLM_API_KEY)"
    )
    llm_timeout: float = Field(
        default=30.0,
        description="Advisory request timeout in seconds"
    )
    llm_assignment_temperature: float = Field(
        default=0.1,
        description="Sampling temperature for assignment and role prompts"
    )
    llm_extraction_temperature: float = Field(
        default=0.3,
        description="Sampling temperature for voice field extraction"
    )

    # Redis Configuration (document store)
    redis_host: str = Field(
        default="127.0.0.1",
        description="Redis host"
    )
    redis_port: int = Field(
        default=6379,
        description="Redis port"
    )
    redis_db: int = Field(
        default=0,
        description="Redis database number"
    )
    redis_password: Optional[str] = Field(
        default=None,
        description="Redis password (set via REDIS_PASSWORD env var)"
    )
    redis_socket_timeout: int = Field(
        default=30,
        description="Redis socket timeout in seconds"
    )
    redis_key_prefix: str = Field(
        default="taskforce",
        description="Prefix for every Redis key written by the store"
    )

    # Assignment policy
    work_hours_per_day: int = Field(
        default=9,
        description="Hours in one working day, used for day estimates"
    )
    max_active_tasks: int = Field(
        default=3,
        description="Workers at or above this many active tasks are skipped when possible"
    )

    # Performance tracking
    performance_update_max_attempts: int = Field(
        default=3,
        description="Read-modify-write attempts before a concurrent update is surfaced"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def redis_url(self) -> str:
        """Get Redis URL."""
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are cached for performance. To reload, use:
        get_settings.cache_clear()

    Returns:
        Settings instance
    """
    return Settings()


def load_settings_from_env(env_file: str = ".env") -> Settings:
    """Load settings from a specific env file."""
    if os.path.exists(env_file):
        from dotenv import load_dotenv
        load_dotenv(env_file)
    get_settings.cache_clear()
    return get_settings()
