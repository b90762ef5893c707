"""Application configuration using pydantic-settings."""

import json
import logging
from ast import literal_eval
from functools import lru_cache
from typing import Annotated, ClassVar, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Brandscope"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # Logging; level defaults to DEBUG when debug is on, INFO otherwise
    log_level: str | None = None
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    log_json_extras: bool = True
    log_stream: Literal["stdout", "stderr"] = "stdout"

    def get_log_level(self) -> int:
        """Return the numeric level for the brandscope logger."""
        if self.log_level:
            return logging.getLevelNamesMapping()[self.log_level]
        return logging.DEBUG if self.debug else logging.INFO

    # API
    api_prefix: str = "/api"
    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:4111",
    ]

    # Redis (scorecard store)
    redis_url: str = "redis://localhost:6379/0"
    scorecard_ttl_seconds: int = 7 * 86400
    redis_socket_timeout_seconds: float = 5.0
    redis_health_check_interval: int = 30

    # LLM Configuration
    default_llm_model: str = "openai:gpt-4o"
    llm_max_retries: int = 2
    llm_timeout_fast: int = 30
    llm_timeout_standard: int = 45
    llm_timeout_reasoning: int = 60
    # Retried once with this model when the primary model answers HTTP 429
    llm_fallback_model: str | None = "openai:gpt-4o-mini"

    def get_llm_timeout(self, tier: str = "standard") -> int:
        """Return the LLM timeout in seconds for a given model tier."""
        return getattr(self, f"llm_timeout_{tier}", self.llm_timeout_standard)

    # Per-tier model overrides (optional, override the built-in defaults below)
    dev_model_reasoning: str | None = None
    dev_model_standard: str | None = None
    dev_model_fast: str | None = None
    prod_model_reasoning: str | None = None
    prod_model_standard: str | None = None
    prod_model_fast: str | None = None

    _MODEL_DEFAULTS: ClassVar[dict[str, dict[str, str]]] = {
        "development": {
            "reasoning": "openai:gpt-4o",
            "standard": "openai:gpt-4o-mini",
            "fast": "openai:gpt-4o-mini",
        },
        "staging": {
            "reasoning": "openai:gpt-4o",
            "standard": "openai:gpt-4o-mini",
            "fast": "openai:gpt-4o-mini",
        },
        "production": {
            "reasoning": "openai:gpt-4o",
            "standard": "openai:gpt-4o",
            "fast": "openai:gpt-4o-mini",
        },
    }

    def get_model(self, tier: str = "standard") -> str:
        """Resolve the model string for a given tier based on environment.

        Priority: env var override > built-in defaults > default_llm_model fallback.
        """
        env_prefix = "dev" if self.environment in ("development", "staging") else "prod"
        override = getattr(self, f"{env_prefix}_model_{tier}", None)
        if isinstance(override, str) and override:
            return override

        env_defaults = self._MODEL_DEFAULTS.get(self.environment, {})
        resolved = env_defaults.get(tier, self.default_llm_model)
        if isinstance(resolved, str):
            return resolved
        return self.default_llm_model

    # Exa web search
    exa_api_key: str | None = None
    exa_base_url: str = "https://api.exa.ai"

    # Reddit public JSON search
    reddit_base_url: str = "https://www.reddit.com"
    reddit_user_agent: str = "Brandscope/0.1 (brand research; +https://github.com/brandscope)"

    # Applied to every search call; LLM calls use the tier timeouts above
    external_call_timeout_seconds: float = 30.0

    # Relevance gating
    brand_relevance_threshold: int = 70
    brand_fallback_threshold: int = 50
    reddit_relevance_threshold: int = 50

    # Search sizes
    brand_search_num_results: int = 6
    brand_search_early_exit: int = 4
    brand_search_max_results: int = 8
    sizing_num_results: int = 3
    reddit_max_results: int = 10
    reddit_max_subreddits: int = 10
    scorecard_max_threads: int = 5

    # Content handling
    extraction_max_chars: int = 6000
    sizing_max_chars: int = 8000
    summary_min_chars: int = 1000
    summarize_search_results: bool = True

    # Competitor fan-out
    max_competitors: int = 4

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, value: object) -> object:
        """Accept JSON list/string or comma-separated values for CORS_ORIGINS."""
        def normalize(origin: object) -> str:
            return str(origin).strip().strip("'\"")

        if isinstance(value, list):
            return [normalize(origin) for origin in value if normalize(origin)]
        if not isinstance(value, str):
            return value

        raw = value.strip()
        if not raw:
            return []

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            try:
                parsed = literal_eval(raw)
            except (ValueError, SyntaxError):
                parsed = [normalize(origin) for origin in raw.split(",")]
                return [origin for origin in parsed if origin]

        if isinstance(parsed, str):
            parsed = [parsed]
        if isinstance(parsed, tuple | set):
            parsed = list(parsed)
        if not isinstance(parsed, list):
            raise ValueError(
                "CORS_ORIGINS must be a JSON array, JSON string, or comma-separated string.",
            )
        return [normalize(origin) for origin in parsed if normalize(origin)]

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        """Accept level names in any case; blank means unset."""
        if not isinstance(value, str):
            return value
        normalized = value.strip().upper()
        if not normalized:
            return None
        if normalized not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown LOG_LEVEL: {value}")
        return normalized

    @field_validator("api_prefix", mode="before")
    @classmethod
    def _normalize_api_prefix(cls, value: object) -> object:
        """Normalize route prefix values to `/segment` form."""
        if not isinstance(value, str):
            return value
        normalized = value.strip()
        if not normalized or normalized == "/":
            return ""
        return f"/{normalized.strip('/')}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()

    return settings


settings = get_settings()
