from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_name: str = "Align"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Database
    database_url: str = ""  # Loaded from environment, validated in model_validator
    database_echo: bool = False
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_pool_recycle: int = 1800

    # Security
    secret_key: str = ""  # Loaded from environment, validated in model_validator
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours
    session_cookie_name: str = "align_session"

    # CORS - comma-separated list of allowed origins
    allowed_origins: str = "http://localhost:3000,http://app.localhost:3000"
    max_request_size: int = 1024 * 1024  # 1MB

    # Language model
    llm_provider: str = "azure"  # Options: "azure", "openai"
    llm_api_key: str | None = None
    azure_resource_name: str | None = None
    azure_endpoint: str | None = None  # Overrides the resource-name derived endpoint
    azure_api_version: str = "2025-01-01-preview"
    llm_model: str = "gpt-5-chat"  # Azure deployment name or OpenAI model
    openai_base_url: str | None = None
    llm_timeout_seconds: float = 30.0
    llm_max_output_tokens: int | None = None
    llm_temperature: float | None = None

    # Context window sent to the model (0 disables a bound)
    context_max_messages: int = 40
    context_max_chars: int = 24000

    # Routing gate
    app_subdomain: str = "app"
    app_path_prefix: str = "/app"
    app_entry_path: str = "/app"
    app_dashboard_path: str = "/app/dashboard"
    app_public_paths: str = "/app"  # comma-separated, exact matches

    # OpenTelemetry Distributed Tracing
    telemetry_enabled: bool = True  # Enable/disable distributed tracing
    telemetry_exporter: str = "console"  # Options: "console", "otlp", "none"
    telemetry_otlp_endpoint: str | None = None  # e.g., "http://localhost:4317"
    telemetry_sample_rate: float = 1.0  # Sampling rate (0.0-1.0, 1.0 = 100%)

    @model_validator(mode="after")
    def validate_required_config(self) -> "Settings":
        """Validate required fields and the language model provider"""
        if not self.database_url:
            raise ValueError("DATABASE_URL is required. Set in environment or .env file.")
        if not self.secret_key:
            raise ValueError("SECRET_KEY is required. Generate with: openssl rand -hex 32")

        if self.llm_provider not in ("azure", "openai"):
            raise ValueError(
                f"Invalid llm_provider '{self.llm_provider}'. "
                f"Must be one of: 'azure', 'openai'"
            )
        if self.llm_timeout_seconds <= 0:
            raise ValueError("llm_timeout_seconds must be positive")
        if self.context_max_messages < 0 or self.context_max_chars < 0:
            raise ValueError("Context window limits must be >= 0 (0 disables a bound)")
        return self

    @property
    def public_app_paths(self) -> frozenset[str]:
        return frozenset(
            path.strip().rstrip("/") or "/"
            for path in self.app_public_paths.split(",")
            if path.strip()
        )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="allow", case_sensitive=False
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
