"""
Application configuration with Pydantic Settings for validation and type safety.
Supports environment-specific configurations and .env file loading.
"""

from enum import Enum
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Environment(str, Enum):
    """Application environment types"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class StorageBackend(str, Enum):
    """Entity store implementations selectable at process start"""

    MEMORY = "memory"
    DATABASE = "database"


class ExtractionStrategy(str, Enum):
    """How receipt content is requested from the vision model"""

    STRUCTURED = "structured"
    TEXT = "text"
    AUTO = "auto"


class Settings(BaseSettings):
    """
    Application settings with validation.
    Settings are loaded from environment variables or .env file.
    """

    # Application settings
    app_name: str = Field(default="FreshTrack", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=5000, ge=1, le=65535, description="Server port")

    # Storage settings
    storage_backend: StorageBackend = Field(
        default=StorageBackend.DATABASE, description="Entity store implementation"
    )
    database_url: str = Field(
        default="sqlite:///./freshtrack.db",
        description="SQLAlchemy connection URL for the durable store",
    )
    db_echo: bool = Field(default=False, description="SQLAlchemy echo SQL statements")
    db_init_attempts: int = Field(
        default=5, ge=1, description="Database initialization retry attempts"
    )
    db_init_delay_sec: float = Field(
        default=5.0, ge=0, description="Delay between DB init attempts"
    )

    # Session settings
    session_secret: str = Field(
        default="change-me", description="Secret used to sign session cookies"
    )
    session_cookie_name: str = Field(default="freshtrack_session")
    session_max_age_sec: int = Field(
        default=24 * 60 * 60, ge=60, description="Session lifetime in seconds"
    )

    # Receipt extraction
    openai_api_key: str = Field(default="", description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o", description="Vision model name")
    openai_base_url: str | None = Field(
        default=None, description="Override for OpenAI-compatible endpoints"
    )
    extraction_strategy: ExtractionStrategy = Field(
        default=ExtractionStrategy.AUTO,
        description="structured (JSON mode), text (line parsing) or auto",
    )
    extraction_timeout_sec: float = Field(
        default=60.0, gt=0, description="Upper bound for one extraction call"
    )
    extraction_max_tokens: int = Field(default=1500, ge=64)
    max_upload_bytes: int = Field(
        default=5 * 1024 * 1024, ge=1, description="Receipt image size cap"
    )

    # Inventory policy
    default_unit: str = Field(
        default="pieces", description="Unit for reconciled items without one"
    )
    default_expiry_days: int = Field(
        default=7, ge=0, description="Expiry horizon for reconciled items"
    )
    top_value_limit: int = Field(default=5, ge=1)
    low_stock_threshold: int = Field(default=1, ge=0)

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format string",
    )

    # CORS settings
    cors_origins: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:5000"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow CORS credentials"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"], description="Allowed HTTP methods"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )

    # API settings
    api_prefix: str = Field(default="/api", description="API route prefix")
    api_title: str = Field(
        default="FreshTrack API", description="API documentation title"
    )
    api_description: str = Field(
        default="Perishable inventory tracking with receipt ingestion",
        description="API documentation description",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment value"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator("default_unit")
    @classmethod
    def validate_default_unit(cls, v):
        from domain.enums import Unit

        return Unit(v.lower().strip()).value

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == Environment.DEVELOPMENT


# Global settings instance
settings = Settings()
