"""Application configuration using Pydantic v2 Settings.

Centralized configuration that loads from environment variables
and provides type-safe access to the UI and its API client.
"""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Backend API
    api_base_url: str = Field(
        default="http://localhost:8080/api",
        description="Base URL of the prompt template backend API.",
    )

    # Catalog
    default_category: str | None = Field(
        default=None,
        description="Category the template catalog is scoped to on first load.",
    )
    page_size: int = Field(
        default=20,
        ge=1,
        description="Number of templates requested per catalog page.",
    )

    # Generate view
    copied_indicator_seconds: float = Field(
        default=2.0,
        gt=0,
        description="How long the 'copied' indicator stays visible after a copy.",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR.",
    )
    log_dir: Path = Field(
        default=Path("./logs"),
        description="Directory for info.log and error.log.",
    )

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Drop trailing slashes so paths can be joined with a leading one."""
        return v.rstrip("/")

    @field_validator("default_category")
    @classmethod
    def blank_category_is_none(cls, v: str | None) -> str | None:
        """Treat an empty category as no category filter."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Normalize log level to uppercase."""
        return v.upper()

    def configure_logging(self) -> None:
        """Configure global logging based on settings."""
        import structlog

        level = getattr(logging, self.log_level, logging.INFO)

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            level=level,
        )

        logger.setLevel(level)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global Settings instance.

    Returns:
        The singleton Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.configure_logging()
    return _settings


def reset_settings() -> None:
    """Drop the cached Settings instance so the next call re-reads the environment."""
    global _settings
    _settings = None
