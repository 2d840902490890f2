import logging
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_GROUPS_PATH = PACKAGE_DIR / "data" / "groups.yaml"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Source pages
    ietf_base_url: str = Field(
        "https://datatracker.ietf.org/group/",
        description="Datatracker page listing the IETF group types.",
    )
    irtf_base_url: str = Field(
        "https://www.irtf.org/groups.html",
        description="IRTF page listing the research groups.",
    )

    # HTTP behaviour
    request_timeout: float = Field(
        30.0, gt=0, description="Per-request timeout in seconds."
    )
    max_attempts: int = Field(
        1,
        ge=1,
        le=10,
        description="Attempts per page fetch (1 means a single best-effort try).",
    )
    detail_concurrency: int = Field(
        1,
        ge=1,
        le=32,
        description="How many group detail pages may be fetched at once.",
    )
    user_agent: str = Field(
        "Mozilla/5.0 (compatible; ietf-groups/0.1; +https://datatracker.ietf.org)",
        description="User-Agent header sent with every request.",
    )

    # Storage
    groups_path: Path = Field(
        DEFAULT_GROUPS_PATH,
        description="Snapshot file loaded by the query API.",
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_prefix="IETF_GROUPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in LOG_LEVELS:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
