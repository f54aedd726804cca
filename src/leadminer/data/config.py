"""
LeadMiner Configuration Module
==============================

Centralized configuration management using environment variables.
Supports both .env files and system environment variables.

Environment Variables:
    APIFY_TOKEN: Apify API token (required for live scraping only)
    SEARCH_QUERY: Business search query (default: restaurants)
    SEARCH_LOCATION: Search location (default: New York, NY)
    MAX_RESULTS: Max places per provider (default: 50)
    BAD_RATING_THRESHOLD: Keep businesses rated at or below (default: 3.0)
    APIFY_MAX_WAIT: Max seconds to wait for an actor run (default: 300)

    LEADMINER_OUTPUT_DIR: Directory for generated artifacts (default: output)
    TOP_LEADS_COUNT: Leads saved to top-leads.json (default: 10)
    DIGEST_TOP_COUNT: Leads listed in the digest (default: 5)

    LEADMINER_WEBHOOK_URL: Digest webhook (fallback: WHATSAPP_WEBHOOK_URL)
    WEBHOOK_TIMEOUT: Webhook request timeout in seconds (default: 10)

    LOG_LEVEL / LOG_FILE / LOG_JSON: Logging options
    DEMO_MODE: "1" or "true" to use the synthetic generator
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Load environment variables from .env file if present
env_path = Path(__file__).parent.parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)
else:
    load_dotenv()


def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """
    Get environment variable with optional default and required validation.

    Raises:
        ValueError: If required=True and variable is not set
    """
    value = os.getenv(key, default)
    if required and value is None:
        raise ValueError(f"Required environment variable '{key}' is not set")
    return value


def get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be an integer, got: {value}")


def get_env_float(key: str, default: float) -> float:
    """Get environment variable as float."""
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be a float, got: {value}")


def get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as boolean."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


@dataclass
class ApifyConfig:
    """Scraping provider configuration."""

    token: Optional[str] = field(default_factory=lambda: get_env("APIFY_TOKEN"))
    query: str = field(default_factory=lambda: get_env("SEARCH_QUERY", "restaurants"))
    location: str = field(default_factory=lambda: get_env("SEARCH_LOCATION", "New York, NY"))
    max_results: int = field(default_factory=lambda: get_env_int("MAX_RESULTS", 50))

    # Only businesses rated at or below this are kept as leads
    bad_rating_threshold: float = field(
        default_factory=lambda: get_env_float("BAD_RATING_THRESHOLD", 3.0)
    )
    max_wait_seconds: int = field(default_factory=lambda: get_env_int("APIFY_MAX_WAIT", 300))

    def __post_init__(self):
        """Validate configuration."""
        if self.max_results <= 0:
            raise ValueError("max_results must be positive")

    @property
    def is_configured(self) -> bool:
        return bool(self.token)


@dataclass
class OutputConfig:
    """Artifact output configuration."""

    output_dir: Path = field(
        default_factory=lambda: Path(get_env("LEADMINER_OUTPUT_DIR", "output"))
    )
    top_leads_count: int = field(default_factory=lambda: get_env_int("TOP_LEADS_COUNT", 10))
    digest_top_count: int = field(default_factory=lambda: get_env_int("DIGEST_TOP_COUNT", 5))

    def __post_init__(self):
        """Validate configuration."""
        self.output_dir = Path(self.output_dir)
        if self.top_leads_count <= 0 or self.digest_top_count <= 0:
            raise ValueError("top_leads_count and digest_top_count must be positive")


@dataclass
class NotificationConfig:
    """Digest delivery configuration."""

    webhook_url: str = field(
        default_factory=lambda: get_env(
            "LEADMINER_WEBHOOK_URL", get_env("WHATSAPP_WEBHOOK_URL", "")
        )
    )
    timeout: int = field(default_factory=lambda: get_env_int("WEBHOOK_TIMEOUT", 10))


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: get_env("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: get_env("LOG_FILE"))

    # Structured logging
    json_logs: bool = field(default_factory=lambda: get_env_bool("LOG_JSON", False))


@dataclass
class Settings:
    """Main application settings container."""

    apify: ApifyConfig = field(default_factory=ApifyConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Application metadata
    app_name: str = "leadminer"
    app_version: str = "1.0.0"
    demo_mode: bool = field(default_factory=lambda: get_env_bool("DEMO_MODE", False))


def load_settings() -> Settings:
    """
    Load and validate all application settings.

    Raises:
        ValueError: If configuration is invalid
    """
    return Settings()


# Global settings instance (lazy-loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None
