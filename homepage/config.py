"""
Configuration management for the homepage service.
Loads and validates configuration from YAML files using Pydantic.
"""

import os
import logging
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ConfigDict, field_validator


logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent

# The only identity allowed to receive informative replies
DEFAULT_OWNER = "MorganGallant"


class ServerConfig(BaseModel):
    """HTTP server configuration."""
    model_config = ConfigDict(extra='forbid')

    host: str = Field(
        default="0.0.0.0",
        description="Host to bind to"
    )
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Port to bind to"
    )
    log_level: str = Field(
        default="info",
        description="Uvicorn log level"
    )
    shutdown_grace_seconds: int = Field(
        default=3,
        ge=0,
        le=60,
        description="Time given to in-flight responses on shutdown"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['critical', 'error', 'warning', 'info', 'debug', 'trace']
        if v.lower() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.lower()


class StoreConfig(BaseModel):
    """Chat directory storage configuration."""
    model_config = ConfigDict(extra='forbid')

    backend: Literal["sqlite", "redis"] = Field(
        default="sqlite",
        description="Key-value store backend"
    )
    path: str = Field(
        default="data",
        description="Directory holding the embedded store"
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL, used by the redis backend"
    )


class TelegramConfig(BaseModel):
    """Messaging gateway configuration."""
    model_config = ConfigDict(extra='forbid')

    api_key: str = Field(
        default="",
        description="Bot API key, usually provided through TELEGRAM_KEY"
    )
    api_base_url: str = Field(
        default="https://api.telegram.org",
        description="Bot API base URL"
    )
    owner: str = Field(
        default=DEFAULT_OWNER,
        min_length=1,
        description="Username of the site owner"
    )
    webhook_secret: Optional[str] = Field(
        default=None,
        description="Expected X-Telegram-Bot-Api-Secret-Token header value"
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        le=120.0,
        description="Gateway request timeout in seconds"
    )


class ContentConfig(BaseModel):
    """Bundled content trees and rendering options."""
    model_config = ConfigDict(extra='forbid')

    writing_dir: str = Field(
        default=str(PACKAGE_DIR / "writing"),
        description="Directory with YYYY-MM-DD.md post documents"
    )
    templates_dir: str = Field(
        default=str(PACKAGE_DIR / "templates"),
        description="Directory with view templates and base.html"
    )
    static_dir: str = Field(
        default=str(PACKAGE_DIR / "static"),
        description="Directory with static assets"
    )
    recent_posts: int = Field(
        default=3,
        ge=0,
        description="Number of posts shown on the home page"
    )
    feed_description_chars: int = Field(
        default=100,
        ge=1,
        description="Length of the plain-text description in feed items"
    )


class SiteConfig(BaseModel):
    """Site metadata used by the syndication feed."""
    model_config = ConfigDict(extra='forbid')

    title: str = Field(default="Writing")
    url: str = Field(default="http://localhost:8080")
    description: str = Field(default="Blog posts")

    @field_validator('url')
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip('/')


class UrlCheckConfig(BaseModel):
    """A scheduled responsiveness check of an external URL."""
    model_config = ConfigDict(extra='forbid')

    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    schedule: str = Field(default="@every 1d")


class JobsConfig(BaseModel):
    """Scheduled jobs configuration."""
    model_config = ConfigDict(extra='forbid')

    check_timeout: float = Field(
        default=10.0,
        gt=0,
        le=120.0,
        description="Timeout for URL checks in seconds"
    )
    url_checks: List[UrlCheckConfig] = Field(default_factory=list)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    model_config = ConfigDict(extra='forbid')

    level: str = Field(
        default="INFO",
        description="Logging level"
    )
    json_format: bool = Field(
        default=False,
        description="Enable JSON log formatting"
    )
    enable_correlation: bool = Field(
        default=False,
        description="Enable correlation IDs in logs"
    )

    @field_validator('level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()


class AppConfig(BaseModel):
    """Main application configuration."""
    model_config = ConfigDict(extra='forbid')

    server: ServerConfig = Field(default_factory=ServerConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    content: ContentConfig = Field(default_factory=ContentConfig)
    site: SiteConfig = Field(default_factory=SiteConfig)
    jobs: JobsConfig = Field(default_factory=JobsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# Environment variable -> dotted config path
ENV_MAPPINGS = {
    'TELEGRAM_KEY': 'telegram.api_key',
    'TELEGRAM_WEBHOOK_SECRET': 'telegram.webhook_secret',
    'PORT': 'server.port',
    'RAILWAY_VOLUME_MOUNT_PATH': 'store.path',
    'STORE_BACKEND': 'store.backend',
    'REDIS_URL': 'store.redis_url',
    'SITE_URL': 'site.url',
    'LOG_LEVEL': 'logging.level',
    'LOG_JSON': 'logging.json_format',
}


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to config file, defaults to CONFIG_PATH env var or ./config.yml

    Returns:
        Loaded and validated configuration

    Raises:
        ValueError: If the YAML is invalid or validation fails
    """
    if config_path is None:
        config_path = os.getenv('CONFIG_PATH', './config.yml')

    config_file = Path(config_path)

    yaml_data: dict = {}
    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                yaml_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config: {e}")
            raise ValueError(f"Invalid YAML config: {e}") from e
        logger.info(f"Loaded config from: {config_file}")
    else:
        logger.warning(f"Config file not found: {config_file}, using defaults")

    yaml_data = _apply_env_overrides(yaml_data)

    # Pydantic coerces the string overrides to the field types
    config = AppConfig(**yaml_data)

    logger.info(
        "Configuration loaded successfully",
        extra={
            "component": "config",
            "config_file": str(config_file),
            "store_backend": config.store.backend,
            "store_path": config.store.path,
            "server_port": config.server.port,
            "url_checks": len(config.jobs.url_checks)
        }
    )

    return config


def missing_required_vars(config: AppConfig) -> List[str]:
    """
    Return the names of required settings that are still empty.

    Args:
        config: Loaded configuration

    Returns:
        Environment variable names that must be provided
    """
    missing = []
    if not config.telegram.api_key:
        missing.append('TELEGRAM_KEY')
    return missing


def _apply_env_overrides(config_data: dict) -> dict:
    """
    Apply environment variable overrides to config data.

    RAILWAY_ENVIRONMENT=production switches on JSON logging unless LOG_JSON
    is set explicitly.

    Args:
        config_data: Base configuration data

    Returns:
        Configuration data with environment overrides applied
    """
    if os.getenv('RAILWAY_ENVIRONMENT') == 'production' and os.getenv('LOG_JSON') is None:
        _set_nested_value(config_data, 'logging.json_format', 'true')

    for env_var, config_path in ENV_MAPPINGS.items():
        env_value = os.getenv(env_var)
        if env_value is not None:
            _set_nested_value(config_data, config_path, env_value)
            logger.debug(f"Applied env override: {env_var} -> {config_path}")

    return config_data


def _set_nested_value(data: dict, path: str, value: str) -> None:
    """
    Set a nested dictionary value using dot notation.

    Args:
        data: Dictionary to modify
        path: Dot-separated path (e.g., 'store.path')
        value: Raw string value
    """
    keys = path.split('.')
    current = data

    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]

    current[keys[-1]] = value
