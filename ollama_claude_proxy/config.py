"""
Proxy configuration.

Values come from, lowest priority first: built-in defaults, an optional JSON
config file, a .env file, and the process environment.
"""
import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

logger = logging.getLogger(__name__)

# uvicorn's level names. "trace" maps to INFO for the root logger.
LOG_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")

# Key names used by older config files, mapped to the current field names.
LEGACY_FILE_KEYS = {
    "api_key": "anthropic_api_key",
    "api_version": "claude_api_version",
    "api_endpoint": "claude_api_endpoint",
    "system_prompt": "claude_system_prompt",
    "default_model": "claude_default_model",
}


class Settings(BaseSettings):
    """Service settings. Built once at startup and never mutated."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        validate_default=True,
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Claude API
    anthropic_api_key: str = ""
    claude_api_version: str = "2023-06-01"
    claude_api_endpoint: str = "https://api.anthropic.com/v1/messages"
    claude_system_prompt: str = "You are Claude, an AI assistant by Anthropic."
    claude_default_model: str = "claude-3-5-sonnet-20240620"
    request_timeout_secs: float = 60.0

    # Logging
    log_level: str = "info"
    log_path: str = ""  # e.g. /var/log/ollama-claude-proxy.log

    @field_validator("anthropic_api_key")
    @classmethod
    def _require_api_key(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("API key is required (set ANTHROPIC_API_KEY)")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().lower()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"unknown log level {value!r}, expected one of: {', '.join(LOG_LEVELS)}"
            )
        return level

    @field_validator("request_timeout_secs")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request timeout must be positive")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Constructor kwargs carry the config file values, so they rank
        # below the environment.
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def _read_config_file(config_path: Union[str, Path]) -> dict[str, Any]:
    path = Path(config_path).expanduser().resolve()
    try:
        with open(path) as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"failed to open config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"failed to parse config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")

    for legacy, field_name in LEGACY_FILE_KEYS.items():
        if legacy in data:
            value = data.pop(legacy)
            data.setdefault(field_name, value)

    logger.info("Loaded configuration from %s", path)
    return data


def load_settings(
    config_path: Optional[Union[str, Path]] = None,
    env_file: Optional[Union[str, Path]] = ".env",
) -> Settings:
    """
    Load and validate settings.

    Args:
        config_path: Optional JSON file keyed by Settings field names (the
                     older api_key, system_prompt, ... names also work)
        env_file: .env file to read, or None to skip it

    Returns:
        Validated Settings

    Raises:
        ConfigError if the file cannot be read or validation fails
    """
    file_values = _read_config_file(config_path) if config_path else {}

    try:
        return Settings(_env_file=env_file, **file_values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(problems) from e
