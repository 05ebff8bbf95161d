"""Configuration loader with YAML parsing, env-var interpolation, and Pydantic validation."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_BOT_ID = "luna-namoradeira"


class AnthropicConfig(BaseModel):
    api_key: str
    base_url: Optional[str] = None
    max_retries: int = 2
    timeout: int = 60


class AIConfig(BaseModel):
    bot_id: str = DEFAULT_BOT_ID
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 2048
    temperature: float = 0.9
    system_prompt: str = ""  # empty = built-in Luna persona
    max_tool_rounds: int = 5
    timezone: str = "America/Sao_Paulo"


class WeatherConfig(BaseModel):
    api_key: Optional[str] = None
    base_url: str = "https://api.openweathermap.org/data/2.5/weather"
    units: str = "metric"
    lang: str = "pt_br"
    timeout: int = 10


class StorageConfig(BaseModel):
    db_path: str = "./data/luna_chat.db"


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 3001
    request_timeout: float = 90.0
    admin_secret: Optional[str] = None
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class AppConfig(BaseModel):
    log_level: str = "INFO"
    data_dir: str = "./data"
    anthropic: AnthropicConfig
    ai: AIConfig = Field(default_factory=AIConfig)
    weather: WeatherConfig = Field(default_factory=WeatherConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


_ENV_VAR_PATTERN = re.compile(r"\$\{(\w+)\}")
_PLACEHOLDER_PATTERN = re.compile(r"^(\$\{\w+\}|your[_-].*|change-?me|SUA_CHAVE_.*)$", re.IGNORECASE)


def _interpolate_env_vars(text: str, extra: dict[str, str] | None = None) -> str:
    """Replace ${VAR_NAME} patterns with environment variable values."""

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        if extra and var_name in extra:
            return extra[var_name]
        value = os.environ.get(var_name)
        if value is None:
            return match.group(0)
        return value

    return _ENV_VAR_PATTERN.sub(_replace, text)


def is_placeholder(value: str | None) -> bool:
    """True for unset secrets: empty, an unresolved ${VAR}, or a template value."""
    if not value or not value.strip():
        return True
    return bool(_PLACEHOLDER_PATTERN.match(value.strip()))


def load_config(config_path: str | Path = "config.yaml", env_path: str | Path = ".env") -> AppConfig:
    """Load and validate configuration from YAML file with env-var interpolation."""
    env_file = Path(env_path)
    if env_file.exists():
        load_dotenv(env_file)

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    raw_text = config_file.read_text(encoding="utf-8")

    # First pass: extract data_dir for self-referencing
    raw_data = yaml.safe_load(raw_text) or {}
    data_dir = raw_data.get("data_dir", "./data")
    data_dir = _interpolate_env_vars(data_dir)

    # Second pass: interpolate all env vars
    interpolated = _interpolate_env_vars(raw_text, extra={"data_dir": data_dir})
    data = yaml.safe_load(interpolated)

    return AppConfig(**data)
