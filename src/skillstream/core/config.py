"""Server configuration.

Loads from ~/.skillstream/config.yaml with environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from . import defaults as D

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Credentials are read from the environment only (never from the YAML file)
_CREDENTIAL_ENV = {
    "deepseek_api_key": "DEEPSEEK_API_KEY",
    "qwen_api_key": "QWEN_API_KEY",
    "openai_api_key": "OPENAI_API_KEY",
    "anthropic_api_key": "ANTHROPIC_API_KEY",
}


@dataclass
class AppConfig:
    """Configuration for the chat server and its upstream providers."""

    host: str = D.DEFAULT_HOST
    port: int = D.DEFAULT_PORT
    log_level: str = D.DEFAULT_LOG_LEVEL
    cors_origins: list[str] = field(default_factory=lambda: D.DEFAULT_CORS_ORIGINS.copy())

    # Upstream credentials
    deepseek_api_key: str = ""
    qwen_api_key: str = ""
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # Upstream endpoints
    text_api_url: str = D.DEFAULT_TEXT_API_URL
    text_model: str = D.DEFAULT_TEXT_MODEL
    vision_api_url: str = D.DEFAULT_VISION_API_URL
    vision_model: str = D.DEFAULT_VISION_MODEL
    request_timeout: float = D.DEFAULT_REQUEST_TIMEOUT
    retry_attempts: int = D.DEFAULT_RETRY_ATTEMPTS
    retry_delay: float = D.DEFAULT_RETRY_DELAY

    # Tasks & tools
    max_tasks: int = D.DEFAULT_MAX_TASKS
    tool_cache_ttl: float = D.DEFAULT_TOOL_CACHE_TTL

    CONFIG_FILE: Path = field(
        default_factory=lambda: Path.home() / ".skillstream" / "config.yaml",
        repr=False,
    )

    @classmethod
    def load(cls, config_path: Path | None = None) -> AppConfig:
        """Load config from file and environment variables.

        Priority (highest wins):
          1. Environment variables (DEEPSEEK_API_KEY, SKILLSTREAM_PORT, etc.)
          2. Config file (~/.skillstream/config.yaml or custom path)
          3. Defaults

        Args:
            config_path: Optional path to a YAML config file.

        Returns:
            Populated AppConfig instance.
        """
        config = cls()
        file_path = config_path or config.CONFIG_FILE

        if file_path.exists():
            try:
                with open(file_path) as f:
                    data = yaml.safe_load(f) or {}
                config._merge(data)
            except (yaml.YAMLError, OSError, ValueError) as e:
                logger.warning("Ignoring unreadable config file %s: %s", file_path, e)

        for attr, env_name in _CREDENTIAL_ENV.items():
            setattr(config, attr, os.environ.get(env_name, getattr(config, attr)))

        config.host = os.environ.get("SKILLSTREAM_HOST", config.host)
        config.log_level = os.environ.get("SKILLSTREAM_LOG_LEVEL", config.log_level)
        config.text_model = os.environ.get("SKILLSTREAM_TEXT_MODEL", config.text_model)
        config.vision_model = os.environ.get("SKILLSTREAM_VISION_MODEL", config.vision_model)

        if env_port := os.environ.get("SKILLSTREAM_PORT"):
            config.port = int(env_port)
        if env_timeout := os.environ.get("SKILLSTREAM_REQUEST_TIMEOUT"):
            config.request_timeout = float(env_timeout)
        if origins := os.environ.get("SKILLSTREAM_CORS_ORIGINS"):
            config.cors_origins = [o.strip() for o in origins.split(",") if o.strip()]

        return config

    def _merge(self, data: dict) -> None:
        """Apply non-credential settings from a parsed YAML mapping."""
        self.host = data.get("host", self.host)
        self.port = int(data.get("port", self.port))
        self.log_level = data.get("log_level", self.log_level)
        self.text_api_url = data.get("text_api_url", self.text_api_url)
        self.text_model = data.get("text_model", self.text_model)
        self.vision_api_url = data.get("vision_api_url", self.vision_api_url)
        self.vision_model = data.get("vision_model", self.vision_model)
        self.request_timeout = float(data.get("request_timeout", self.request_timeout))
        self.retry_attempts = int(data.get("retry_attempts", self.retry_attempts))
        self.retry_delay = float(data.get("retry_delay", self.retry_delay))
        self.max_tasks = int(data.get("max_tasks", self.max_tasks))
        self.tool_cache_ttl = float(data.get("tool_cache_ttl", self.tool_cache_ttl))
        if "cors_origins" in data:
            self.cors_origins = list(data["cors_origins"])

    def features(self) -> dict[str, bool]:
        """Which upstream providers have a credential configured."""
        return {
            "deepseek": bool(self.deepseek_api_key),
            "qwen": bool(self.qwen_api_key),
            "openai": bool(self.openai_api_key),
            "anthropic": bool(self.anthropic_api_key),
        }


def configure_logging(level: str = D.DEFAULT_LOG_LEVEL) -> None:
    """Install the process-wide log format at the given level name."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
