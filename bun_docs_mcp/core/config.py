"""
Configuration loading for the Bun Docs MCP proxy.

Settings come from an optional YAML or JSON file, then environment variables
override individual keys.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import yaml

from bun_docs_mcp.error_handling.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Base URL for the Bun documentation API
BUN_DOCS_API = "https://bun.com/docs/mcp"

# HTTP request timeout in seconds, applied per attempt
REQUEST_TIMEOUT_SECS = 5

DEFAULT_CONFIG: Dict[str, Any] = {
    "api_url": BUN_DOCS_API,
    "timeout": REQUEST_TIMEOUT_SECS,
    "log_level": "INFO",
}

ENV_OVERRIDES = {
    "BUN_DOCS_API_URL": "api_url",
    "BUN_DOCS_TIMEOUT": "timeout",
    "BUN_DOCS_LOG_LEVEL": "log_level",
}

# Shipped as package data; read when no config path is given
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "config.yaml"


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the configuration dictionary.

    Args:
        config_path: Path to a ``.yaml``/``.yml`` or ``.json`` file. The packaged
            ``config/config.yaml`` is read when omitted.

    Returns:
        The merged configuration.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    logger.info(f"Loading configuration from {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                loaded = json.load(f)
            else:
                loaded = yaml.safe_load(f)
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to load configuration from {path}: {e}", original_exception=e)
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    config.update(loaded)

    for env_var, key in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            logger.debug(f"Configuration key '{key}' overridden by {env_var}")
            config[key] = value

    return config


@dataclass(frozen=True)
class ClientConfig:
    """Immutable settings of the backend HTTP client."""
    base_url: httpx.URL
    timeout: float = REQUEST_TIMEOUT_SECS

    @classmethod
    def from_url(cls, url: str, timeout: float = REQUEST_TIMEOUT_SECS) -> "ClientConfig":
        try:
            base_url = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            raise ConfigurationError(f"Invalid base URL: {url}", original_exception=e)
        if base_url.scheme not in ("http", "https") or not base_url.host:
            raise ConfigurationError(f"Invalid base URL: {url}")

        try:
            timeout = float(timeout)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid timeout: {timeout}", original_exception=e)
        if timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {timeout}")

        return cls(base_url=base_url, timeout=timeout)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ClientConfig":
        return cls.from_url(
            config.get("api_url", BUN_DOCS_API),
            config.get("timeout", REQUEST_TIMEOUT_SECS),
        )
