# src/browser_manager/settings.py

import os
from typing import Any, Dict, Optional

import platformdirs
import yaml

from browser_manager.constants import (
    APP_NAME,
    BRAVE_RELEASES_URL,
    CHROME_VERSIONS_URL,
    CHROMIUM_FEED_URL,
    CHROMIUM_STORAGE_URL,
    CONFIG_FILE_NAME,
    CONFIG_PATH_ENV_VAR,
    DEFAULT_REQUEST_TIMEOUT,
    EDGE_UPDATES_URL,
    FEED_SEARCH_BISECT,
    FEED_SEARCH_LINEAR,
    GITHUB_TOKEN_ENV_VAR,
    PROBE_STRATEGY_NARROW,
    PROBE_STRATEGY_WIDE,
)
from browser_manager.exceptions import ConfigurationError
from browser_manager.log_utils import logger

CONFIG_DIR = platformdirs.user_config_dir(APP_NAME)
CONFIG_FILE = os.path.join(CONFIG_DIR, CONFIG_FILE_NAME)
LOG_DIR = platformdirs.user_log_dir(APP_NAME)

DEFAULT_CONFIG: Dict[str, Any] = {
    "LOG_LEVEL": None,
    "LOG_TO_FILE": False,
    "PROBE_STRATEGY": PROBE_STRATEGY_NARROW,
    "FEED_SEARCH": FEED_SEARCH_LINEAR,
    "REQUEST_TIMEOUT": DEFAULT_REQUEST_TIMEOUT,
    "GITHUB_TOKEN": None,
    "CHROMIUM_FEED_URL": CHROMIUM_FEED_URL,
    "CHROMIUM_STORAGE_URL": CHROMIUM_STORAGE_URL,
    "CHROME_VERSIONS_URL": CHROME_VERSIONS_URL,
    "BRAVE_RELEASES_URL": BRAVE_RELEASES_URL,
    "EDGE_UPDATES_URL": EDGE_UPDATES_URL,
}

_CHOICES = {
    "PROBE_STRATEGY": (PROBE_STRATEGY_NARROW, PROBE_STRATEGY_WIDE),
    "FEED_SEARCH": (FEED_SEARCH_LINEAR, FEED_SEARCH_BISECT),
}


def get_config_path() -> str:
    """
    Return the configuration file path, honouring BROWSER_MANAGER_CONFIG.
    """
    return os.environ.get(CONFIG_PATH_ENV_VAR) or CONFIG_FILE


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check enumerated and numeric settings, normalising their case and type.

    Raises:
        ConfigurationError: If a value is outside its allowed set or not a positive number.
    """
    for key, allowed in _CHOICES.items():
        value = str(config.get(key, "")).strip().lower()
        if value not in allowed:
            raise ConfigurationError(
                f"Invalid {key}: {config.get(key)!r}",
                f"expected one of {', '.join(allowed)}",
            )
        config[key] = value

    try:
        timeout = float(config["REQUEST_TIMEOUT"])
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"Invalid REQUEST_TIMEOUT: {config['REQUEST_TIMEOUT']!r}"
        ) from exc
    if timeout <= 0:
        raise ConfigurationError(f"REQUEST_TIMEOUT must be positive, got {timeout}")
    config["REQUEST_TIMEOUT"] = timeout
    return config


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the browser-manager YAML configuration merged over DEFAULT_CONFIG.

    A missing file is not an error: the defaults are returned. Unknown keys are
    kept so newer configuration files stay readable. When no GITHUB_TOKEN is
    configured the GITHUB_TOKEN environment variable is used.

    Parameters:
        path (str | None): Explicit file to read; defaults to get_config_path().

    Returns:
        dict: The effective configuration.

    Raises:
        ConfigurationError: If the file cannot be read, is not a YAML mapping,
            or contains invalid values.
    """
    config_path = path or get_config_path()
    config: Dict[str, Any] = dict(DEFAULT_CONFIG)

    if os.path.exists(config_path):
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(
                f"Failed to load configuration from {config_path}", str(exc)
            ) from exc

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Configuration in {config_path} must be a mapping",
                f"got {type(loaded).__name__}",
            )
        logger.debug(f"Loaded configuration from {config_path}")
        config.update({k: v for k, v in loaded.items() if v is not None})
    else:
        logger.debug(f"No configuration at {config_path}; using defaults")

    if not config.get("GITHUB_TOKEN"):
        config["GITHUB_TOKEN"] = os.environ.get(GITHUB_TOKEN_ENV_VAR) or None

    return validate_config(config)
