"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration management with environment variable override support.

Features:
    - Base file (config/config.yaml) plus environment file (config/<ENV>.yaml)
    - Environment variable override (HEADLESS overrides headless,
      RETRY_BACKOFF_MS overrides retry.backoff_ms)
    - Dot notation path access with default values
    - Typed views for the browser lifecycle and retry layers

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

from .errors import ConfigurationError
from .retry import RetryPolicy


# Default configuration directory (repo root / config)
DEFAULT_CONFIG_DIR = Path(__file__).parent.parent.parent / "config"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"

DEFAULT_TIMEOUT_MS = 30000
DEFAULT_NAVIGATION_TIMEOUT_MS = 30000


class BrowserVariant(str, Enum):
    """Supported browser engines. The first member is the primary one."""

    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"

    @classmethod
    def resolve(cls, name: Optional[str]) -> "BrowserVariant":
        """
        Resolve a configured browser name.

        Unknown or missing names fall back to the primary variant.
        """
        if isinstance(name, cls):
            return name
        if name:
            normalized = str(name).strip().lower()
            for variant in cls:
                if variant.value == normalized:
                    return variant
            logger.warning(
                f"Unknown browser '{name}', falling back to {cls.CHROMIUM.value}"
            )
        return cls.CHROMIUM


def parse_bool(value: Any, default: bool = False) -> bool:
    """Best-effort boolean parse for values that may arrive as strings."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes", "on")


@dataclass(frozen=True)
class BrowserSettings:
    """
    Resolved browser launch settings.

    Attributes:
        browser: Browser engine variant to launch
        headless: Launch without a visible window
        timeout_ms: Default timeout for waits and actions
        navigation_timeout_ms: Timeout for page navigation
        base_url: Application under test
    """
    browser: BrowserVariant = BrowserVariant.CHROMIUM
    headless: bool = False
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
    base_url: str = ""

    def __post_init__(self):
        # Accept plain names ("firefox") the same way configuration does.
        object.__setattr__(self, "browser", BrowserVariant.resolve(self.browser))


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (HEADLESS, BROWSER, RETRY_MAX_ATTEMPTS)
        2. Environment YAML file (config/<ENV>.yaml)
        3. Base YAML file (config/config.yaml)
        4. Default values

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("browser", "chromium")
        'firefox'  # From YAML or env var

        >>> config.get("retry.max_attempts", 3)
        3  # Default value if not configured
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(
        cls,
        config_path: Optional[Path] = None,
        env: Optional[str] = None,
    ) -> "ConfigLoader":
        """
        Singleton pattern - return existing instance if available.

        Configuration is loaded once per process so every execution unit
        sees the same settings.
        """
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(
        self,
        config_path: Optional[Path] = None,
        env: Optional[str] = None,
    ) -> None:
        """
        Initialize configuration loader.

        Args:
            config_path: Path to the base YAML configuration file.
                        Uses DEFAULT_CONFIG_PATH if not specified.
            env: Environment name selecting config/<env>.yaml.
                 Defaults to the ENV environment variable, then "dev".
        """
        if getattr(self, "_initialized", False):
            return

        self._config_path = Path(config_path or DEFAULT_CONFIG_PATH)
        self._env = env or os.getenv("ENV", "dev")
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """Load base configuration and merge the environment file over it."""
        self._config = self._read_yaml(self._config_path)
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )

        env_path = self._config_path.parent / f"{self._env}.yaml"
        if env_path.exists():
            self._config = _deep_merge(self._config, self._read_yaml(env_path))
            logger.debug(f"Merged environment config: {env_path}")

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file {path}: {e}"
            ) from e
        logger.debug(f"Loaded configuration from: {path}")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML config, then default.

        Args:
            key: Dot-notation path (e.g., "retry.backoff_ms")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return self._convert_type(env_value, default)

        value = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None

            if value is None:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get entire configuration section, or an empty dict."""
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    def _convert_type(self, value: str, reference: Any) -> Any:
        """
        Convert string value to match reference type.

        Used for environment variables which are always strings.
        """
        if reference is None:
            return value

        if isinstance(reference, bool):
            return parse_bool(value)
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value

    @classmethod
    def reset(cls) -> None:
        """
        Reset singleton instance.

        Useful for testing when configuration needs to be reloaded
        with different settings.
        """
        cls._instance = None
        cls._config = {}


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """Deep merge two dictionaries, override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_browser_settings(config: Optional[ConfigLoader] = None) -> BrowserSettings:
    """
    Build BrowserSettings from configuration.

    Resolution policy:
        - unknown or missing ``browser`` -> chromium
        - missing or unparsable ``headless`` -> False
    """
    config = config or ConfigLoader()
    return BrowserSettings(
        browser=BrowserVariant.resolve(config.get("browser")),
        headless=parse_bool(config.get("headless"), default=False),
        timeout_ms=int(config.get("timeouts.default_ms", DEFAULT_TIMEOUT_MS)),
        navigation_timeout_ms=int(
            config.get("timeouts.navigation_ms", DEFAULT_NAVIGATION_TIMEOUT_MS)
        ),
        base_url=str(config.get("base_url", "") or "").rstrip("/"),
    )


def load_retry_policy(config: Optional[ConfigLoader] = None) -> RetryPolicy:
    """Build the action RetryPolicy from ``retry.max_attempts``/``retry.backoff_ms``."""
    config = config or ConfigLoader()
    max_attempts = int(config.get("retry.max_attempts", RetryPolicy.max_attempts))
    backoff_ms = float(
        config.get("retry.backoff_ms", RetryPolicy.backoff_delay * 1000)
    )
    return RetryPolicy(max_attempts=max_attempts, backoff_delay=backoff_ms / 1000.0)


__all__ = [
    "BrowserSettings",
    "BrowserVariant",
    "ConfigLoader",
    "load_browser_settings",
    "load_retry_policy",
    "parse_bool",
]
