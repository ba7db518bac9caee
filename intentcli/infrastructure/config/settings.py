"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a YAML
configuration file (~/.intentcli/config.yaml). Also builds the typed
objects the composition root needs: per-service resilience policy and the
default user profile.
"""

import logging
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from intentcli.domain.models.service import ServiceConfig, UserProfile

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".intentcli"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_CACHE_DIR = DEFAULT_CONFIG_DIR / "api_cache"
ENV_FILE_NAME = ".env"

# Built-in service policies, overridable under services.<name>.*
SERVICE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "weather": {"cache_ttl": 3600, "retry_attempts": 3, "retry_delay": 1.0, "timeout": 8.0},
}

_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None) -> None:
    """Loads configuration from the YAML file and the .env file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    if config_file.exists():
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(yaml_config)
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: real environment variables take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (path not found).")

    _loaded = True
    logger.info("Configuration loading process completed.")


def reset_configuration() -> None:
    """Forgets loaded configuration so the next load starts fresh."""
    global _config, _loaded
    _config = {}
    _loaded = False


def _coerce(value: str) -> Any:
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        return float(value) if "." in value else int(value)
    except ValueError:
        return value


def _lookup_yaml(key: str) -> Any:
    """Finds ``key`` as a flat key or as a dotted path into nested mappings."""
    if key in _config:
        return _config[key]
    node: Any = _config
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable (INTENTCLI_ prefixed, then bare; dots become underscores)
    3. YAML config (flat or dotted path)
    4. Default value

    Args:
        key: The configuration key (e.g., 'services.weather.timeout')
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = key.upper().replace(".", "_")
    for candidate in (f"INTENTCLI_{env_key}", env_key):
        if candidate in os.environ:
            return _coerce(os.environ[candidate])

    value = _lookup_yaml(key)
    if value is not None:
        return value

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


# --- Convenience Functions ---

def get_service_config(service_name: str) -> ServiceConfig:
    """Builds the resilience policy for ``service_name``."""
    defaults = {**asdict(ServiceConfig()), **SERVICE_DEFAULTS.get(service_name, {})}
    prefix = f"services.{service_name}"
    return ServiceConfig(
        cache_enabled=bool(get_config(f"{prefix}.cache_enabled", defaults["cache_enabled"])),
        cache_ttl=float(get_config(f"{prefix}.cache_ttl", defaults["cache_ttl"])),
        retry_attempts=int(get_config(f"{prefix}.retry_attempts", defaults["retry_attempts"])),
        retry_delay=float(get_config(f"{prefix}.retry_delay", defaults["retry_delay"])),
        timeout=float(get_config(f"{prefix}.timeout", defaults["timeout"])),
    )


def get_user_profile() -> Optional[UserProfile]:
    """Builds the default user profile from ``profile.*`` keys, if any are set."""
    city = get_config("profile.city")
    tz = get_config("profile.timezone")
    unit = get_config("profile.temperature_unit")
    if city is None and tz is None and unit is None:
        return None
    return UserProfile(city=city, timezone=tz, temperature_unit=unit)


def get_cache_dir() -> Optional[Path]:
    """Disk cache directory; an empty value disables the disk level."""
    value = get_config("cache.dir", str(DEFAULT_CACHE_DIR))
    return Path(value).expanduser() if value else None


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
