"""
Configuration loader with YAML file support and environment variable overrides.

Supports loading from:
1. Default values (defined in settings.py)
2. YAML configuration file
3. Environment variables with the pattern PRODUCT_SCOUT__{SECTION}__{KEY}
4. The recognized flat variables (highest priority):
   INPUT_LINK_HANDLING_WORKERS, HEADLESS_BROWSING_WORKERS,
   LINKS_LIMIT_FOR_HEADLESS_BROWSER

A ``.env`` file in the working directory is loaded into the
environment first, without overriding variables already set.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv

from product_scout.config.settings import Settings
from product_scout.core.exceptions import ConfigurationError
from product_scout.utils.logging import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "PRODUCT_SCOUT"

# Flat variable name -> (section, key)
FLAT_ENV_VARS: dict[str, tuple[str, str]] = {
    "INPUT_LINK_HANDLING_WORKERS": ("batch", "input_link_workers"),
    "HEADLESS_BROWSING_WORKERS": ("crawler", "workers"),
    "LINKS_LIMIT_FOR_HEADLESS_BROWSER": ("crawler", "links_limit"),
}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries, with override taking precedence.

    Args:
        base: Base dictionary to merge into
        override: Dictionary with values to override

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _parse_env_value(value: str) -> Any:
    """
    Parse environment variable string into an int, float, bool, None or str.

    Numbers are tried before booleans so that "1" stays an integer.
    """
    if value.lower() in ("none", "null", ""):
        return None

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    return value


def _parse_positive_int(value: str | None) -> int | None:
    """Return value as a positive int, or None if unset or invalid."""
    if value is None or not value.strip():
        return None
    try:
        parsed = int(value.strip())
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _within_field_bounds(section: str, key: str, value: int) -> bool:
    """Check value against the ge/le constraints declared on the settings field."""
    section_model = Settings.model_fields[section].annotation
    for constraint in section_model.model_fields[key].metadata:
        lower = getattr(constraint, "ge", None)
        upper = getattr(constraint, "le", None)
        if lower is not None and value < lower:
            return False
        if upper is not None and value > upper:
            return False
    return True


def _load_env_overrides(prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """
    Load nested configuration overrides from environment variables.

    For example:
    - PRODUCT_SCOUT__CRAWLER__FRONTIER_CAPACITY=500
    - PRODUCT_SCOUT__LOGGING__LEVEL=DEBUG
    """
    overrides: dict[str, Any] = {}
    prefix_with_sep = f"{prefix}__"

    for key, value in os.environ.items():
        if not key.startswith(prefix_with_sep):
            continue

        key_path = key[len(prefix_with_sep):].lower().split("__")

        if len(key_path) < 2:
            continue

        current = overrides
        for part in key_path[:-1]:
            current = current.setdefault(part, {})

        current[key_path[-1]] = _parse_env_value(value)

    return overrides


def _load_flat_env_overrides() -> dict[str, Any]:
    """
    Load the recognized flat worker/limit variables.

    Unset, non-numeric, non-positive and out-of-range values are
    ignored so the default (or file value) stays in effect.
    """
    overrides: dict[str, Any] = {}

    for env_name, (section, key) in FLAT_ENV_VARS.items():
        raw = os.environ.get(env_name)
        parsed = _parse_positive_int(raw)
        if parsed is not None and not _within_field_bounds(section, key, parsed):
            parsed = None
        if parsed is None:
            if raw is not None and raw.strip():
                logger.debug(f"Ignoring invalid {env_name}={raw!r}, using default")
            continue
        overrides.setdefault(section, {})[key] = parsed

    return overrides


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load configuration from a YAML file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a mapping
    """
    if not path.exists():
        raise ConfigurationError(
            "Configuration file not found", {"path": str(path)})

    try:
        with open(path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML: {e}", {"path": str(path)}) from e

    if content is None:
        return {}

    if not isinstance(content, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping, got: {type(content).__name__}",
            {"path": str(path)},
        )

    return content


def load_config(
    config_path: Path | str | None = None,
    env_prefix: str = ENV_PREFIX,
    load_env_file: bool = True,
) -> Settings:
    """
    Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to YAML configuration file. If None, uses defaults only.
        env_prefix: Prefix for nested environment variables
        load_env_file: Whether to read a ``.env`` file first

    Returns:
        Validated Settings instance

    Raises:
        ConfigurationError: If config_path is given but unusable
        ValidationError: If configuration values are invalid
    """
    if load_env_file:
        load_dotenv(find_dotenv(usecwd=True), override=False)

    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_data = _deep_merge(config_data, _load_yaml_file(Path(config_path)))

    config_data = _deep_merge(config_data, _load_env_overrides(env_prefix))
    config_data = _deep_merge(config_data, _load_flat_env_overrides())

    return Settings(**config_data)
