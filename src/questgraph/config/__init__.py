"""
questgraph.config - Configuration loading and defaults

Configuration comes from three layers, later ones winning:
DEFAULT_CONFIG, a ``.questgraph.toml`` file found by walking up from the
working directory, and ``QUESTGRAPH_<SECTION>_<KEY>`` environment
variables.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".questgraph.toml"
ENV_PREFIX = "QUESTGRAPH_"

DEFAULT_CONFIG: dict[str, Any] = {
    "graph": {
        "default_disciplinary_tags": ["immunology", "dermatology"],
        "default_dimensions": [
            "Scope",
            "Objectives",
            "Constraints",
            "Data Needs",
            "Use Cases",
            "Potential Biases",
            "Knowledge Gaps",
        ],
        "enable_multi_layer": True,
    },
    "hypotheses": {
        "max_hypotheses": 5,
    },
    "export": {
        "default_format": "json",
    },
    "logging": {
        "level": "INFO",
    },
    "server": {
        "name": "questgraph",
        "transport": "stdio",
    },
}


class ConfigError(Exception):
    """Configuration file could not be read or parsed."""


def find_config_file(start_path: Path) -> Path | None:
    """Find ``.questgraph.toml`` in ``start_path`` or any parent directory.

    Args:
        start_path: Directory to start searching from.

    Returns:
        Path to the config file, or None if none exists.
    """
    current = Path(start_path).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge ``override`` onto ``base`` without mutating either.

    Nested tables merge key by key; any other value in ``override``
    replaces the base value outright.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _try_parse_env_value(value: str) -> Any:
    """Parse an environment value into a typed value.

    JSON arrays and objects are decoded, ``true``/``false`` become
    booleans (case-insensitive). Anything else, including malformed
    JSON, is returned unchanged.
    """
    stripped = value.strip()
    if stripped[:1] in ("[", "{"):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            logger.warning("Could not parse %r as JSON, using it as a string", value)
            return value
    lowered = stripped.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return value


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply ``QUESTGRAPH_<SECTION>_<KEY>`` variables to ``config`` in place.

    ``QUESTGRAPH_HYPOTHESES_MAX_HYPOTHESES=3`` sets
    ``config["hypotheses"]["max_hypotheses"]``. Missing sections are
    created. Integer-looking values are converted when the existing value
    is an integer.
    """
    for name, raw in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, _, key = name[len(ENV_PREFIX) :].lower().partition("_")
        if not section or not key:
            continue
        table = config.setdefault(section, {})
        if not isinstance(table, dict):
            logger.warning("Ignoring %s: [%s] is not a table", name, section)
            continue
        value = _try_parse_env_value(raw)
        if isinstance(table.get(key), int) and not isinstance(table.get(key), bool):
            try:
                value = int(value)
            except (TypeError, ValueError):
                logger.warning("Ignoring %s: expected an integer, got %r", name, raw)
                continue
        table[key] = value
        logger.debug("Config override from %s: %s.%s", name, section, key)
    return config


def load_config(config_path: Path) -> dict[str, Any]:
    """Load a TOML config file merged over DEFAULT_CONFIG.

    Args:
        config_path: Path to the ``.questgraph.toml`` file.

    Returns:
        The merged configuration dict.

    Raises:
        ConfigError: If the file cannot be read or is not valid TOML.
    """
    try:
        text = Path(config_path).read_text(encoding="utf-8")
        user_config = tomlkit.parse(text).unwrap()
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e
    except TOMLKitError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
    return merge_configs(DEFAULT_CONFIG, user_config)


def get_config(
    start_path: Path | None = None,
    config_path: Path | None = None,
) -> dict[str, Any]:
    """Resolve the effective configuration.

    Args:
        start_path: Directory to search from (defaults to the cwd).
        config_path: Explicit config file, skipping discovery.

    Returns:
        Defaults, merged with the file (if any), with env overrides applied.
    """
    path = config_path or find_config_file(start_path or Path.cwd())
    if path is not None:
        logger.debug("Loading config from %s", path)
        config = load_config(path)
    else:
        config = copy.deepcopy(DEFAULT_CONFIG)
    return _apply_env_overrides(config)


def config_to_toml(config: dict[str, Any]) -> str:
    """Render a config dict as TOML text."""
    return tomlkit.dumps(config)


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_CONFIG",
    "config_to_toml",
    "find_config_file",
    "get_config",
    "load_config",
    "merge_configs",
]
