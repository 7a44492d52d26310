"""
iocgraph.config.loader - Configuration file discovery and loading.

Configuration lives in ``.iocgraph.toml`` (parsed with tomlkit), is merged
over ``DEFAULT_CONFIG`` and finally overridden by ``IOCGRAPH_<SECTION>_<KEY>``
environment variables.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from iocgraph.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG, ENV_PREFIX

OUTPUT_FORMATS = ("text", "json")


class ConfigError(ValueError):
    """Raised when a configuration file or value is malformed."""


def parse_toml_document(text: str) -> tomlkit.TOMLDocument:
    """Parse TOML text into a format-preserving tomlkit document.

    Raises:
        ConfigError: If the text is not valid TOML.
    """
    try:
        return tomlkit.parse(text)
    except TOMLKitError as e:
        raise ConfigError(f"Invalid TOML: {e}") from e


def parse_toml(text: str) -> dict[str, Any]:
    """Parse TOML text into plain Python containers."""
    return parse_toml_document(text).unwrap()


def find_config_file(start_dir: Path) -> Path | None:
    """Find ``.iocgraph.toml`` in ``start_dir`` or any parent directory.

    Args:
        start_dir: Directory to start searching from

    Returns:
        Path to the config file, or None if not found
    """
    current = Path(start_dir).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge ``override`` into a copy of ``base``.

    Nested tables merge key by key; any other value in ``override``
    replaces the one in ``base``.
    """
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _try_parse_env_value(value: str) -> Any:
    """Interpret an environment value as JSON list/object, boolean, or string."""
    stripped = value.strip()
    if stripped.lower() == "true":
        return True
    if stripped.lower() == "false":
        return False
    if stripped.startswith(("[", "{")):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return value
    return value


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply ``IOCGRAPH_<SECTION>_<KEY>`` environment overrides in place.

    ``IOCGRAPH_EDGES_LABEL_FIELDS='["label"]'`` sets ``edges.label_fields``.
    """
    for name, raw_value in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, _, key = name[len(ENV_PREFIX) :].lower().partition("_")
        if not section or not key:
            continue
        table = config.setdefault(section, {})
        if not isinstance(table, dict):
            continue
        table[key] = _try_parse_env_value(raw_value)
    return config


def _table(config: dict[str, Any], name: str) -> dict[str, Any]:
    table = config.get(name, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[{name}] must be a table")
    return table


def _validate(config: dict[str, Any]) -> None:
    """Check the shape of the values the rest of the package reads."""
    edges = _table(config, "edges")
    for key in ("from_fields", "to_fields", "label_fields"):
        fields = edges.get(key)
        if not isinstance(fields, list) or not all(isinstance(f, str) and f for f in fields):
            raise ConfigError(f"edges.{key} must be a list of non-empty strings")
    if not edges["from_fields"] or not edges["to_fields"]:
        raise ConfigError("edges.from_fields and edges.to_fields must not be empty")

    formats = _table(config, "timeline").get("formats")
    if not isinstance(formats, list) or not all(isinstance(f, str) for f in formats):
        raise ConfigError("timeline.formats must be a list of strings")

    output_format = _table(config, "output").get("format")
    if output_format not in OUTPUT_FORMATS:
        raise ConfigError(
            f"output.format must be one of {', '.join(OUTPUT_FORMATS)}, got {output_format!r}"
        )


def load_config(config_path: Path | None = None, start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration merged over the defaults.

    Args:
        config_path: Explicit config file; searched for when omitted
        start_dir: Directory to search from (defaults to the working directory)

    Returns:
        Configuration dictionary

    Raises:
        ConfigError: If the file is unreadable, invalid TOML, or has bad values.
    """
    if config_path is None:
        config_path = find_config_file(start_dir or Path.cwd())

    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path is not None:
        try:
            text = Path(config_path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
        config = merge_configs(config, parse_toml(text))

    config = _apply_env_overrides(config)
    _validate(config)
    return config
