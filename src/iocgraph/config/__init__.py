"""
iocgraph.config - Configuration loading and defaults
"""

from iocgraph.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG
from iocgraph.config.loader import (
    ConfigError,
    find_config_file,
    load_config,
    merge_configs,
    parse_toml,
    parse_toml_document,
)

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_CONFIG",
    "find_config_file",
    "load_config",
    "merge_configs",
    "parse_toml",
    "parse_toml_document",
]
