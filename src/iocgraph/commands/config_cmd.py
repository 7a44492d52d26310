"""
iocgraph.commands.config_cmd - Inspect configuration.

Subcommands:
- path: Show which config file is in effect
- show: Print the merged configuration as TOML
"""

import argparse
import sys
from pathlib import Path

import tomlkit

from iocgraph.config import ConfigError, find_config_file, load_config


def run(args: argparse.Namespace) -> int:
    """Run the config command."""
    if args.config_action == "path":
        return run_path(args)
    elif args.config_action == "show":
        return run_show(args)

    print("Usage: iocgraph config {path|show}")
    return 1


def run_path(args: argparse.Namespace) -> int:
    """Print the config file path, or a note that defaults are in use."""
    config_path = args.config or find_config_file(Path.cwd())
    if config_path is None:
        print("No .iocgraph.toml found; using defaults")
    else:
        print(config_path)
    return 0


def run_show(args: argparse.Namespace) -> int:
    """Print the effective configuration."""
    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    print(tomlkit.dumps(config), end="")
    return 0
