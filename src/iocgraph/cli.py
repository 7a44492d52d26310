"""
iocgraph.cli - Command-line interface.

Main entry point for the iocgraph CLI tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from iocgraph import __version__
from iocgraph.commands import analyze, config_cmd
from iocgraph.config import ConfigError, load_config


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="iocgraph",
        description="Layered and parent/child views of indicator (IOC) graphs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  iocgraph analyze layers case.json           # Depth layers from roots
  iocgraph analyze hierarchy case.json        # Parent/child groups
  iocgraph analyze timeline case.json -f json # Chronological order as JSON

Configuration:
  iocgraph config path          # Show config file location
  iocgraph config show          # View all settings

For detailed command help: iocgraph <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"iocgraph {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (debug logging)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # analyze command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze an indicator snapshot (layers, hierarchy, timeline)",
    )
    analyze_subparsers = analyze_parser.add_subparsers(dest="analyze_action")

    for action, help_text in (
        ("layers", "Place indicators in depth layers from their roots"),
        ("hierarchy", "Group indicators into parent/child trees and flag bad arrows"),
        ("timeline", "List indicators in chronological order"),
    ):
        action_parser = analyze_subparsers.add_parser(action, help=help_text)
        action_parser.add_argument(
            "snapshot",
            type=Path,
            help="Snapshot JSON file with 'nodes' and 'edges'",
        )
        action_parser.add_argument(
            "-f",
            "--format",
            choices=["text", "json"],
            default=None,
            help="Output format (default: from config, 'text')",
        )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Inspect configuration",
    )
    config_subparsers = config_parser.add_subparsers(dest="config_action")
    config_subparsers.add_parser("path", help="Show config file location")
    config_subparsers.add_parser("show", help="Print effective configuration")

    return parser


def configure_logging(args: argparse.Namespace) -> None:
    """Set the log level from -v/-q and the [logging] config table."""
    debug = args.verbose
    if not debug:
        try:
            debug = bool(load_config(args.config)["logging"]["debug"])
        except ConfigError:
            # Reported by the command itself
            debug = False

    if debug:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Handle no command
    if not args.command:
        parser.print_help()
        return 0

    configure_logging(args)

    try:
        if args.command == "analyze":
            return analyze.run(args)
        elif args.command == "config":
            return config_cmd.run(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
