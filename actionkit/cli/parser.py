"""
ActionKit CLI argument parser.

This module implements the command-line interface for ActionKit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from actionkit.core.workflow import configure_logging

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("actionkit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """ActionKit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="actionkit",
            description="ActionKit - cached binary launcher for CI actions",
            epilog='Use "actionkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"ActionKit {__version__}"
        )
        verbosity = parser.add_mutually_exclusive_group()
        verbosity.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        verbosity.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            default=Path("actionkit.yaml"),
            help="Path to configuration file (default: ./actionkit.yaml)",
        )
        parser.add_argument(
            "--platform",
            metavar="ID",
            default=None,
            help="Host platform identifier override (default: sys.platform)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_run_command(subparsers)
        self._add_resolve_command(subparsers)
        self._add_cache_command(subparsers)

        return parser

    def _add_run_command(self, subparsers):
        """Add 'run' subcommand."""
        parser = subparsers.add_parser(
            "run",
            help="Resolve the binary and run a sub-command",
            description="Resolve the cached binary (downloading it if needed) "
            "and execute it with SUB_COMMAND as its only argument",
        )
        parser.add_argument(
            "sub_command", metavar="SUB_COMMAND", help="Sub-command passed to the binary"
        )

    def _add_resolve_command(self, subparsers):
        """Add 'resolve' subcommand."""
        parser = subparsers.add_parser(
            "resolve",
            help="Print the resolved binary directory",
            description="Resolve the binary directory, downloading it if needed",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show the download URL and cache state without downloading",
        )

    def _add_cache_command(self, subparsers):
        """Add 'cache' subcommand with its own sub-commands."""
        parser = subparsers.add_parser(
            "cache",
            help="Inspect or clean the tool cache",
            description="Inspect or clean the tool cache",
        )
        cache_subparsers = parser.add_subparsers(
            dest="cache_command", help="Cache commands", metavar="CACHE_COMMAND"
        )

        cache_subparsers.add_parser("list", help="List cached binaries")

        clean_parser = cache_subparsers.add_parser(
            "clean",
            help="Remove cached binaries",
            description="Remove cached binaries (default: all versions of the "
            "configured package)",
        )
        clean_parser.add_argument(
            "--tool", metavar="NAME", help="Tool (package) name to remove"
        )
        clean_parser.add_argument(
            "--version",
            dest="tool_version",
            metavar="VERSION",
            help="Only remove this version",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (default: sys.argv[1:])

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (default: sys.argv[1:])

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            logger.debug("Traceback:", exc_info=True)
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        configure_logging(verbose=args.verbose, quiet=args.quiet)

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        # Command module mapping
        command_map = {
            "run": "actionkit.cli.commands.run",
            "resolve": "actionkit.cli.commands.resolve",
            "cache": "actionkit.cli.commands.cache",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)

        # Call run() function in module
        if not hasattr(module, "run"):
            logger.error(f"Command module {module_name} has no run() function")
            return 1

        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
