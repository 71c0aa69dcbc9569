"""
Shared utilities for CLI commands.

Provides configuration loading and consistent error output for the
ActionKit commands.
"""

import logging
import sys
from typing import Optional

from actionkit.core.config import LauncherConfig, load_config

logger = logging.getLogger(__name__)


def load_launcher_config(args, sub_command: str) -> LauncherConfig:
    """
    Load the launcher configuration named by the global CLI options.

    Args:
        args: Parsed arguments with config and platform
        sub_command: Sub-command to record in the configuration

    Returns:
        LauncherConfig

    Raises:
        ConfigurationError: If the configuration is missing or invalid
    """
    logger.debug(f"Using configuration file {args.config}")
    return load_config(args.config, sub_command, platform_identifier=args.platform)


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)
