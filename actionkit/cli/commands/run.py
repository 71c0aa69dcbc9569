"""
Run command implementation.

Resolves the binary and executes it with a sub-command.
"""

import logging

from actionkit.cli.utils import load_launcher_config
from actionkit.core import workflow
from actionkit.launcher.runner import run_action

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the run command.

    Args:
        args: Parsed command-line arguments with:
            - sub_command: Argument passed to the binary

    Returns:
        Exit code (0 for success, 1 for any failure)
    """
    logger.debug(f"Arguments: {args}")

    try:
        config = load_launcher_config(args, args.sub_command)
    except Exception as e:
        logger.debug(f"Invalid configuration: {e}", exc_info=True)
        workflow.set_failed(str(e))
        return 1

    return run_action(config)
