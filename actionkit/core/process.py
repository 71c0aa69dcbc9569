"""
Child process execution for ActionKit.

The launched binary shares stdin/stdout/stderr with the launcher so its
output (including workflow commands) reaches the CI runner unchanged.
"""

import logging
import subprocess
import sys
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

from actionkit.core.exceptions import ExecutionError

logger = logging.getLogger(__name__)


def _quote(arg: str) -> str:
    return f'"{arg}"' if " " in arg else arg


def exec_tool(
    executable: Union[str, Path],
    args: Sequence[str] = (),
    ignore_return_code: bool = False,
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Run an executable with inherited stdio and wait for it to exit.

    The command line is echoed as ``[command]<exe> <args>`` before running.

    Args:
        executable: Path to the executable
        args: Arguments passed to the executable
        ignore_return_code: Return non-zero exit codes instead of raising
        cwd: Working directory (default: current directory)
        env: Environment (default: inherit current environment)

    Returns:
        Exit code of the process

    Raises:
        ExecutionError: If the process cannot be started, or exits non-zero
            and ignore_return_code is False

    Example:
        >>> exec_tool("/opt/hostedtoolcache/actions/1.2.3/x64/actions", ["wait"])
        0
    """
    command = [str(executable), *args]

    print(f"[command]{' '.join(_quote(part) for part in command)}", flush=True)
    sys.stderr.flush()

    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            env=dict(env) if env is not None else None,
        )
    except OSError as e:
        logger.debug(f"Failed to start {executable}: {e}")
        raise ExecutionError(f"Unable to start '{executable}': {e}") from e

    logger.debug(f"{executable} exited with code {result.returncode}")

    if result.returncode != 0 and not ignore_return_code:
        raise ExecutionError(
            f"The process '{executable}' failed with exit code {result.returncode}",
            exit_code=result.returncode,
        )

    return result.returncode


__all__ = ["exec_tool"]
