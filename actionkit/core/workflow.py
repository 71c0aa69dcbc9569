"""
GitHub Actions workflow commands.

Workflow commands are lines of the form ``::name key=value,key=value::message``
written to stdout; the runner interprets them (annotations, masking, step
failure). Newer runners read outputs, environment, path and state updates
from files named by ``GITHUB_OUTPUT``/``GITHUB_ENV``/``GITHUB_PATH``/
``GITHUB_STATE``; the legacy commands are used when those are not set.

This module is also the failure sink of the launcher: set_failed() marks the
current step as failed without raising.
"""

import logging
import os
import sys
import uuid
from contextlib import contextmanager
from typing import IO, Dict, Iterator, Mapping, MutableMapping, Optional

from actionkit.core.exceptions import ConfigurationError


# ============================================================================
# Escaping and Formatting
# ============================================================================


def escape_data(data: str) -> str:
    """Escape a command message."""
    return data.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(prop: str) -> str:
    """Escape a command property value."""
    return (
        prop.replace("%", "%25")
        .replace("\r", "%0D")
        .replace("\n", "%0A")
        .replace(":", "%3A")
        .replace(",", "%2C")
    )


def format_command(
    command: str, message: str = "", properties: Optional[Mapping[str, object]] = None
) -> str:
    """
    Build a workflow command line.

    Properties with a None value are left out.

    Example:
        >>> format_command("error", "boom", {"file": "a.py", "line": 3})
        '::error file=a.py,line=3::boom'
    """
    props = ",".join(
        f"{key}={escape_property(str(value))}"
        for key, value in (properties or {}).items()
        if value is not None
    )
    head = f"{command} {props}" if props else command
    return f"::{head}::{escape_data(str(message))}"


def issue_command(
    command: str,
    message: str = "",
    properties: Optional[Mapping[str, object]] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """Write a workflow command to stdout (or the given stream)."""
    out = stream if stream is not None else sys.stdout
    out.write(format_command(command, message, properties) + "\n")
    out.flush()


# ============================================================================
# Logging Commands
# ============================================================================


def debug(message: str) -> None:
    """Write a debug message (only shown when step debugging is enabled)."""
    issue_command("debug", message)


def _annotation(
    level: str,
    message: str,
    file: Optional[str],
    line: Optional[int],
    col: Optional[int],
) -> None:
    issue_command(level, message, {"file": file, "line": line, "col": col})


def warning(
    message: str,
    file: Optional[str] = None,
    line: Optional[int] = None,
    col: Optional[int] = None,
) -> None:
    """Write a warning annotation, optionally attached to a file location."""
    _annotation("warning", message, file, line, col)


def error(
    message: str,
    file: Optional[str] = None,
    line: Optional[int] = None,
    col: Optional[int] = None,
) -> None:
    """Write an error annotation, optionally attached to a file location."""
    _annotation("error", message, file, line, col)


def info(message: str) -> None:
    """Write a plain log line."""
    sys.stdout.write(message + "\n")
    sys.stdout.flush()


def set_failed(message: str) -> None:
    """
    Mark the current step as failed.

    Emits an error annotation with the message. The caller is responsible
    for exiting with a non-zero status; this function never raises.
    """
    error(message)


def set_secret(secret: str) -> None:
    """Mask a value in all subsequent log output."""
    issue_command("add-mask", secret)


def is_debug(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Whether the runner has step debug logging enabled."""
    environ = os.environ if environ is None else environ
    return environ.get("RUNNER_DEBUG") == "1"


@contextmanager
def stop_commands() -> Iterator[str]:
    """
    Suspend workflow command processing for the duration of the block.

    Yields:
        The resume token
    """
    token = uuid.uuid4().hex
    issue_command("stop-commands", token)
    try:
        yield token
    finally:
        issue_command(token)


# ============================================================================
# Inputs, Outputs and State
# ============================================================================


def _var_from_name(prefix: str, name: str) -> str:
    return f"{prefix}_{name.replace(' ', '_').upper()}"


def get_input(
    name: str, required: bool = False, environ: Optional[Mapping[str, str]] = None
) -> str:
    """
    Read an action input.

    Args:
        name: Input name ('milliseconds', 'who to greet')
        required: Raise when the input is missing or empty
        environ: Environment to read (default: os.environ)

    Returns:
        Input value with surrounding whitespace removed ('' when unset)

    Raises:
        ConfigurationError: If required and not supplied
    """
    environ = os.environ if environ is None else environ
    value = environ.get(_var_from_name("INPUT", name), "").strip()
    if required and not value:
        raise ConfigurationError(f"Input required and not supplied: {name}")
    return value


def get_state(name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Read state saved by an earlier phase of the same action."""
    environ = os.environ if environ is None else environ
    return environ.get(_var_from_name("STATE", name), "")


def _append_to_file_command(path: str, key: str, value: str) -> None:
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in key or delimiter in value:
        raise ValueError("Unexpected input: value contains the command delimiter")

    with open(path, "a", encoding="utf-8") as f:
        f.write(f"{key}<<{delimiter}\n{value}\n{delimiter}\n")


def set_output(
    name: str, value: str, environ: Optional[Mapping[str, str]] = None
) -> None:
    """Set a step output."""
    environ = os.environ if environ is None else environ
    path = environ.get("GITHUB_OUTPUT")
    if path:
        _append_to_file_command(path, name, value)
    else:
        issue_command("set-output", value, {"name": name})


def save_state(
    name: str, value: str, environ: Optional[Mapping[str, str]] = None
) -> None:
    """Save state for a later phase (e.g. post) of the same action."""
    environ = os.environ if environ is None else environ
    path = environ.get("GITHUB_STATE")
    if path:
        _append_to_file_command(path, name, value)
    else:
        issue_command("save-state", value, {"name": name})


def export_variable(
    name: str, value: str, environ: Optional[MutableMapping[str, str]] = None
) -> None:
    """Set an environment variable for this and all following steps."""
    environ = os.environ if environ is None else environ
    environ[name] = value

    path = environ.get("GITHUB_ENV")
    if path:
        _append_to_file_command(path, name, value)
    else:
        issue_command("set-env", value, {"name": name})


def add_path(
    directory: str, environ: Optional[MutableMapping[str, str]] = None
) -> None:
    """Prepend a directory to PATH for this and all following steps."""
    environ = os.environ if environ is None else environ

    path_file = environ.get("GITHUB_PATH")
    if path_file:
        with open(path_file, "a", encoding="utf-8") as f:
            f.write(f"{directory}\n")
    else:
        issue_command("add-path", directory)

    current = environ.get("PATH")
    environ["PATH"] = f"{directory}{os.pathsep}{current}" if current else directory


# ============================================================================
# Logging Integration
# ============================================================================


class WorkflowCommandHandler(logging.Handler):
    """
    Logging handler that renders records as workflow commands.

    DEBUG records become ``::debug::``, WARNING ``::warning::``, ERROR and
    CRITICAL ``::error::``; INFO is written as a plain line.
    """

    LEVEL_COMMANDS: Dict[int, str] = {
        logging.DEBUG: "debug",
        logging.WARNING: "warning",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def __init__(self, stream: Optional[IO[str]] = None):
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            out = self.stream if self.stream is not None else sys.stdout
            command = self.LEVEL_COMMANDS.get(record.levelno)
            if command is None:
                out.write(message + "\n")
                out.flush()
            else:
                issue_command(command, message, stream=out)
        except Exception:
            self.handleError(record)


def in_github_actions(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Whether the process runs inside a GitHub Actions job."""
    environ = os.environ if environ is None else environ
    return environ.get("GITHUB_ACTIONS", "").lower() == "true"


def configure_logging(
    verbose: bool = False,
    quiet: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> None:
    """
    Configure root logging for the launcher.

    Args:
        verbose: DEBUG level with logger names
        quiet: ERROR level only
        environ: Environment to inspect (default: os.environ)

    RUNNER_DEBUG=1 behaves like verbose. Inside GitHub Actions records are
    rendered as workflow commands instead of plain lines.
    """
    environ = os.environ if environ is None else environ

    if verbose or is_debug(environ):
        level = logging.DEBUG
        format_str = "%(levelname)s [%(name)s] %(message)s"
    elif quiet:
        level = logging.ERROR
        format_str = "%(levelname)s: %(message)s"
    else:
        level = logging.INFO
        format_str = "%(message)s"

    if in_github_actions(environ):
        handler: logging.Handler = WorkflowCommandHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logging.basicConfig(level=level, handlers=[handler], force=True)
    else:
        logging.basicConfig(level=level, format=format_str, force=True)


__all__ = [
    "escape_data",
    "escape_property",
    "format_command",
    "issue_command",
    "debug",
    "warning",
    "error",
    "info",
    "set_failed",
    "set_secret",
    "is_debug",
    "stop_commands",
    "get_input",
    "get_state",
    "set_output",
    "save_state",
    "export_variable",
    "add_path",
    "WorkflowCommandHandler",
    "in_github_actions",
    "configure_logging",
]
