"""
Directory resolution for ActionKit.

CI runners announce where tools and scratch files belong through environment
variables; outside a runner the launcher falls back to a per-user cache.

Directory Structure:
    Global Cache (~/.actionkit/ or %USERPROFILE%\\.actionkit\\):
        - tool-cache/           : Cached binaries, <tool>/<version>/<arch>/
        - tool-cache/.locks/    : Per-entry lock files
"""

import os
import tempfile
from pathlib import Path
from typing import Mapping, Optional

from actionkit.core.exceptions import ConfigurationError

TOOL_CACHE_ENV = "RUNNER_TOOL_CACHE"
TEMP_DIR_ENV = "RUNNER_TEMP"


def get_global_cache_dir() -> Path:
    """
    Get the platform-specific global cache directory path.

    Returns:
        Path: The global cache directory path.
            - Windows: %USERPROFILE%\\.actionkit
            - Linux/macOS: ~/.actionkit/

    Raises:
        ConfigurationError: If USERPROFILE is not set on Windows
    """
    if os.name == "nt":
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise ConfigurationError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine global cache directory."
            )
        return Path(user_profile) / ".actionkit"
    else:
        return Path.home() / ".actionkit"


def get_tool_cache_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """
    Get the tool cache root.

    Args:
        environ: Environment to read (default: os.environ)

    Returns:
        RUNNER_TOOL_CACHE when set, otherwise <global cache>/tool-cache
    """
    environ = os.environ if environ is None else environ
    configured = environ.get(TOOL_CACHE_ENV, "").strip()
    if configured:
        return Path(configured)
    return get_global_cache_dir() / "tool-cache"


def get_temp_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """
    Get the scratch directory used as extraction workspace.

    Args:
        environ: Environment to read (default: os.environ)

    Returns:
        RUNNER_TEMP when set, otherwise the system temp directory
    """
    environ = os.environ if environ is None else environ
    configured = environ.get(TEMP_DIR_ENV, "").strip()
    if configured:
        return Path(configured)
    return Path(tempfile.gettempdir())


__all__ = [
    "get_global_cache_dir",
    "get_tool_cache_dir",
    "get_temp_dir",
]
