"""
Core functionality for ActionKit.

This package contains the collaborators the launcher is built from: the
tool cache, downloads, archive extraction, process execution and workflow
commands.
"""

from .config import (
    ToolIdentity,
    LauncherConfig,
    load_config,
)

from .directory import (
    get_global_cache_dir,
    get_tool_cache_dir,
    get_temp_dir,
)

from .platform import (
    Platform,
    PlatformInfo,
    PlatformSpec,
    PLATFORM_SPECS,
    detect_platform,
    detect_architecture,
)

from .tool_cache import (
    CachedTool,
    ToolCache,
)

from .exceptions import (
    ActionKitError,
    ConfigurationError,
    UnsupportedPlatformError,
    DownloadError,
    ChecksumError,
    ExtractionError,
    InsecureArchiveError,
    CacheWriteError,
    ExecutionError,
)

__all__ = [
    # Config
    "ToolIdentity",
    "LauncherConfig",
    "load_config",
    # Directory
    "get_global_cache_dir",
    "get_tool_cache_dir",
    "get_temp_dir",
    # Platform
    "Platform",
    "PlatformInfo",
    "PlatformSpec",
    "PLATFORM_SPECS",
    "detect_platform",
    "detect_architecture",
    # Tool cache
    "CachedTool",
    "ToolCache",
    # Exceptions
    "ActionKitError",
    "ConfigurationError",
    "UnsupportedPlatformError",
    "DownloadError",
    "ChecksumError",
    "ExtractionError",
    "InsecureArchiveError",
    "CacheWriteError",
    "ExecutionError",
]
