"""
Centralized exception hierarchy for ActionKit.

Every failure the launcher can surface derives from ActionKitError so the
top-level driver can report it through a single handler.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class ActionKitError(Exception):
    """Base exception for all ActionKit errors."""

    pass


class ConfigurationError(ActionKitError):
    """Launcher configuration is missing or invalid."""

    pass


# ============================================================================
# Platform Exceptions
# ============================================================================


class UnsupportedPlatformError(ActionKitError):
    """Raised when the host platform has no released binary."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Unsupported platform: {identifier}")


# ============================================================================
# Download / Extraction Exceptions
# ============================================================================


class DownloadError(ActionKitError):
    """Exception raised when download fails."""

    pass


class ChecksumError(DownloadError):
    """Exception raised when checksum verification fails."""

    pass


class ExtractionError(ActionKitError):
    """Failed to extract an archive or locate the binary inside it."""

    pass


class InsecureArchiveError(ExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Cache Exceptions
# ============================================================================


class CacheWriteError(ActionKitError):
    """Raised when a tool cannot be registered in the tool cache."""

    pass


# ============================================================================
# Execution Exceptions
# ============================================================================


class ExecutionError(ActionKitError):
    """Raised when the launched binary cannot start or exits non-zero."""

    def __init__(self, message: str, exit_code: Optional[int] = None):
        self.exit_code = exit_code
        super().__init__(message)


__all__ = [
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
