"""
Platform detection for ActionKit.

This module maps the host operating-system identifier onto the small set of
platforms that have released binaries, and holds the per-platform table used
to build archive names and executable paths.

Usage:
    from actionkit.core.platform import detect_platform

    info = detect_platform()
    if info.is_supported:
        print(f"Archive tag: {info.spec.tag}")
"""

import functools
import platform
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from actionkit.core.exceptions import UnsupportedPlatformError


class Platform(Enum):
    """Operating systems the launcher knows about."""

    LINUX = "linux"
    DARWIN = "darwin"
    WINDOWS = "windows"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class PlatformSpec:
    """
    Naming conventions for one supported platform.

    Attributes:
        tag: Platform tag used in release archive names
        executable_suffix: Suffix appended to the binary name when executing it
    """

    tag: str
    executable_suffix: str = ""

    def executable_name(self, binary_name: str) -> str:
        """Name of the executable file for a binary on this platform."""
        return f"{binary_name}{self.executable_suffix}"


PLATFORM_SPECS: Dict[Platform, PlatformSpec] = {
    Platform.LINUX: PlatformSpec(tag="linux"),
    Platform.DARWIN: PlatformSpec(tag="darwin"),
    Platform.WINDOWS: PlatformSpec(tag="windows", executable_suffix=".exe"),
}

# Identifiers known to have no released binary. Anything unrecognized is
# treated the same way.
UNSUPPORTED_IDENTIFIERS = ("aix", "freebsd", "openbsd", "sunos", "cygwin")


@dataclass(frozen=True)
class PlatformInfo:
    """
    Host platform as seen by the launcher.

    Attributes:
        platform: Normalized platform variant
        identifier: Raw host identifier (e.g. 'linux', 'win32', 'sunos5')
    """

    platform: Platform
    identifier: str

    @property
    def is_supported(self) -> bool:
        return self.platform in PLATFORM_SPECS

    @property
    def spec(self) -> PlatformSpec:
        """
        Get naming conventions for this platform.

        Raises:
            UnsupportedPlatformError: If the platform has no released binary
        """
        spec = PLATFORM_SPECS.get(self.platform)
        if spec is None:
            raise UnsupportedPlatformError(self.identifier)
        return spec

    def __str__(self) -> str:
        return f"{self.platform.value} ({self.identifier})"


def normalize_platform(identifier: str) -> Platform:
    """
    Map a host identifier onto a Platform variant.

    Accepts both ``sys.platform`` style values ('linux', 'darwin', 'win32',
    'freebsd14') and plain names ('windows').

    Args:
        identifier: Raw platform identifier

    Returns:
        Platform variant (UNSUPPORTED for anything unrecognized)

    Example:
        >>> normalize_platform("win32")
        <Platform.WINDOWS: 'windows'>
        >>> normalize_platform("sunos5")
        <Platform.UNSUPPORTED: 'unsupported'>
    """
    value = identifier.strip().lower()

    if value.startswith(UNSUPPORTED_IDENTIFIERS):
        return Platform.UNSUPPORTED
    if value.startswith("linux"):
        return Platform.LINUX
    if value == "darwin":
        return Platform.DARWIN
    if value in ("win32", "windows"):
        return Platform.WINDOWS
    return Platform.UNSUPPORTED


def detect_platform(identifier: Optional[str] = None) -> PlatformInfo:
    """
    Detect the platform the launcher runs on.

    Args:
        identifier: Explicit identifier to use instead of ``sys.platform``

    Returns:
        PlatformInfo with the normalized platform and raw identifier
    """
    raw = identifier if identifier is not None else sys.platform
    return PlatformInfo(platform=normalize_platform(raw), identifier=raw)


@functools.lru_cache(maxsize=1)
def detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm'
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    else:
        # Return original for unknown architectures
        return machine or "unknown"


__all__ = [
    "Platform",
    "PlatformSpec",
    "PlatformInfo",
    "PLATFORM_SPECS",
    "normalize_platform",
    "detect_platform",
    "detect_architecture",
]
