"""YAML configuration for the ActionKit launcher.

The launcher reads ``actionkit.yaml``, which names the released package, its
version and the repository its release artifacts are published under::

    package: "@org/actions"
    version: "1.2.3"
    repository: "https://github.com/org/actions"
    download:
      timeout: 60
    checksums:
      linux: "<sha256>"

Everything is resolved once into an immutable ToolIdentity and a
LauncherConfig that is passed explicitly to the resolver.
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from actionkit.core.directory import get_temp_dir, get_tool_cache_dir
from actionkit.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "actionkit.yaml"
DEFAULT_DOWNLOAD_TIMEOUT = 60


@dataclass(frozen=True)
class ToolIdentity:
    """
    Which binary the launcher targets.

    Attributes:
        package_name: Package identifier, possibly scoped ('@org/actions')
        version: Released version, without the 'v' tag prefix
        repository_url: Repository the releases are published under
        binary_name: Binary file name (default: last segment of package_name)
    """

    package_name: str
    version: str
    repository_url: str
    binary_name: str = ""

    def __post_init__(self):
        package_name = (self.package_name or "").strip()
        version = (self.version or "").strip()
        repository_url = (self.repository_url or "").strip().rstrip("/")

        if not package_name:
            raise ConfigurationError("Package name cannot be empty")
        if not version:
            raise ConfigurationError("Version cannot be empty")
        if not repository_url.startswith(("https://", "http://")):
            raise ConfigurationError(
                f"Repository URL must be http(s): {self.repository_url!r}"
            )

        # The release tag adds its own 'v' prefix
        if version[:1] in ("v", "V") and version[1:2].isdigit():
            version = version[1:]

        binary_name = (self.binary_name or "").strip() or package_name.rsplit("/", 1)[-1]
        if not binary_name or Path(binary_name).name != binary_name:
            raise ConfigurationError(f"Invalid binary name: {binary_name!r}")

        object.__setattr__(self, "package_name", package_name)
        object.__setattr__(self, "version", version)
        object.__setattr__(self, "repository_url", repository_url)
        object.__setattr__(self, "binary_name", binary_name)

    @property
    def release_tag(self) -> str:
        return f"v{self.version}"

    @property
    def release_base_url(self) -> str:
        """Base URL of the release artifacts for this version."""
        return f"{self.repository_url}/releases/download/{self.release_tag}"


@dataclass
class LauncherConfig:
    """Everything the launcher needs for one run."""

    identity: ToolIdentity
    sub_command: str
    platform_identifier: str = field(default_factory=lambda: sys.platform)
    temp_dir: Path = field(default_factory=get_temp_dir)
    tool_cache_dir: Path = field(default_factory=get_tool_cache_dir)
    download_timeout: int = DEFAULT_DOWNLOAD_TIMEOUT
    checksums: Dict[str, str] = field(default_factory=dict)


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {config_path}: {e}") from e

    if data is None:
        raise ConfigurationError(f"Configuration file is empty: {config_path}")
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration must be a mapping, got {type(data).__name__}"
        )

    return data


def parse_identity(data: Mapping[str, Any]) -> ToolIdentity:
    """
    Build a ToolIdentity from configuration data.

    Raises:
        ConfigurationError: If required keys are missing or invalid
    """
    missing = [key for key in ("package", "version", "repository") if not data.get(key)]
    if missing:
        raise ConfigurationError(
            f"Missing required configuration key(s): {', '.join(missing)}"
        )

    return ToolIdentity(
        package_name=str(data["package"]),
        version=str(data["version"]),
        repository_url=str(data["repository"]),
        binary_name=str(data.get("binary") or ""),
    )


def _parse_timeout(data: Mapping[str, Any]) -> int:
    download = data.get("download") or {}
    if not isinstance(download, dict):
        raise ConfigurationError("'download' must be a mapping")

    timeout = download.get("timeout", DEFAULT_DOWNLOAD_TIMEOUT)
    try:
        timeout = int(timeout)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid download timeout: {timeout!r}")
    if timeout <= 0:
        raise ConfigurationError(f"Download timeout must be positive: {timeout}")
    return timeout


def _parse_checksums(data: Mapping[str, Any]) -> Dict[str, str]:
    checksums = data.get("checksums") or {}
    if not isinstance(checksums, dict):
        raise ConfigurationError("'checksums' must be a mapping of platform tag to sha256")
    return {str(tag): str(digest).strip() for tag, digest in checksums.items() if digest}


def load_config(
    config_path: Path,
    sub_command: str,
    platform_identifier: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> LauncherConfig:
    """
    Load launcher configuration.

    Args:
        config_path: Path to actionkit.yaml
        sub_command: Sub-command passed to the binary
        platform_identifier: Host identifier override (default: sys.platform)
        environ: Environment for RUNNER_TEMP/RUNNER_TOOL_CACHE (default: os.environ)

    Returns:
        Resolved LauncherConfig

    Raises:
        ConfigurationError: If the configuration is missing or invalid
    """
    if not sub_command or not sub_command.strip():
        raise ConfigurationError("Sub-command cannot be empty")

    environ = os.environ if environ is None else environ
    config_path = Path(config_path)

    logger.debug(f"Loading configuration from {config_path}")
    data = _read_yaml(config_path)

    return LauncherConfig(
        identity=parse_identity(data),
        sub_command=sub_command.strip(),
        platform_identifier=platform_identifier or sys.platform,
        temp_dir=get_temp_dir(environ),
        tool_cache_dir=get_tool_cache_dir(environ),
        download_timeout=_parse_timeout(data),
        checksums=_parse_checksums(data),
    )


__all__ = [
    "DEFAULT_CONFIG_NAME",
    "ToolIdentity",
    "LauncherConfig",
    "parse_identity",
    "load_config",
]
