"""
Binary resolution for the launcher.

This module orchestrates turning a ToolIdentity into a directory holding a
usable binary, coordinating the tool cache, the downloader and archive
extraction:

1. Look up (package, version) in the tool cache
2. On a miss, derive the release archive URL for the platform
3. Download the archive into a transient workspace
4. Extract it and locate the binary
5. Register the binary in the tool cache
6. Remove the workspace
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional

from actionkit.core.config import ToolIdentity
from actionkit.core.download import download_tool
from actionkit.core.exceptions import ExtractionError
from actionkit.core.filesystem import extract_tar, temporary_directory
from actionkit.core.platform import PlatformInfo, PlatformSpec
from actionkit.core.tool_cache import ToolCache

logger = logging.getLogger(__name__)

# Released archives are only built for x64.
ARCHIVE_ARCH = "x64"
ARCHIVE_EXTENSION = ".tar.gz"


@dataclass(frozen=True)
class DownloadSpec:
    """Where the release archive for one platform lives."""

    file_name: str
    """Archive file name, e.g. 'actions-v1.2.3-linux-x64.tar.gz'"""

    url: str
    """Full download URL"""

    expected_sha256: Optional[str] = None
    """Optional SHA256 the archive must match"""


def build_download_spec(
    identity: ToolIdentity,
    spec: PlatformSpec,
    expected_sha256: Optional[str] = None,
) -> DownloadSpec:
    """
    Derive the release archive name and URL for a platform.

    Args:
        identity: Tool identity
        spec: Platform naming conventions
        expected_sha256: Optional checksum to carry along

    Returns:
        DownloadSpec for the platform

    Example:
        >>> spec = build_download_spec(identity, PLATFORM_SPECS[Platform.LINUX])
        >>> spec.url
        'https://example.test/org/actions/releases/download/v1.2.3/actions-v1.2.3-linux-x64.tar.gz'
    """
    file_name = (
        f"{identity.binary_name}-{identity.release_tag}-{spec.tag}-"
        f"{ARCHIVE_ARCH}{ARCHIVE_EXTENSION}"
    )
    return DownloadSpec(
        file_name=file_name,
        url=f"{identity.release_base_url}/{file_name}",
        expected_sha256=expected_sha256,
    )


def _locate_binary(extract_dir: Path, names) -> Optional[Path]:
    if not extract_dir.is_dir():
        return None

    for name in names:
        candidate = extract_dir / name
        if candidate.is_file():
            return candidate

    # Archives with a single top-level directory
    children = list(extract_dir.iterdir())
    if len(children) == 1 and children[0].is_dir():
        return _locate_binary(children[0], names)

    return None


class BinaryResolver:
    """
    Resolves a tool identity to a cached binary directory.

    Collaborators are injected so each step can be replaced in tests; the
    defaults are the real download and extraction functions.

    Example:
        >>> resolver = BinaryResolver(ToolCache(), Path("/tmp"))
        >>> resolver.resolve_binary_path(detect_platform(), identity)
        PosixPath('/opt/hostedtoolcache/@org/actions/1.2.3/x64')
    """

    def __init__(
        self,
        cache: ToolCache,
        temp_dir: Path,
        downloader: Callable[..., Path] = download_tool,
        extractor: Callable[[Path, Path], Path] = extract_tar,
        download_timeout: int = 60,
        checksums: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize binary resolver.

        Args:
            cache: Tool cache to look up and register binaries in
            temp_dir: Parent directory for transient workspaces
            downloader: Download function (url, destination_dir, ...) -> archive path
            extractor: Extraction function (archive, destination) -> directory
            download_timeout: Request timeout in seconds
            checksums: Optional SHA256 per platform tag
        """
        self.cache = cache
        self.temp_dir = Path(temp_dir)
        self.downloader = downloader
        self.extractor = extractor
        self.download_timeout = download_timeout
        self.checksums = dict(checksums or {})

    def download_spec(self, platform: PlatformInfo, identity: ToolIdentity) -> DownloadSpec:
        """
        Get the DownloadSpec for a platform, including any configured checksum.

        Raises:
            UnsupportedPlatformError: If the platform has no released binary
        """
        spec = platform.spec
        return build_download_spec(identity, spec, self.checksums.get(spec.tag))

    def find_cached(self, identity: ToolIdentity) -> Optional[Path]:
        """Look up the exact configured version in the cache."""
        return self.cache.find(identity.package_name, identity.version)

    def resolve_binary_path(self, platform: PlatformInfo, identity: ToolIdentity) -> Path:
        """
        Resolve the directory holding the binary, downloading it if needed.

        Args:
            platform: Host platform
            identity: Tool identity

        Returns:
            Canonical cache directory containing the binary

        Raises:
            UnsupportedPlatformError: If the platform has no released binary
            DownloadError: If the archive cannot be downloaded
            ExtractionError: If the archive is corrupt or lacks the binary
            CacheWriteError: If the binary cannot be registered
        """
        spec = platform.spec

        cached = self.find_cached(identity)
        if cached is not None:
            logger.info(
                f"Using cached {identity.package_name} {identity.version}: {cached}"
            )
            return cached

        download = self.download_spec(platform, identity)
        executable_name = spec.executable_name(identity.binary_name)

        logger.info(
            f"Downloading {identity.package_name} {identity.version} from {download.url}"
        )

        with temporary_directory(prefix="actionkit_", parent=self.temp_dir) as workspace:
            archive = self.downloader(
                download.url,
                workspace,
                expected_sha256=download.expected_sha256,
                timeout=self.download_timeout,
            )

            extract_dir = workspace / "extract"
            logger.info(f"Extracting {download.file_name}")
            self.extractor(archive, extract_dir)

            names = [executable_name]
            if identity.binary_name != executable_name:
                names.append(identity.binary_name)
            binary = _locate_binary(extract_dir, names)
            if binary is None:
                raise ExtractionError(
                    f"Binary '{executable_name}' not found in {download.file_name}"
                )

            cache_dir = self.cache.cache_file(
                binary,
                executable_name,
                identity.package_name,
                identity.version,
                source=download.url,
            )

        return cache_dir


__all__ = [
    "DownloadSpec",
    "build_download_spec",
    "BinaryResolver",
]
