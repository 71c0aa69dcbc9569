"""
Tool cache for downloaded binaries.

Entries live at ``<root>/<tool>/<version>/<arch>/`` and only count as cached
once the sibling marker ``<root>/<tool>/<version>/<arch>.complete`` exists.
The marker is written last (atomically) and holds JSON metadata about the
entry, so a half-populated directory is never reported as a hit.

Example:
    >>> cache = ToolCache(Path("/opt/hostedtoolcache"))
    >>> cache.find("@org/actions", "1.2.3")
    None
    >>> cache.cache_file(Path("work/actions"), "actions", "@org/actions", "1.2.3")
    PosixPath('/opt/hostedtoolcache/@org/actions/1.2.3/x64')
"""

import json
import logging
import re
import shutil
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from filelock import FileLock, Timeout
from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from actionkit.core.directory import get_tool_cache_dir
from actionkit.core.exceptions import CacheWriteError
from actionkit.core.filesystem import atomic_write, make_executable, safe_rmtree
from actionkit.core.platform import detect_architecture

logger = logging.getLogger(__name__)

MARKER_SUFFIX = ".complete"
LOCK_DIR_NAME = ".locks"
RANGE_PATTERN = re.compile(r"[<>=!~*,\s]|\.[xX](?=$|\.)")


@dataclass(frozen=True)
class CachedTool:
    """A completed tool cache entry."""

    tool: str
    version: str
    arch: str
    path: Path
    file: Optional[str] = None
    source: Optional[str] = None
    cached_at: Optional[str] = None


def clean_version(version: str) -> str:
    """
    Normalize a version string for use as a cache key.

    Strips whitespace and a leading '=' or 'v', so 'v1.2.3' and '1.2.3'
    address the same entry.
    """
    cleaned = version.strip().lstrip("=").strip()
    if cleaned[:1] in ("v", "V") and cleaned[1:2].isdigit():
        cleaned = cleaned[1:]
    return cleaned


def is_explicit_version(version_spec: str) -> bool:
    """
    Check whether a version spec names a single version (not a range).

    Anything without range syntax is explicit, including semver versions
    PEP 440 cannot parse ('1.0.0-snapshot', '1.0.0-alpha.beta').
    """
    cleaned = clean_version(version_spec)
    return bool(cleaned) and not RANGE_PATTERN.search(cleaned)


def _to_specifier(version_spec: str) -> SpecifierSet:
    """Convert a version range ('>=1.2,<2', '1.x', '1.*') to a SpecifierSet."""
    spec = version_spec.strip()
    spec = re.sub(r"\.[xX](?=$|\.)", ".*", spec)
    spec = re.sub(r"(\.\*)+$", ".*", spec)
    if spec and spec[0].isdigit():
        spec = f"=={spec}"
    try:
        return SpecifierSet(spec)
    except InvalidSpecifier as e:
        raise ValueError(f"Invalid version spec: {version_spec}") from e


class ToolCache:
    """
    Key-value directory store addressed by (tool, version, arch).

    Lookups are lock-free; populating an entry holds a per-entry file lock so
    two launchers racing for the same version do not interleave writes.
    """

    def __init__(
        self,
        root: Optional[Path] = None,
        arch: Optional[str] = None,
        lock_timeout: int = 300,
    ):
        """
        Initialize tool cache.

        Args:
            root: Cache root (default: RUNNER_TOOL_CACHE or global cache)
            arch: Default architecture (default: host architecture)
            lock_timeout: Timeout in seconds for acquiring an entry lock
        """
        self.root = Path(root) if root is not None else get_tool_cache_dir()
        self.arch = arch or detect_architecture()
        self.lock_timeout = lock_timeout

        logger.debug(f"Initialized tool cache at {self.root}")

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def _tool_dir(self, tool_name: str) -> Path:
        if not tool_name or not tool_name.strip():
            raise ValueError("tool_name is required")

        root = self.root.resolve()
        tool_dir = (self.root / tool_name).resolve()
        if not tool_dir.is_relative_to(root) or tool_dir == root:
            raise ValueError(f"Invalid tool name: {tool_name}")
        return self.root / tool_name

    def _entry_dir(self, tool_name: str, version: str, arch: str) -> Path:
        return self._tool_dir(tool_name) / clean_version(version) / arch

    @staticmethod
    def _marker_path(entry_dir: Path) -> Path:
        return entry_dir.parent / f"{entry_dir.name}{MARKER_SUFFIX}"

    @contextmanager
    def _lock(self, tool_name: str, version: str, arch: str):
        """
        Context manager for entry locking.

        Raises:
            CacheWriteError: If lock cannot be acquired within timeout
        """
        key = re.sub(r"[^A-Za-z0-9._-]", "_", f"{tool_name}-{version}-{arch}")
        lock_path = self.root / LOCK_DIR_NAME / f"{key}.lock"
        lock_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with FileLock(lock_path, timeout=self.lock_timeout):
                logger.debug(f"Acquired cache lock: {lock_path}")
                yield
            logger.debug(f"Released cache lock: {lock_path}")
        except Timeout as e:
            raise CacheWriteError(
                f"Could not acquire cache lock for {tool_name} {version} "
                f"within {self.lock_timeout} seconds"
            ) from e

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find(
        self, tool_name: str, version_spec: str, arch: Optional[str] = None
    ) -> Optional[Path]:
        """
        Find a cached tool directory.

        An explicit version is matched exactly. Anything else is treated as a
        version range and the highest cached version inside it wins.

        Args:
            tool_name: Tool (package) name
            version_spec: Exact version or range ('1.2.3', '1.x', '>=1,<2')
            arch: Architecture (default: cache default)

        Returns:
            Path to the cached directory, or None if not cached

        Raises:
            ValueError: If tool_name or version_spec is empty or invalid
        """
        if not version_spec or not version_spec.strip():
            raise ValueError("version_spec is required")

        arch = arch or self.arch

        if is_explicit_version(version_spec):
            version = clean_version(version_spec)
        else:
            specifier = _to_specifier(version_spec)
            candidates = [
                v
                for v in self.find_all_versions(tool_name, arch)
                if Version(v) in specifier
            ]
            if not candidates:
                logger.debug(f"No cached {tool_name} matches {version_spec}")
                return None
            version = max(candidates, key=Version)
            logger.debug(f"Matched {version_spec} to cached version {version}")

        entry_dir = self._entry_dir(tool_name, version, arch)
        if entry_dir.is_dir() and self._marker_path(entry_dir).is_file():
            logger.debug(f"Found {tool_name} {version} in cache: {entry_dir}")
            return entry_dir

        logger.debug(f"{tool_name} {version} ({arch}) not found in cache")
        return None

    def find_all_versions(self, tool_name: str, arch: Optional[str] = None) -> List[str]:
        """
        List completed cached versions of a tool, lowest first.

        Directories whose names are not valid versions are ignored.
        """
        arch = arch or self.arch
        tool_dir = self._tool_dir(tool_name)
        if not tool_dir.is_dir():
            return []

        versions = []
        for child in tool_dir.iterdir():
            entry_dir = child / arch
            if not (entry_dir.is_dir() and self._marker_path(entry_dir).is_file()):
                continue
            try:
                Version(child.name)
            except InvalidVersion:
                continue
            versions.append(child.name)

        return sorted(versions, key=Version)

    def list_entries(self) -> List[CachedTool]:
        """
        List every completed entry in the cache.

        Returns:
            Entries sorted by tool, version and architecture
        """
        if not self.root.is_dir():
            return []

        entries = []
        for marker in self.root.rglob(f"*{MARKER_SUFFIX}"):
            entry_dir = marker.with_name(marker.name[: -len(MARKER_SUFFIX)])
            if not entry_dir.is_dir():
                continue

            try:
                metadata = json.loads(marker.read_text(encoding="utf-8") or "{}")
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Ignoring unreadable cache marker {marker}: {e}")
                metadata = {}

            version_dir = entry_dir.parent
            tool = metadata.get("tool") or version_dir.parent.relative_to(
                self.root
            ).as_posix()
            entries.append(
                CachedTool(
                    tool=tool,
                    version=metadata.get("version", version_dir.name),
                    arch=metadata.get("arch", entry_dir.name),
                    path=entry_dir,
                    file=metadata.get("file"),
                    source=metadata.get("source"),
                    cached_at=metadata.get("cached_at"),
                )
            )

        return sorted(entries, key=lambda e: (e.tool, e.version, e.arch))

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def cache_file(
        self,
        source_file: Path,
        target_file: str,
        tool_name: str,
        version: str,
        arch: Optional[str] = None,
        source: Optional[str] = None,
    ) -> Path:
        """
        Register a single file (e.g. a binary) in the cache.

        Any existing entry for the same key is replaced.

        Args:
            source_file: File to copy into the cache
            target_file: File name inside the cache entry
            tool_name: Tool (package) name
            version: Exact version
            arch: Architecture (default: cache default)
            source: Optional origin (e.g. download URL) stored in the marker

        Returns:
            Canonical cache directory holding target_file

        Raises:
            CacheWriteError: If the entry cannot be written
        """
        source_file = Path(source_file)
        arch = arch or self.arch

        if not source_file.is_file():
            raise CacheWriteError(f"Source is not a file: {source_file}")
        if not target_file or Path(target_file).name != target_file:
            raise CacheWriteError(f"Invalid target file name: {target_file!r}")

        try:
            entry_dir = self._entry_dir(tool_name, version, arch)
        except ValueError as e:
            raise CacheWriteError(str(e)) from e

        marker = self._marker_path(entry_dir)

        with self._lock(tool_name, clean_version(version), arch):
            try:
                marker.unlink(missing_ok=True)
                if entry_dir.exists():
                    logger.debug(f"Replacing incomplete cache entry: {entry_dir}")
                    safe_rmtree(entry_dir, require_prefix=self.root)
                entry_dir.mkdir(parents=True, exist_ok=True)

                target = entry_dir / target_file
                shutil.copy2(source_file, target)
                make_executable(target)

                metadata = {
                    "tool": tool_name,
                    "version": clean_version(version),
                    "arch": arch,
                    "file": target_file,
                    "source": source,
                    "cached_at": datetime.now(timezone.utc).isoformat(),
                }
                atomic_write(marker, json.dumps(metadata, indent=2))
            except (OSError, ValueError) as e:
                logger.error(f"Failed to cache {tool_name} {version}: {e}")
                raise CacheWriteError(
                    f"Failed to cache {tool_name} {version}: {e}"
                ) from e

        logger.info(f"Cached {tool_name} {clean_version(version)} ({arch}) at {entry_dir}")
        return entry_dir

    def remove(
        self, tool_name: str, version: Optional[str] = None, arch: Optional[str] = None
    ) -> int:
        """
        Remove cached entries.

        Args:
            tool_name: Tool (package) name
            version: Only remove this version (default: all versions)
            arch: Only remove this architecture (default: all architectures)

        Returns:
            Number of entries removed

        Raises:
            CacheWriteError: If an entry cannot be removed
        """
        removed = 0
        for entry in self.list_entries():
            if entry.tool != tool_name:
                continue
            if version is not None and entry.version != clean_version(version):
                continue
            if arch is not None and entry.arch != arch:
                continue

            with self._lock(entry.tool, entry.version, entry.arch):
                try:
                    self._marker_path(entry.path).unlink(missing_ok=True)
                    safe_rmtree(entry.path, require_prefix=self.root)
                except OSError as e:
                    raise CacheWriteError(
                        f"Failed to remove {entry.tool} {entry.version}: {e}"
                    ) from e

            logger.info(f"Removed {entry.tool} {entry.version} ({entry.arch})")
            removed += 1

        return removed


__all__ = [
    "CachedTool",
    "ToolCache",
    "clean_version",
    "is_explicit_version",
]
