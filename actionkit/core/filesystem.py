"""
File system utilities for ActionKit.

This module provides the platform-aware file operations the launcher needs:
- Tar archive extraction that rejects traversal, escaping links and devices
- Safe file operations (atomic writes, guarded deletion)
- Transient workspace directories under the runner temp directory
"""

import os
import shutil
import stat
import tarfile
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from actionkit.core.exceptions import ExtractionError, InsecureArchiveError

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Prevents directory traversal attacks (e.g., paths containing '../').

    Args:
        path: Member path from archive
        destination: Extraction destination

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not member_path.is_relative_to(destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def _validate_archive_member(member: tarfile.TarInfo, destination: Path) -> None:
    """
    Validate an archive member, including where links point.

    Symlink targets are relative to the member's directory, hard link
    targets to the archive root. Both must stay inside the destination.

    Raises:
        InsecureArchiveError: If the member or its link target escapes the
            destination, or the member is a device node
    """
    _validate_archive_path(member.name, destination)

    if member.isdev():
        raise InsecureArchiveError(
            f"Archive member '{member.name}' is a device node. "
            "Extraction has been blocked."
        )

    if member.issym() or member.islnk():
        root = os.path.normpath(destination.resolve())
        base = os.path.dirname(member.name) if member.issym() else ""
        target = os.path.normpath(os.path.join(root, base, member.linkname))
        if os.path.commonpath([root, target]) != root:
            raise InsecureArchiveError(
                f"Archive member '{member.name}' links outside the destination "
                f"('{member.linkname}'). Extraction has been blocked."
            )


def extract_tar(archive_path: Union[str, Path], destination: Union[str, Path]) -> Path:
    """
    Extract a tar archive into a destination directory.

    Compression (gzip, bzip2, xz or none) is detected from the archive
    contents, so the archive file name does not need an extension.

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to (created if missing)

    Returns:
        Path to the destination directory

    Raises:
        InsecureArchiveError: If archive contains malicious paths
        ExtractionError: If the archive is missing, corrupt or unreadable

    Example:
        >>> extract_tar('actions-v1.2.3-linux-x64.tar.gz', '/tmp/work')
        PosixPath('/tmp/work')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.is_file():
        raise ExtractionError(f"Archive not found: {archive_path}")

    try:
        destination.mkdir(parents=True, exist_ok=True)

        with tarfile.open(archive_path, "r:*") as tar:
            members = tar.getmembers()

            # Validate all members first
            for member in members:
                _validate_archive_member(member, destination)

            # Extraction filters ship with 3.12 and security releases of 3.9-3.11
            if hasattr(tarfile, "data_filter"):
                tar.extractall(destination, filter="data")
            else:
                tar.extractall(destination)

    except InsecureArchiveError:
        raise
    except (tarfile.TarError, OSError) as e:
        raise ExtractionError(f"Failed to extract {archive_path.name}: {e}") from e

    return destination


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    This ensures the file is never in a partially-written state.
    If the write fails, the original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Create temp file in same directory (ensures same filesystem)
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        OSError: If deletion fails

    Example:
        >>> safe_rmtree('/tmp/build', require_prefix='/tmp')
        >>> safe_rmtree('/usr/bin', require_prefix='/home')  # ValueError
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not path.is_relative_to(require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if IS_WINDOWS:

        def handle_remove_readonly(func, failed_path, exc):
            """Error handler for Windows read-only files."""
            if not os.access(failed_path, os.W_OK):
                os.chmod(failed_path, stat.S_IWRITE)
                func(failed_path)
            else:
                raise

        shutil.rmtree(path, onerror=handle_remove_readonly)
    else:
        shutil.rmtree(path)


def make_executable(path: Union[str, Path]) -> None:
    """Add execute permission for everyone who can read the file."""
    path = Path(path)
    if IS_WINDOWS:
        return

    mode = path.stat().st_mode
    path.chmod(mode | ((mode & 0o444) >> 2))


# ============================================================================
# Temporary Directory Management
# ============================================================================


@contextmanager
def temporary_directory(
    prefix: str = "actionkit_",
    parent: Optional[Union[str, Path]] = None,
    cleanup: bool = True,
) -> Iterator[Path]:
    """
    Context manager for temporary directory with automatic cleanup.

    Args:
        prefix: Prefix for temp directory name
        parent: Directory to create the workspace in (default: system temp)
        cleanup: If True, remove directory on exit

    Yields:
        Path to temporary directory

    Example:
        >>> with temporary_directory(parent=os.environ["RUNNER_TEMP"]) as tmp:
        ...     (tmp / 'file.txt').write_text('test')
    """
    if parent is not None:
        Path(parent).mkdir(parents=True, exist_ok=True)
    temp_dir = Path(tempfile.mkdtemp(prefix=prefix, dir=parent))

    try:
        yield temp_dir
    finally:
        if cleanup and temp_dir.exists():
            safe_rmtree(temp_dir)


__all__ = [
    "extract_tar",
    "atomic_write",
    "safe_rmtree",
    "make_executable",
    "temporary_directory",
]
