"""
Network download manager with progress tracking and checksum verification.

This module provides the download collaborator of the launcher:
- HTTP/HTTPS downloads with TLS verification (via requests)
- Resume partial downloads (using Range headers)
- Progress reporting (bytes, percentage, speed, ETA)
- Optional SHA256 verification while streaming
- Timeout handling

Failures are not retried unless the caller asks for it; a failed download is
reported as DownloadError with the URL in the message.
"""

import hashlib
import logging
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlparse

import requests
from requests.exceptions import RequestException

from actionkit.core.exceptions import ChecksumError, DownloadError

logger = logging.getLogger(__name__)

USER_AGENT = "actionkit"


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


class StreamingHasher:
    """Compute hash incrementally for streaming downloads."""

    def __init__(self, algorithm: str = "sha256"):
        """
        Initialize streaming hasher.

        Args:
            algorithm: Hash algorithm ('sha256' or 'sha512')

        Raises:
            ValueError: If algorithm is not supported
        """
        self.algorithm = algorithm.lower()

        if self.algorithm == "sha256":
            self.hasher = hashlib.sha256()
        elif self.algorithm == "sha512":
            self.hasher = hashlib.sha512()
        else:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    def update(self, data: bytes):
        """Add data to hash computation."""
        self.hasher.update(data)

    def finalize(self) -> str:
        """Get final hash value as hex string."""
        return self.hasher.hexdigest()

    def verify(self, expected_hash: str) -> bool:
        """
        Check if computed hash matches expected value.

        Args:
            expected_hash: Expected hash value (hex string)

        Returns:
            True if hashes match, False otherwise
        """
        return self.finalize().lower() == expected_hash.lower()


def download_file(
    url: str,
    destination: Path,
    expected_sha256: Optional[str] = None,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    resume: bool = False,
    timeout: int = 60,
    max_retries: int = 1,
) -> Path:
    """
    Download file from URL to destination with optional checksum verification.

    Args:
        url: URL to download from
        destination: Local path to save file
        expected_sha256: Expected SHA256 hash (verified during download)
        progress_callback: Optional callback for progress updates
        resume: Whether to resume partial downloads
        timeout: Request timeout in seconds
        max_retries: Maximum number of attempts (1 means no retry)

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If download fails
        ChecksumError: If checksum doesn't match expected value
        ValueError: If URL or destination is invalid

    Example:
        >>> from actionkit.core.download import download_file
        >>> url = "https://example.com/actions-v1.2.3-linux-x64.tar.gz"
        >>> download_file(url, Path("work/actions.tar.gz"))
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    resume_from = 0
    if resume and destination.exists():
        resume_from = destination.stat().st_size
        logger.info(f"Resuming download from byte {resume_from}")

    for attempt in range(max_retries):
        try:
            return _download_with_progress(
                url=url,
                destination=destination,
                resume_from=resume_from,
                expected_sha256=expected_sha256,
                progress_callback=progress_callback,
                timeout=timeout,
            )
        except RequestException as e:
            if attempt == max_retries - 1:
                raise DownloadError(f"Failed to download {url}: {_describe(e)}") from e

            backoff_seconds = 2**attempt
            logger.warning(
                f"Download attempt {attempt + 1} failed: {e}. "
                f"Retrying in {backoff_seconds}s..."
            )
            time.sleep(backoff_seconds)
        except OSError as e:
            raise DownloadError(f"Failed to write {destination}: {e}") from e

    # Should never reach here, but just in case
    raise DownloadError(f"Failed to download {url}")


def _describe(error: RequestException) -> str:
    """Short description of a requests failure (status code when known)."""
    response = getattr(error, "response", None)
    if response is not None and response.status_code:
        return f"Unexpected HTTP response: {response.status_code}"
    return str(error)


def _download_with_progress(
    url: str,
    destination: Path,
    resume_from: int,
    expected_sha256: Optional[str],
    progress_callback: Optional[Callable[[DownloadProgress], None]],
    timeout: int,
) -> Path:
    """
    Perform download with streaming and progress updates.

    This is an internal function called by download_file().

    Raises:
        ChecksumError: If checksum doesn't match
        RequestException: If HTTP request fails
    """
    headers = {"User-Agent": USER_AGENT}
    if resume_from > 0:
        headers["Range"] = f"bytes={resume_from}-"

    logger.info(f"Downloading from {url}")

    with requests.get(
        url, headers=headers, stream=True, timeout=timeout, allow_redirects=True
    ) as response:
        response.raise_for_status()

        content_length = response.headers.get("content-length")
        if content_length:
            total_size = int(content_length) + resume_from
        else:
            total_size = 0  # Unknown size

        mode = "ab" if resume_from > 0 else "wb"
        hasher = StreamingHasher("sha256") if expected_sha256 else None

        # If resuming, need to re-read existing bytes for checksum
        if resume_from > 0 and hasher:
            logger.debug(f"Re-computing hash for first {resume_from} bytes")
            with open(destination, "rb") as f:
                while chunk := f.read(8192):
                    hasher.update(chunk)

        downloaded = resume_from
        start_time = time.time()
        last_progress_time = start_time

        with open(destination, mode) as f:
            for chunk in response.iter_content(chunk_size=8192):
                if not chunk:
                    continue

                f.write(chunk)
                downloaded += len(chunk)

                if hasher:
                    hasher.update(chunk)

                # Report progress (max once per 0.5 seconds to avoid spam)
                current_time = time.time()
                if progress_callback and (
                    current_time - last_progress_time >= 0.5
                    or downloaded == total_size
                ):
                    elapsed = current_time - start_time
                    speed = (downloaded - resume_from) / elapsed if elapsed > 0 else 0
                    remaining = total_size - downloaded if total_size > 0 else 0
                    eta = remaining / speed if speed > 0 else 0

                    progress_callback(
                        DownloadProgress(
                            bytes_downloaded=downloaded,
                            total_bytes=total_size if total_size > 0 else downloaded,
                            percentage=(downloaded / total_size * 100)
                            if total_size > 0
                            else 0,
                            speed_bps=speed,
                            eta_seconds=eta,
                        )
                    )
                    last_progress_time = current_time

    if expected_sha256 and hasher:
        if not hasher.verify(expected_sha256):
            actual_hash = hasher.finalize()
            destination.unlink()
            raise ChecksumError(
                f"Checksum mismatch for {destination.name}: "
                f"expected {expected_sha256}, got {actual_hash}"
            )
        logger.info("Checksum verified successfully")

    logger.info(f"Download complete: {destination}")
    return destination


def download_tool(
    url: str,
    destination_dir: Path,
    expected_sha256: Optional[str] = None,
    timeout: int = 60,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
) -> Path:
    """
    Download a release archive into a fresh directory.

    The archive keeps the file name from the URL and is placed in a unique
    sub-directory of destination_dir, so concurrent downloads never collide.

    Args:
        url: Archive URL
        destination_dir: Directory to download into (e.g. the runner temp dir)
        expected_sha256: Optional SHA256 the archive must match
        timeout: Request timeout in seconds
        progress_callback: Optional callback for progress updates

    Returns:
        Path to the downloaded archive

    Raises:
        DownloadError: If the download fails
        ChecksumError: If expected_sha256 is given and does not match
    """
    file_name = Path(urlparse(url).path).name or "download"
    destination = Path(destination_dir) / uuid.uuid4().hex / file_name

    return download_file(
        url,
        destination,
        expected_sha256=expected_sha256,
        progress_callback=progress_callback,
        timeout=timeout,
    )


def verify_checksum(file_path: Path, expected_sha256: str) -> bool:
    """
    Verify file SHA256 checksum.

    Args:
        file_path: Path to file to verify
        expected_sha256: Expected SHA256 hash (hex string)

    Returns:
        True if checksum matches, False otherwise

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    hasher = StreamingHasher("sha256")
    with open(file_path, "rb") as f:
        while chunk := f.read(8192):
            hasher.update(chunk)

    return hasher.verify(expected_sha256)


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"


__all__ = [
    "DownloadProgress",
    "StreamingHasher",
    "download_file",
    "download_tool",
    "verify_checksum",
    "format_progress",
]
