"""
Unit tests for download module.

Tests download functionality with mocked network requests.
"""

import hashlib

import pytest
import requests
import responses

from actionkit.core.download import (
    DownloadProgress,
    StreamingHasher,
    download_file,
    download_tool,
    format_progress,
    verify_checksum,
)
from actionkit.core.exceptions import ChecksumError, DownloadError

URL = "https://example.test/org/actions/releases/download/v1.2.3/actions-v1.2.3-linux-x64.tar.gz"


class TestStreamingHasher:
    """Test StreamingHasher class."""

    def test_create_sha256_hasher(self):
        """Test creating SHA256 hasher."""
        hasher = StreamingHasher("sha256")
        assert hasher.algorithm == "sha256"

    def test_create_sha512_hasher(self):
        """Test creating SHA512 hasher."""
        hasher = StreamingHasher("SHA512")
        assert hasher.algorithm == "sha512"

    def test_unsupported_algorithm(self):
        """Test unsupported algorithm raises ValueError."""
        with pytest.raises(ValueError, match="Unsupported hash algorithm"):
            StreamingHasher("md5")

    def test_update_and_finalize(self):
        """Test updating hasher and getting final hash."""
        hasher = StreamingHasher("sha256")
        hasher.update(b"hello ")
        hasher.update(b"world")

        assert hasher.finalize() == hashlib.sha256(b"hello world").hexdigest()

    def test_case_insensitive_verify(self):
        """Test verify is case-insensitive."""
        hasher = StreamingHasher("sha256")
        hasher.update(b"test")

        expected = hashlib.sha256(b"test").hexdigest()
        assert hasher.verify(expected.upper()) is True
        assert hasher.verify("a" * 64) is False


class TestFormatProgress:
    """Test progress formatting."""

    def test_known_size(self):
        """Test progress string with known total size."""
        progress = DownloadProgress(
            bytes_downloaded=52428800,
            total_bytes=104857600,
            percentage=50.0,
            speed_bps=1048576,
            eta_seconds=50,
        )

        result = str(progress)

        assert "50.0/100.0 MB" in result
        assert "50.0%" in result
        assert "1.0 MB/s" in result
        assert "ETA: 50s" in result

    def test_unknown_size(self):
        """Test progress string without total size."""
        progress = DownloadProgress(1048576, 0, 0, 1048576, 0)
        assert format_progress(progress) == "1.0 MB at 1.0 MB/s"


class TestDownloadFile:
    """Test download_file()."""

    @responses.activate
    def test_successful_download(self, tmp_path):
        """Test downloading a file."""
        responses.add(responses.GET, URL, body=b"archive-bytes", status=200)

        destination = tmp_path / "sub" / "archive.tar.gz"
        result = download_file(URL, destination)

        assert result == destination
        assert destination.read_bytes() == b"archive-bytes"
        assert responses.calls[0].request.headers["User-Agent"] == "actionkit"

    @responses.activate
    def test_checksum_verified(self, tmp_path):
        """Test matching checksum passes."""
        data = b"archive-bytes"
        responses.add(responses.GET, URL, body=data, status=200)

        destination = tmp_path / "archive.tar.gz"
        download_file(URL, destination, expected_sha256=hashlib.sha256(data).hexdigest())

        assert destination.exists()

    @responses.activate
    def test_checksum_mismatch_removes_file(self, tmp_path):
        """Test mismatching checksum raises and removes the download."""
        responses.add(responses.GET, URL, body=b"tampered", status=200)

        destination = tmp_path / "archive.tar.gz"
        with pytest.raises(ChecksumError, match="Checksum mismatch"):
            download_file(URL, destination, expected_sha256="0" * 64)

        assert not destination.exists()

    def test_checksum_error_is_download_error(self):
        """Test ChecksumError is a DownloadError."""
        assert issubclass(ChecksumError, DownloadError)

    @responses.activate
    def test_http_error_names_url(self, tmp_path):
        """Test HTTP errors become DownloadError naming the URL."""
        responses.add(responses.GET, URL, status=404)

        with pytest.raises(DownloadError) as exc_info:
            download_file(URL, tmp_path / "archive.tar.gz")

        assert URL in str(exc_info.value)
        assert "404" in str(exc_info.value)

    @responses.activate
    def test_connection_error(self, tmp_path):
        """Test network errors become DownloadError."""
        responses.add(
            responses.GET, URL, body=requests.exceptions.ConnectionError("refused")
        )

        with pytest.raises(DownloadError, match="Failed to download"):
            download_file(URL, tmp_path / "archive.tar.gz")

    @responses.activate
    def test_no_retry_by_default(self, tmp_path):
        """Test a failed download is attempted once."""
        responses.add(responses.GET, URL, status=500)

        with pytest.raises(DownloadError):
            download_file(URL, tmp_path / "archive.tar.gz")

        assert len(responses.calls) == 1

    @responses.activate
    def test_retries_when_requested(self, tmp_path, monkeypatch):
        """Test max_retries retries transient failures."""
        monkeypatch.setattr("actionkit.core.download.time.sleep", lambda s: None)
        responses.add(responses.GET, URL, status=503)
        responses.add(responses.GET, URL, body=b"ok", status=200)

        destination = tmp_path / "archive.tar.gz"
        download_file(URL, destination, max_retries=2)

        assert destination.read_bytes() == b"ok"
        assert len(responses.calls) == 2

    @responses.activate
    def test_resume_sends_range(self, tmp_path):
        """Test resume requests the remaining bytes."""
        destination = tmp_path / "archive.tar.gz"
        destination.write_bytes(b"first-")
        responses.add(responses.GET, URL, body=b"second", status=206)

        download_file(URL, destination, resume=True)

        assert destination.read_bytes() == b"first-second"
        assert responses.calls[0].request.headers["Range"] == "bytes=6-"

    @responses.activate
    def test_progress_callback(self, tmp_path):
        """Test the final progress update is reported."""
        data = b"x" * 10000
        responses.add(
            responses.GET,
            URL,
            body=data,
            status=200,
            headers={"Content-Length": str(len(data))},
        )
        updates = []

        download_file(URL, tmp_path / "archive.tar.gz", progress_callback=updates.append)

        assert updates
        assert updates[-1].bytes_downloaded == len(data)
        assert updates[-1].percentage == 100.0

    @pytest.mark.parametrize(
        "url,destination,max_retries",
        [("", "archive", 1), (URL, "archive", 0)],
    )
    def test_invalid_arguments(self, tmp_path, url, destination, max_retries):
        """Test invalid arguments raise ValueError."""
        with pytest.raises(ValueError):
            download_file(url, tmp_path / destination, max_retries=max_retries)


class TestDownloadTool:
    """Test download_tool()."""

    @responses.activate
    def test_keeps_url_file_name(self, tmp_path):
        """Test archive keeps the URL file name in a unique directory."""
        responses.add(responses.GET, URL, body=b"archive", status=200)

        first = download_tool(URL, tmp_path)
        second = download_tool(URL, tmp_path)

        assert first.name == "actions-v1.2.3-linux-x64.tar.gz"
        assert first.parent.parent == tmp_path
        assert first.parent != second.parent

    @responses.activate
    def test_passes_timeout(self, tmp_path, monkeypatch):
        """Test timeout is forwarded to the request."""
        responses.add(responses.GET, URL, body=b"archive", status=200)
        seen = {}
        original_get = requests.get

        def spy_get(*args, **kwargs):
            seen.update(kwargs)
            return original_get(*args, **kwargs)

        monkeypatch.setattr("actionkit.core.download.requests.get", spy_get)
        download_tool(URL, tmp_path, timeout=5)

        assert seen["timeout"] == 5


class TestVerifyChecksum:
    """Test verify_checksum()."""

    def test_verify(self, tmp_path):
        """Test verifying a file on disk."""
        path = tmp_path / "file.bin"
        path.write_bytes(b"content")

        assert verify_checksum(path, hashlib.sha256(b"content").hexdigest())
        assert not verify_checksum(path, "f" * 64)


@pytest.mark.integration
class TestDownloadIntegration:
    """Download from a real release server."""

    def test_download_release_asset(self, tmp_path):
        """Test a public release asset is downloaded under its URL file name."""
        url = (
            "https://github.com/cli/cli/releases/download/v2.40.0/"
            "gh_2.40.0_checksums.txt"
        )

        path = download_tool(url, tmp_path, timeout=30)

        assert path.name == "gh_2.40.0_checksums.txt"
        assert path.stat().st_size > 0
