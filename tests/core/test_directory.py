"""
Unit tests for directory resolution.
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from actionkit.core.directory import get_global_cache_dir, get_temp_dir, get_tool_cache_dir
from actionkit.core.exceptions import ConfigurationError


class TestGlobalCacheDir:
    """Test get_global_cache_dir()."""

    def test_unix_home(self):
        """Test ~/.actionkit on Unix."""
        if os.name == "nt":
            pytest.skip("Cannot test PosixPath on Windows")
        with patch("pathlib.Path.home", return_value=Path("/home/runner")):
            assert get_global_cache_dir() == Path("/home/runner/.actionkit")

    def test_windows_user_profile(self):
        """Test %USERPROFILE%\\.actionkit on Windows."""
        if os.name != "nt":
            pytest.skip("Cannot instantiate WindowsPath on non-Windows system")
        with patch.dict(os.environ, {"USERPROFILE": r"C:\Users\runner"}):
            assert get_global_cache_dir() == Path(r"C:\Users\runner\.actionkit")

    def test_windows_without_user_profile(self):
        """Test missing USERPROFILE on Windows."""
        with patch("os.name", "nt"):
            with patch.dict(os.environ, {}, clear=True):
                with pytest.raises(ConfigurationError, match="USERPROFILE"):
                    get_global_cache_dir()


class TestToolCacheDir:
    """Test get_tool_cache_dir()."""

    def test_runner_tool_cache(self):
        """Test RUNNER_TOOL_CACHE wins."""
        assert get_tool_cache_dir({"RUNNER_TOOL_CACHE": "/opt/hostedtoolcache"}) == Path(
            "/opt/hostedtoolcache"
        )

    def test_fallback(self, isolated_home):
        """Test fallback to the global cache."""
        assert get_tool_cache_dir({"RUNNER_TOOL_CACHE": "  "}) == (
            get_global_cache_dir() / "tool-cache"
        )

    def test_reads_os_environ(self, tmp_path, monkeypatch):
        """Test os.environ is the default environment."""
        monkeypatch.setenv("RUNNER_TOOL_CACHE", str(tmp_path))
        assert get_tool_cache_dir() == tmp_path


class TestTempDir:
    """Test get_temp_dir()."""

    def test_runner_temp(self):
        """Test RUNNER_TEMP wins."""
        assert get_temp_dir({"RUNNER_TEMP": "/home/runner/work/_temp"}) == Path(
            "/home/runner/work/_temp"
        )

    def test_fallback(self):
        """Test fallback to the system temp directory."""
        assert get_temp_dir({}) == Path(tempfile.gettempdir())
