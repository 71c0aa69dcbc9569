"""
Unit tests for launcher configuration.
"""

from pathlib import Path

import pytest

from actionkit.core.config import (
    DEFAULT_CONFIG_NAME,
    LauncherConfig,
    ToolIdentity,
    load_config,
    parse_identity,
)
from actionkit.core.exceptions import ConfigurationError


class TestToolIdentity:
    """Test ToolIdentity validation and derived values."""

    def test_binary_name_defaults_to_last_package_segment(self):
        """Test scoped package names yield the last segment."""
        identity = ToolIdentity("@org/actions", "1.2.3", "https://example.test/org/actions")
        assert identity.binary_name == "actions"

    def test_unscoped_package(self):
        """Test unscoped package name is the binary name."""
        identity = ToolIdentity("actions", "1.2.3", "https://example.test/org/actions")
        assert identity.binary_name == "actions"

    def test_explicit_binary_name(self):
        """Test explicit binary name wins."""
        identity = ToolIdentity(
            "@org/actions", "1.2.3", "https://example.test/org/actions", binary_name="act"
        )
        assert identity.binary_name == "act"

    def test_leading_v_stripped(self):
        """Test a 'v' prefix is not doubled in the release tag."""
        identity = ToolIdentity("@org/actions", "v1.2.3", "https://example.test/org/actions")
        assert identity.version == "1.2.3"
        assert identity.release_tag == "v1.2.3"

    def test_release_base_url(self):
        """Test release base URL drops a trailing slash."""
        identity = ToolIdentity("@org/actions", "1.2.3", "https://example.test/org/actions/")
        assert identity.release_base_url == (
            "https://example.test/org/actions/releases/download/v1.2.3"
        )

    @pytest.mark.parametrize(
        "package,version,repository",
        [
            ("", "1.2.3", "https://example.test/org/actions"),
            ("@org/actions", "", "https://example.test/org/actions"),
            ("@org/actions", "1.2.3", "ftp://example.test/org/actions"),
            ("@org/actions", "1.2.3", ""),
            ("@org/", "1.2.3", "https://example.test/org/actions"),
        ],
    )
    def test_invalid_identity(self, package, version, repository):
        """Test invalid values raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            ToolIdentity(package, version, repository)

    def test_immutable(self, identity):
        """Test identity cannot be modified."""
        with pytest.raises(AttributeError):
            identity.version = "2.0.0"


class TestParseIdentity:
    """Test parse_identity()."""

    def test_missing_keys_listed(self):
        """Test all missing keys are named."""
        with pytest.raises(ConfigurationError, match="version, repository"):
            parse_identity({"package": "@org/actions"})

    def test_numeric_version(self):
        """Test YAML floats are accepted as version strings."""
        identity = parse_identity(
            {"package": "actions", "version": 1.2, "repository": "https://example.test/a"}
        )
        assert identity.version == "1.2"


class TestLoadConfig:
    """Test load_config()."""

    def test_load(self, config_file, tmp_path):
        """Test loading a complete configuration."""
        environ = {
            "RUNNER_TEMP": str(tmp_path / "temp"),
            "RUNNER_TOOL_CACHE": str(tmp_path / "cache"),
        }
        config = load_config(config_file, "wait", platform_identifier="linux", environ=environ)

        assert isinstance(config, LauncherConfig)
        assert config.identity.package_name == "@org/actions"
        assert config.identity.binary_name == "actions"
        assert config.sub_command == "wait"
        assert config.platform_identifier == "linux"
        assert config.temp_dir == tmp_path / "temp"
        assert config.tool_cache_dir == tmp_path / "cache"
        assert config.download_timeout == 30
        assert config.checksums == {}

    def test_checksums(self, tmp_path):
        """Test per-platform checksums are read."""
        config_path = tmp_path / DEFAULT_CONFIG_NAME
        config_path.write_text(
            "package: actions\n"
            "version: 1.0.0\n"
            "repository: https://example.test/org/actions\n"
            "checksums:\n"
            "  linux: ABC123\n"
            "  windows: ''\n"
        )
        config = load_config(config_path, "run", environ={})
        assert config.checksums == {"linux": "ABC123"}
        assert config.download_timeout == 60

    def test_missing_file(self, tmp_path):
        """Test missing configuration file."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.yaml", "run", environ={})

    def test_invalid_yaml(self, tmp_path):
        """Test malformed YAML."""
        config_path = tmp_path / DEFAULT_CONFIG_NAME
        config_path.write_text("package: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(config_path, "run", environ={})

    @pytest.mark.parametrize("content", ["", "- a\n- b\n", "just a string\n"])
    def test_not_a_mapping(self, tmp_path, content):
        """Test empty or non-mapping documents."""
        config_path = tmp_path / DEFAULT_CONFIG_NAME
        config_path.write_text(content)
        with pytest.raises(ConfigurationError):
            load_config(config_path, "run", environ={})

    @pytest.mark.parametrize("timeout", ["soon", 0, -5])
    def test_invalid_timeout(self, tmp_path, timeout):
        """Test invalid download timeouts."""
        config_path = tmp_path / DEFAULT_CONFIG_NAME
        config_path.write_text(
            "package: actions\n"
            "version: 1.0.0\n"
            "repository: https://example.test/org/actions\n"
            f"download:\n  timeout: {timeout}\n"
        )
        with pytest.raises(ConfigurationError, match="timeout"):
            load_config(config_path, "run", environ={})

    @pytest.mark.parametrize("sub_command", ["", "   "])
    def test_empty_sub_command(self, config_file, sub_command):
        """Test empty sub-command is rejected."""
        with pytest.raises(ConfigurationError, match="Sub-command"):
            load_config(config_file, sub_command, environ={})

    def test_accepts_string_path(self, config_file):
        """Test a str path is accepted."""
        config = load_config(str(config_file), "wait", environ={"RUNNER_TEMP": "/tmp"})
        assert config.temp_dir == Path("/tmp")
