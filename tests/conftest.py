"""
Pytest configuration and shared fixtures for ActionKit tests.
"""

import logging

import pytest
from pathlib import Path

from actionkit.core.workflow import WorkflowCommandHandler

# Import test fixtures to make them available to all tests
# These imports register the fixtures with pytest's fixture discovery system
# ruff: noqa: F401
from tests.fixtures.archives import release_archive
from tests.fixtures.configs import config_file, identity


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """
    Skip integration tests unless --integration flag is provided.
    """
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def runner_env(tmp_path: Path, monkeypatch) -> dict:
    """Point RUNNER_TEMP/RUNNER_TOOL_CACHE at temporary directories."""
    temp = tmp_path / "runner-temp"
    tool_cache = tmp_path / "tool-cache"
    temp.mkdir()
    tool_cache.mkdir()

    monkeypatch.setenv("RUNNER_TEMP", str(temp))
    monkeypatch.setenv("RUNNER_TOOL_CACHE", str(tool_cache))
    monkeypatch.delenv("GITHUB_ACTIONS", raising=False)
    monkeypatch.delenv("RUNNER_DEBUG", raising=False)

    return {"RUNNER_TEMP": str(temp), "RUNNER_TOOL_CACHE": str(tool_cache)}


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))

    return fake_home


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Remove root handlers and level set by configure_logging()."""
    root = logging.getLogger()
    before = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in before and type(handler) in (
            logging.StreamHandler,
            WorkflowCommandHandler,
        ):
            root.removeHandler(handler)
    root.setLevel(level)
