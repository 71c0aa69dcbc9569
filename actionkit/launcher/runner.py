"""
Launcher entry points.

LauncherRunner resolves the binary and executes it with the sub-command as
its only argument. run_action() is the single top-level error boundary: any
failure is reported once through the workflow failure sink and turned into
exit code 1.
"""

import logging
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence, Union

from actionkit.core import workflow
from actionkit.core.config import (
    DEFAULT_CONFIG_NAME,
    LauncherConfig,
    ToolIdentity,
    load_config,
)
from actionkit.core.exceptions import ExecutionError, UnsupportedPlatformError
from actionkit.core.platform import PlatformInfo, detect_platform
from actionkit.core.process import exec_tool
from actionkit.core.tool_cache import ToolCache
from actionkit.launcher.resolver import BinaryResolver

logger = logging.getLogger(__name__)


class LauncherRunner:
    """Resolves the binary for a platform and runs it."""

    def __init__(
        self,
        resolver: BinaryResolver,
        executor: Callable[[Path, Sequence[str]], int] = exec_tool,
    ):
        self.resolver = resolver
        self.executor = executor

    def executable_path(
        self, cache_dir: Path, platform: PlatformInfo, identity: ToolIdentity
    ) -> Path:
        """Path of the executable inside a cache directory."""
        return Path(cache_dir) / platform.spec.executable_name(identity.binary_name)

    def run(self, platform: PlatformInfo, identity: ToolIdentity, sub_command: str) -> int:
        """
        Resolve the binary and execute it with the sub-command.

        Args:
            platform: Host platform
            identity: Tool identity
            sub_command: Single argument passed to the binary

        Returns:
            0 on success

        Raises:
            UnsupportedPlatformError: If the platform has no released binary;
                raised before any cache, download or exec call
            ExecutionError: If the binary cannot be started or exits non-zero
        """
        if not platform.is_supported:
            raise UnsupportedPlatformError(platform.identifier)

        cache_dir = self.resolver.resolve_binary_path(platform, identity)
        executable = self.executable_path(cache_dir, platform, identity)

        logger.debug(f"Executing {executable} {sub_command}")
        exit_code = self.executor(executable, [sub_command])
        if exit_code != 0:
            raise ExecutionError(
                f"The process '{executable}' failed with exit code {exit_code}",
                exit_code=exit_code,
            )
        return 0


def build_runner(config: LauncherConfig) -> LauncherRunner:
    """Create a LauncherRunner with the real collaborators for a configuration."""
    resolver = BinaryResolver(
        cache=ToolCache(root=config.tool_cache_dir),
        temp_dir=config.temp_dir,
        download_timeout=config.download_timeout,
        checksums=config.checksums,
    )
    return LauncherRunner(resolver)


def run_action(config: LauncherConfig, runner: Optional[LauncherRunner] = None) -> int:
    """
    Run the launcher and report failure to the workflow.

    Args:
        config: Launcher configuration
        runner: Runner to use (default: built from config)

    Returns:
        0 on success, 1 on any failure
    """
    try:
        platform = detect_platform(config.platform_identifier)
        runner = runner or build_runner(config)
        runner.run(platform, config.identity, config.sub_command)
    except Exception as e:
        logger.debug(f"Launcher failed: {e}", exc_info=True)
        workflow.set_failed(str(e))
        return 1

    return 0


def launch(
    script_path: Union[str, Path],
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Entry point for per-action shim scripts.

    The sub-command is the name of the directory holding the script, and the
    configuration defaults to actionkit.yaml one level above it::

        actions/
            actionkit.yaml
            wait/
                action.yml
                main.py     # sys.exit(launch(__file__))

    Args:
        script_path: Path of the calling script
        config_path: Configuration file (default: ../actionkit.yaml)
        environ: Environment (default: os.environ)

    Returns:
        Process exit code (0 or 1)
    """
    action_dir = Path(script_path).resolve().parent
    sub_command = action_dir.name
    if config_path is None:
        config_path = action_dir.parent / DEFAULT_CONFIG_NAME

    try:
        config = load_config(config_path, sub_command, environ=environ)
    except Exception as e:
        logger.debug(f"Invalid configuration: {e}", exc_info=True)
        workflow.set_failed(str(e))
        return 1

    return run_action(config)


__all__ = [
    "LauncherRunner",
    "build_runner",
    "run_action",
    "launch",
]
