"""
Cache-or-fetch-then-exec launcher.

Resolves a platform-specific binary from the tool cache (downloading and
caching the release archive on a miss) and runs it with a sub-command.
"""

from actionkit.launcher.resolver import BinaryResolver, DownloadSpec, build_download_spec
from actionkit.launcher.runner import LauncherRunner, build_runner, launch, run_action

__all__ = [
    "BinaryResolver",
    "DownloadSpec",
    "build_download_spec",
    "LauncherRunner",
    "build_runner",
    "launch",
    "run_action",
]
