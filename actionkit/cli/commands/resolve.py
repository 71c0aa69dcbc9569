"""
Resolve command implementation.

Prints the directory holding the binary for the configured version,
downloading and caching it when needed.
"""

import logging

from actionkit.cli.utils import load_launcher_config, print_error
from actionkit.core.exceptions import ActionKitError
from actionkit.core.platform import detect_platform
from actionkit.launcher.runner import build_runner

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the resolve command.

    Args:
        args: Parsed command-line arguments with:
            - dry_run: Only report the download URL and cache state

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        config = load_launcher_config(args, "resolve")
        platform = detect_platform(config.platform_identifier)
        resolver = build_runner(config).resolver

        if args.dry_run:
            return _dry_run(resolver, platform, config)

        cache_dir = resolver.resolve_binary_path(platform, config.identity)
    except (ActionKitError, ValueError) as e:
        print_error(str(e))
        return 1

    print(cache_dir)
    return 0


def _dry_run(resolver, platform, config) -> int:
    """
    Show what resolving would do without network access.

    Returns:
        Exit code (0 for success)
    """
    identity = config.identity
    download = resolver.download_spec(platform, identity)
    cached = resolver.find_cached(identity)

    print(f"Package:  {identity.package_name}")
    print(f"Version:  {identity.version}")
    print(f"Platform: {platform}")
    print(f"Archive:  {download.file_name}")
    print(f"URL:      {download.url}")
    if download.expected_sha256:
        print(f"SHA256:   {download.expected_sha256}")
    print(f"Cached:   {cached if cached is not None else 'no'}")
    return 0
