"""
Cache command implementation.

Lists and removes entries of the tool cache.
"""

import logging

from actionkit.cli.utils import load_launcher_config, print_error
from actionkit.core.directory import get_tool_cache_dir
from actionkit.core.exceptions import ActionKitError
from actionkit.core.tool_cache import ToolCache

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the cache command.

    Args:
        args: Parsed command-line arguments with:
            - cache_command: 'list' or 'clean'
            - tool: Tool to remove (clean only)
            - tool_version: Version to remove (clean only)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    cache_command = getattr(args, "cache_command", None)

    if cache_command == "list":
        return _list_entries(ToolCache(root=get_tool_cache_dir()))
    elif cache_command == "clean":
        return _clean(args)
    else:
        print("Error: Specify a cache command: list or clean")
        print("Use 'actionkit cache --help' for more information")
        return 1


def _list_entries(cache: ToolCache) -> int:
    """
    Print every completed cache entry.

    Returns:
        Exit code (0 for success)
    """
    entries = cache.list_entries()
    if not entries:
        print(f"No cached binaries in {cache.root}")
        return 0

    print(f"Cached binaries in {cache.root}:")
    for entry in entries:
        print(f"  {entry.tool} {entry.version} ({entry.arch})")
        print(f"    Path: {entry.path}")
        if entry.source:
            print(f"    Source: {entry.source}")
    return 0


def _clean(args) -> int:
    """
    Remove cache entries for one tool.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        tool = args.tool
        if not tool:
            tool = load_launcher_config(args, "cache").identity.package_name

        cache = ToolCache(root=get_tool_cache_dir())
        removed = cache.remove(tool, version=args.tool_version)
    except ActionKitError as e:
        print_error(str(e))
        return 1

    target = f"{tool} {args.tool_version}" if args.tool_version else tool
    print(f"Removed {removed} cache entr{'y' if removed == 1 else 'ies'} for {target}")
    return 0
