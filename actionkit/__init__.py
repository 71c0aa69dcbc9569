"""
ActionKit: cached binary launcher for CI actions.

Finds a platform-specific release binary in the runner's tool cache, or
downloads and caches it, then runs it with a sub-command.
"""
