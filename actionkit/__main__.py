"""
Entry point for running ActionKit CLI as a module.

Usage: python -m actionkit [command] [options]
"""

from actionkit.cli.parser import main

if __name__ == "__main__":
    main()
