"""
Entry point for running ActionKit CLI as a module.

Usage: python -m actionkit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
