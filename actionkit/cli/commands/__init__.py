"""Command implementations for the ActionKit CLI."""
