"""Reusable fixtures for ActionKit tests."""
