"""Lockfile parsers."""
