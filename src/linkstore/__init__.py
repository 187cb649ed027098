"""Symlink-based package installer backed by a shared content-addressed store."""

__version__ = "0.1.0"
