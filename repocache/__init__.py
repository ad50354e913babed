"""Deduplicated local cache of remote git repositories."""

__version__ = "0.1.0"
