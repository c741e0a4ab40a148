"""Persistent stores used across javadep runs."""

from .scan_cache import ScanCache, cache_key

__all__ = ["ScanCache", "cache_key"]
