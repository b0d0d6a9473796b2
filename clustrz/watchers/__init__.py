"""Monitoring applications built on clustrz services."""

from clustrz.watchers.oome import OOMEState, OOMEWatcher, WatcherSettings

__all__ = ["OOMEState", "OOMEWatcher", "WatcherSettings"]
