"""Watcher lifecycle states."""

from enum import Enum


class WatcherState(str, Enum):
    """Starting -> Watching -> Stopping -> Stopped; no restart."""

    STARTING = "starting"

    WATCHING = "watching"

    STOPPING = "stopping"

    STOPPED = "stopped"
