"""Kinds of events emitted by change watchers."""

from enum import Enum


class ChangeKind(str, Enum):
    """Normalized filesystem change kinds.

    ``EXIT`` is not a filesystem change: a watcher emits it once when its
    backend failed fatally and the pipeline must shut down.
    """

    CREATED = "created"

    MODIFIED = "modified"

    DELETED = "deleted"

    EXIT = "exit"
