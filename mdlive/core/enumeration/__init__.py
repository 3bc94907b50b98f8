"""enumeration"""

from .broadcast_kind import BroadcastKind
from .change_kind import ChangeKind
from .watcher_state import WatcherState

__all__ = [
    "BroadcastKind",
    "ChangeKind",
    "WatcherState",
]
