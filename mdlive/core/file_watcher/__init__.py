"""Change watcher backends.

All backends emit the same FileChange events and are selected by name with
``file_watcher.backend``:

- ``native``: watchfiles on kernel notifications
- ``poll``: watchfiles with forced polling
- ``watchdog``: watchdog observer thread
"""

from .base_file_watcher import BaseFileWatcher
from .watchdog_file_watcher import WatchdogFileWatcher
from .watchfiles_file_watcher import PollingFileWatcher, WatchfilesFileWatcher
from ..registry_factory import R

__all__ = [
    "BaseFileWatcher",
    "PollingFileWatcher",
    "WatchdogFileWatcher",
    "WatchfilesFileWatcher",
]

R.file_watchers.register("native")(WatchfilesFileWatcher)
R.file_watchers.register("poll")(PollingFileWatcher)
R.file_watchers.register("watchdog")(WatchdogFileWatcher)
