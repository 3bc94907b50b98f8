"""watchfiles based watchers: native kernel notifications or forced polling."""

import os
from collections.abc import Callable

from loguru import logger
from watchfiles import Change, awatch

from .base_file_watcher import BaseFileWatcher
from ..enumeration import ChangeKind
from ..exceptions import WatcherError
from ..utils import relative_to_root


class WatchfilesFileWatcher(BaseFileWatcher):
    """Watcher on top of ``watchfiles.awatch``.

    The notify backend watches recursively and picks up directories created
    after startup on its own.
    """

    CHANGE_MAPPING: dict[Change, ChangeKind] = {
        Change.added: ChangeKind.CREATED,
        Change.modified: ChangeKind.MODIFIED,
        Change.deleted: ChangeKind.DELETED,
    }

    def __init__(self, force_polling: bool = False, poll_delay_ms: int = 300, **kwargs):
        super().__init__(**kwargs)
        self.force_polling: bool = force_polling
        self.poll_delay_ms: int = poll_delay_ms

    def watch_filter(self, _change: Change, path: str) -> bool:
        """Filter function for file watching."""
        relative = relative_to_root(path, self.root_dir)
        return relative is not None and self.qualifies(relative)

    @staticmethod
    def order_changes(
        changes: set[tuple[Change, str]],
        exists: Callable[[str], bool] = os.path.exists,
    ) -> list[tuple[Change, str]]:
        """Order an unordered awatch batch per path so the last change matches the file on disk.

        Added always precedes modified. A deletion goes last when the file is
        gone and first when it exists again, as after a delete and re-create.
        """
        present = {path: exists(path) for change, path in changes if change == Change.deleted}

        def rank(item: tuple[Change, str]) -> tuple[str, int]:
            change, path = item
            if change == Change.deleted:
                return path, 0 if present[path] else 3
            return path, 1 if change == Change.added else 2

        return sorted(changes, key=rank)

    async def _watch_loop(self):
        """Core monitoring loop"""
        if not self.root_dir.is_dir():
            raise WatcherError(f"Watch root {self.root_dir} is not a directory")

        self._mark_watching()
        async for changes in awatch(
            self.root_dir,
            watch_filter=self.watch_filter,
            recursive=True,
            debounce=self.debounce,
            stop_event=self._stop_event,
            force_polling=self.force_polling,
            poll_delay_ms=self.poll_delay_ms,
        ):
            if self.stopping:
                break

            for change, path in self.order_changes(changes):
                kind = self.CHANGE_MAPPING.get(change)
                if kind is None:
                    logger.warning(f"Unknown change type: {change}")
                    continue
                await self.emit(kind, path)


class PollingFileWatcher(WatchfilesFileWatcher):
    """Polls the tree instead of relying on kernel notifications (network mounts, containers)."""

    def __init__(self, **kwargs):
        kwargs["force_polling"] = True
        super().__init__(**kwargs)
