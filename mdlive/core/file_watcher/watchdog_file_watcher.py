"""watchdog based watcher running an observer thread."""

import asyncio
from typing import Any

from loguru import logger
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from .base_file_watcher import BaseFileWatcher
from ..enumeration import ChangeKind
from ..exceptions import WatcherError


class QueueingEventHandler(FileSystemEventHandler):
    """Runs on the observer thread and hands events over to the event loop."""

    EVENT_MAPPING: dict[str, ChangeKind] = {
        "created": ChangeKind.CREATED,
        "modified": ChangeKind.MODIFIED,
        "deleted": ChangeKind.DELETED,
    }

    def __init__(self, watcher: "WatchdogFileWatcher", loop: asyncio.AbstractEventLoop):
        super().__init__()
        self.watcher = watcher
        self.loop = loop

    def _submit(self, kind: ChangeKind, path: str):
        if self.loop.is_closed():
            return
        asyncio.run_coroutine_threadsafe(self.watcher.emit(kind, path), self.loop)

    def on_any_event(self, event: Any) -> None:
        # Recursive observers add watches for new directories themselves
        if event.is_directory:
            return

        if event.event_type == "moved":
            self._submit(ChangeKind.DELETED, event.src_path)
            self._submit(ChangeKind.CREATED, event.dest_path)
            return

        kind = self.EVENT_MAPPING.get(event.event_type)
        if kind is not None:
            self._submit(kind, event.src_path)


class WatchdogFileWatcher(BaseFileWatcher):
    """Watcher backed by a watchdog observer thread.

    The observer thread dying while the watcher should still be running is
    treated as a backend failure.
    """

    def __init__(self, use_polling: bool = False, health_check_interval: float = 1.0, **kwargs):
        super().__init__(**kwargs)
        self.use_polling: bool = use_polling
        self.health_check_interval: float = health_check_interval

    def create_observer(self):
        return PollingObserver() if self.use_polling else Observer()

    async def _watch_loop(self):
        if not self.root_dir.is_dir():
            raise WatcherError(f"Watch root {self.root_dir} is not a directory")

        handler = QueueingEventHandler(self, asyncio.get_running_loop())
        observer = self.create_observer()
        observer.schedule(handler, str(self.root_dir), recursive=True)
        observer.start()
        self._mark_watching()
        logger.debug(f"Started watchdog observer {observer.__class__.__name__} in {self.root_dir}")

        try:
            while not self.stopping:
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.health_check_interval)
                except asyncio.TimeoutError:
                    pass

                if not self.stopping and not observer.is_alive():
                    raise WatcherError("watchdog observer thread stopped unexpectedly")
        finally:
            observer.stop()
            await asyncio.to_thread(observer.join, self.stop_timeout)
