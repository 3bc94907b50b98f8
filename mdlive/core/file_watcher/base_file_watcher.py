"""Base change watcher.

A watcher observes one root directory recursively and puts one FileChange
per qualifying change onto the pipeline's event queue. Backends only have
to implement ``_watch_loop``; filtering, normalization to relative paths,
the lifecycle state machine and fatal-error escalation live here.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from ..enumeration import ChangeKind, WatcherState
from ..schema import FileChange
from ..utils import DEFAULT_IGNORE_DIRS, DEFAULT_SOURCE_SUFFIXES, is_ignored_path, is_source_file, relative_to_root


class BaseFileWatcher(ABC):
    """Lifecycle: Starting -> Watching -> Stopping -> Stopped, never restarted.

    Any exception escaping ``_watch_loop`` is fatal: it is recorded in
    ``error`` and a single ``ChangeKind.EXIT`` event is queued so the owning
    pipeline shuts down instead of silently stalling.
    """

    def __init__(
        self,
        root_dir: str | Path,
        event_queue: asyncio.Queue,
        suffix_filters: Iterable[str] | None = None,
        ignore_dirs: Iterable[str] | None = None,
        debounce: int = 50,
        stop_timeout: float = 5.0,
        **kwargs,
    ):
        """
        Initialize the file watcher

        Args:
            root_dir: Directory to watch recursively
            event_queue: Queue receiving FileChange events
            suffix_filters: Recognized source document suffixes (e.g., ['.md'])
            ignore_dirs: Directory names never observed or recursed into
            debounce: Debounce time in milliseconds, where the backend supports it
            stop_timeout: Seconds to wait for the backend to wind down on close
            **kwargs: Additional keyword arguments
        """
        self.root_dir: Path = Path(root_dir)
        self.event_queue: asyncio.Queue = event_queue
        self.suffix_filters: list[str] = list(suffix_filters) if suffix_filters is not None else list(DEFAULT_SOURCE_SUFFIXES)
        self.ignore_dirs: list[str] = list(ignore_dirs) if ignore_dirs is not None else list(DEFAULT_IGNORE_DIRS)
        self.debounce: int = debounce
        self.stop_timeout: float = stop_timeout
        self.kwargs: dict = kwargs

        self.state: WatcherState | None = None
        self.error: BaseException | None = None
        self._stop_event = asyncio.Event()
        self._watch_task: asyncio.Task | None = None

    async def start(self):
        """Start the file watcher"""
        if self.state is not None:
            logger.warning(f"[{self.__class__.__name__}] cannot start from state {self.state.value}")
            return

        self.state = WatcherState.STARTING
        self._watch_task = asyncio.create_task(self._run())
        logger.info(f"Started watching: {self.root_dir}")

    async def close(self):
        """Stop the file watcher"""
        if self._watch_task is None:
            return

        if self.state in (WatcherState.STARTING, WatcherState.WATCHING):
            self.state = WatcherState.STOPPING
        self._stop_event.set()

        try:
            await asyncio.wait_for(asyncio.shield(self._watch_task), self.stop_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[{self.__class__.__name__}] did not stop within {self.stop_timeout}s, cancelling")
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass

        self.state = WatcherState.STOPPED
        logger.info("Stopped watching")

    def is_running(self) -> bool:
        """Check if the watcher is running"""
        return self.state in (WatcherState.STARTING, WatcherState.WATCHING)

    @property
    def stopping(self) -> bool:
        return self._stop_event.is_set()

    def qualifies(self, relative_path: str) -> bool:
        """Only source documents outside ignored directories produce events."""
        if not relative_path or is_ignored_path(relative_path, self.ignore_dirs):
            return False
        return is_source_file(relative_path, self.suffix_filters)

    async def emit(self, kind: ChangeKind, path: str | Path) -> bool:
        """Normalize a backend path and queue the change; returns False when filtered out."""
        relative = relative_to_root(path, self.root_dir)
        if relative is None or not self.qualifies(relative):
            return False

        await self.event_queue.put(FileChange(kind=kind, path=relative))
        logger.debug(f"File {kind.value}: {relative}")
        return True

    async def _run(self):
        try:
            await self._watch_loop()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.error = e
            self.state = WatcherState.STOPPING
            logger.exception(f"An error occurred watching files: {e}")
            await self.event_queue.put(FileChange(kind=ChangeKind.EXIT, reason=f"{e.__class__.__name__}: {e}"))
        finally:
            self.state = WatcherState.STOPPED

    def _mark_watching(self):
        if self.state == WatcherState.STARTING:
            self.state = WatcherState.WATCHING

    @abstractmethod
    async def _watch_loop(self):
        """Observe the root until ``_stop_event`` is set; raise on backend failure."""
