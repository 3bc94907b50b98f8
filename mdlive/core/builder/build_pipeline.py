"""Coordinating loop between discovery, the change watcher, builds and subscribers."""

import asyncio
from collections.abc import Callable, Coroutine, Iterable
from pathlib import Path
from typing import Any

from loguru import logger

from .build_coordinator import BuildCoordinator
from ..enumeration import ChangeKind
from ..fanout import SubscriberFanout
from ..file_watcher import BaseFileWatcher
from ..schema import BroadcastEvent, BuildResult, FileChange
from ..utils import DEFAULT_IGNORE_DIRS, DEFAULT_SOURCE_SUFFIXES, scan, to_logical_path

WatcherFactory = Callable[[asyncio.Queue], BaseFileWatcher]
DiscoverFunction = Callable[[Path, Iterable[str], Iterable[str]], set[str]]


class BuildPipeline:
    """Seeds the store from discovery, reacts to watcher events and broadcasts every mutation.

    The pipeline owns one shutdown signal. A watcher failure or an invalid
    root fires it; whoever owns the pipeline waits on ``shutdown_event`` and
    then calls ``close``, which stops the watcher, lets in-flight builds
    finish and sends the exit event to every subscriber.
    """

    def __init__(
        self,
        root_dir: str | Path,
        coordinator: BuildCoordinator,
        fanout: SubscriberFanout,
        watcher_factory: WatcherFactory | None = None,
        event_queue: asyncio.Queue | None = None,
        suffixes: Iterable[str] = DEFAULT_SOURCE_SUFFIXES,
        ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS,
        discover: DiscoverFunction = scan,
        shutdown_event: asyncio.Event | None = None,
    ):
        self.root_dir: Path = Path(root_dir)
        self.coordinator: BuildCoordinator = coordinator
        self.fanout: SubscriberFanout = fanout
        self.watcher_factory: WatcherFactory | None = watcher_factory
        self.event_queue: asyncio.Queue = event_queue if event_queue is not None else asyncio.Queue()
        self.suffixes: list[str] = list(suffixes)
        self.ignore_dirs: list[str] = list(ignore_dirs)
        self.discover: DiscoverFunction = discover
        self.shutdown_event: asyncio.Event = shutdown_event if shutdown_event is not None else asyncio.Event()

        self.watcher: BaseFileWatcher | None = None
        self.shutdown_reason: str = ""
        self._consumer_task: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()
        self._started: bool = False
        self._closed: bool = False

    @property
    def store(self):
        return self.coordinator.store

    @property
    def closed(self) -> bool:
        return self._closed

    def request_shutdown(self, reason: str = ""):
        """Fire the shutdown signal; safe to call more than once."""
        if not self.shutdown_event.is_set():
            self.shutdown_reason = reason
            logger.info(f"Shutdown requested{': ' + reason if reason else ''}")
            self.shutdown_event.set()

    def _check_root(self) -> bool:
        if not self.root_dir.exists():
            logger.error(f"Directory {self.root_dir} does not exist")
            return False
        if not self.root_dir.is_dir():
            logger.error(f"Path {self.root_dir} is not a directory")
            return False
        return True

    async def start(self) -> bool:
        """Start watching, run the initial build and begin consuming change events.

        Returns False (with the shutdown signal fired) when the root is unusable.
        """
        if self._started:
            logger.warning("Build pipeline has already started.")
            return True

        if not self._check_root():
            self.request_shutdown(f"invalid root directory {self.root_dir}")
            return False
        self._started = True

        # Watch before the initial scan so nothing changed during the scan is missed
        if self.watcher_factory is not None:
            self.watcher = self.watcher_factory(self.event_queue)
            await self.watcher.start()

        files = await asyncio.to_thread(self.discover, self.root_dir, self.suffixes, self.ignore_dirs)
        await self.coordinator.build_all(sorted(files))

        self._consumer_task = asyncio.create_task(self._consume())
        logger.info(f"Build pipeline started on {self.root_dir}")
        return True

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error("Change handler failed")

    async def _consume(self):
        logger.debug("Started file builder listener")
        while True:
            change: FileChange = await self.event_queue.get()
            logger.debug(f"File builder event: {change.kind.value} {change.path}")

            if change.kind == ChangeKind.EXIT:
                self.request_shutdown(f"change watcher failed: {change.reason}")
                break

            self._spawn(self.handle_change(change))
        logger.debug("Exited file builder listener")

    async def handle_change(self, change: FileChange) -> BuildResult | None:
        """Rebuild the path behind one watcher event and broadcast the outcome."""
        logical = to_logical_path(change.path)

        if change.kind == ChangeKind.DELETED:
            # The last artifact stays published
            logger.debug(f"File deleted: {logical}")
            return None

        if change.kind == ChangeKind.CREATED and not await self.store.contains(logical):
            result = await self.coordinator.build(logical)
        else:
            result = await self.coordinator.rebuild(logical)

        if result.success and not result.joined:
            await self.publish(result)
        return result

    async def publish(self, result: BuildResult):
        """Broadcast a successful build: the listing first when the path is new, then the artifact."""
        if result.is_new:
            listing = await self.store.listing()
            logger.debug(f"Sending new file {result.path} to subscribers")
            await self.fanout.broadcast(BroadcastEvent.listing_changed(listing, path=result.path))

        logger.debug(f"Sending processed file {result.path} to subscribers")
        await self.fanout.broadcast(BroadcastEvent.artifact_changed(result.path, result.artifact))

    async def wait_idle(self):
        """Wait until queued events are consumed and their builds are done."""
        while True:
            # let the consumer pick up anything already delivered to it
            await asyncio.sleep(0)
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            elif not self.event_queue.empty() and self._consumer_task is not None and not self._consumer_task.done():
                await asyncio.sleep(0.01)
            else:
                return

    async def close(self):
        """Stop the watcher, let in-flight builds finish and notify subscribers of termination."""
        if self._closed:
            return
        self._closed = True
        self.request_shutdown(self.shutdown_reason or "pipeline closed")

        if self.watcher is not None:
            await self.watcher.close()

        if self._consumer_task is not None and not self._consumer_task.done():
            self._consumer_task.cancel()
            try:
                await self._consumer_task
            except asyncio.CancelledError:
                pass

        if self._tasks:
            logger.info(f"Waiting for {len(self._tasks)} in-flight builds")
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

        await self.fanout.close()
        logger.info("Build pipeline stopped")
