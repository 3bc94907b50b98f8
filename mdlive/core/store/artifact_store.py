"""In-memory artifact store keyed by logical path."""

import asyncio
import bisect

from loguru import logger

from ..schema import RenderedArtifact
from ..utils import listing_sort_key


class ArtifactStore:
    """Map of logical path to rendered artifact plus the ordered listing of known paths.

    A path enters the listing on its first successful ``put`` and never leaves
    it. New paths are inserted at their position in listing order, so the
    listing is ordered whenever the lock is free. Every operation holds the
    store lock, so readers never see a half-applied ``put`` and ``listing``
    always hands out an independent snapshot.

    Only the build coordinator writes to the store.
    """

    def __init__(self):
        self._artifacts: dict[str, RenderedArtifact] = {}
        self._listing: list[str] = []
        self._lock = asyncio.Lock()

    async def get(self, path: str) -> RenderedArtifact | None:
        async with self._lock:
            return self._artifacts.get(path)

    async def put(self, path: str, artifact: RenderedArtifact) -> bool:
        """Insert or replace the artifact for ``path``; returns True when the path is new."""
        async with self._lock:
            is_new = path not in self._artifacts
            self._artifacts[path] = artifact
            if is_new:
                bisect.insort(self._listing, path, key=listing_sort_key)
                logger.debug(f"Store added {path} ({len(self._listing)} paths)")
            return is_new

    async def contains(self, path: str) -> bool:
        async with self._lock:
            return path in self._artifacts

    async def listing(self) -> list[str]:
        async with self._lock:
            return list(self._listing)

    async def size(self) -> int:
        async with self._lock:
            return len(self._artifacts)
