"""Memoizing wrapper around another renderer."""

import threading
from collections import OrderedDict

from loguru import logger

from .base_renderer import BaseRenderer
from ..schema import RenderedArtifact
from ..utils import hash_text


class CachedRenderer(BaseRenderer):
    """LRU cache of artifacts keyed by the hash of the source text.

    Error artifacts are never cached so a transient failure is retried on
    the next build.
    """

    def __init__(self, renderer: BaseRenderer, cache_size: int = 256, **kwargs):
        super().__init__(**kwargs)
        self.renderer: BaseRenderer = renderer
        self.name = renderer.name
        self.cache_size: int = cache_size
        self._cache: OrderedDict[str, RenderedArtifact] = OrderedDict()
        self._lock = threading.Lock()
        self.hits: int = 0
        self.misses: int = 0

    def _lookup(self, key: str) -> RenderedArtifact | None:
        with self._lock:
            artifact = self._cache.get(key)
            if artifact is None:
                self.misses += 1
                return None
            self._cache.move_to_end(key)
            self.hits += 1
            return artifact

    def _remember(self, key: str, artifact: RenderedArtifact):
        if artifact.is_error or self.cache_size <= 0:
            return
        with self._lock:
            self._cache[key] = artifact
            self._cache.move_to_end(key)
            while len(self._cache) > self.cache_size:
                self._cache.popitem(last=False)

    def render_html(self, text: str) -> str:
        return self.render(text).content

    def render(self, text: str) -> RenderedArtifact:
        key = hash_text(text)
        artifact = self._lookup(key)
        if artifact is None:
            artifact = self.renderer.render(text)
            self._remember(key, artifact)
        return artifact

    async def async_render(self, text: str) -> RenderedArtifact:
        key = hash_text(text)
        artifact = self._lookup(key)
        if artifact is not None:
            logger.debug(f"Render cache hit {key[:12]}")
            return artifact

        artifact = await self.renderer.async_render(text)
        self._remember(key, artifact)
        return artifact

    def clear(self):
        with self._lock:
            self._cache.clear()

    async def close(self):
        self.clear()
        await self.renderer.close()
