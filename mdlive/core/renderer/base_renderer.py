"""Base render function interface."""

import asyncio
import html
from abc import ABC, abstractmethod

from ..schema import RenderedArtifact
from ..utils import count_words, hash_text


class BaseRenderer(ABC):
    """Turns document text into a RenderedArtifact.

    Implementations must be pure: the same text always yields the same HTML,
    and concurrent calls for different documents are safe.
    """

    name: str = "base"

    def __init__(self, **kwargs):
        self.kwargs: dict = kwargs

    @abstractmethod
    def render_html(self, text: str) -> str:
        """Return the HTML for ``text``."""

    def render(self, text: str) -> RenderedArtifact:
        """Render ``text`` synchronously."""
        return self.make_artifact(text, self.render_html(text))

    async def async_render(self, text: str) -> RenderedArtifact:
        """Render ``text`` without blocking the event loop."""
        return await asyncio.to_thread(self.render, text)

    def make_artifact(self, text: str, content: str, is_error: bool = False) -> RenderedArtifact:
        return RenderedArtifact(
            content=content,
            word_count=count_words(text),
            source_hash=hash_text(text),
            renderer=self.name,
            is_error=is_error,
        )

    def error_artifact(self, text: str, error: BaseException) -> RenderedArtifact:
        """Visible stand-in for a render that failed."""
        message = f"Rendering with {self.name} failed: {error.__class__.__name__}"
        return self.make_artifact(text, f'<p class="render-error">{html.escape(message)}</p>\n', is_error=True)

    async def close(self):
        """Release renderer resources."""
