"""Render function backends.

Backends are registered by name and selected with ``renderer.backend``.
"""

from .base_renderer import BaseRenderer
from .cached_renderer import CachedRenderer
from .commonmark_renderer import CommonMarkRenderer
from .markdown_renderer import MarkdownRenderer
from .pandoc_renderer import PandocRenderer
from ..registry_factory import R

__all__ = [
    "BaseRenderer",
    "CachedRenderer",
    "CommonMarkRenderer",
    "MarkdownRenderer",
    "PandocRenderer",
]

R.renderers.register("commonmark")(CommonMarkRenderer)
R.renderers.register("markdown")(MarkdownRenderer)
R.renderers.register("pandoc")(PandocRenderer)
