"""Renderer backed by Python-Markdown."""

import markdown

from .base_renderer import BaseRenderer


class MarkdownRenderer(BaseRenderer):
    """Python-Markdown with a configurable extension list."""

    name = "markdown"

    def __init__(self, extensions: list[str] | None = None, **kwargs):
        super().__init__(**kwargs)
        self.extensions: list[str] = extensions if extensions is not None else ["tables", "footnotes", "fenced_code"]

    def render_html(self, text: str) -> str:
        html = markdown.markdown(text, extensions=self.extensions)
        return html + "\n" if html else html
