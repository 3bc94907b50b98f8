"""CommonMark renderer backed by markdown-it-py."""

from markdown_it import MarkdownIt

from .base_renderer import BaseRenderer


class CommonMarkRenderer(BaseRenderer):
    """Strict CommonMark with tables and strikethrough enabled."""

    name = "commonmark"

    def __init__(self, enable_tables: bool = True, enable_strikethrough: bool = True, **kwargs):
        super().__init__(**kwargs)
        self.enable_tables: bool = enable_tables
        self.enable_strikethrough: bool = enable_strikethrough

    def create_parser(self) -> MarkdownIt:
        parser = MarkdownIt("commonmark")
        extensions = []
        if self.enable_tables:
            extensions.append("table")
        if self.enable_strikethrough:
            extensions.append("strikethrough")
        if extensions:
            parser.enable(extensions)
        return parser

    def render_html(self, text: str) -> str:
        # MarkdownIt instances keep per-render state, one per call keeps threads apart
        return self.create_parser().render(text)
