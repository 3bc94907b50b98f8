"""Minimal HTML pages around rendered artifacts."""

import html
from urllib.parse import quote

from ..schema import RenderedArtifact

NOT_FOUND = "404 - Not found"

STYLE = (
    "body{display:flex;margin:0;font-family:sans-serif}"
    "#sidebar{min-width:16em;padding:1em;border-right:1px solid #ddd;background:#fafafa}"
    "#sidebar .file{margin:.2em 0}"
    "#contents{flex:1;padding:1em 2em;max-width:60em}"
    ".word-count{color:#888;font-size:.8em}"
    ".render-error{color:#b00}"
)


def render_sidebar(listing: list[str]) -> str:
    """Flat, alphabetically ordered navigation."""
    return "".join(
        f'<div class="file"><a href="{html.escape(quote(path))}">{html.escape(path)}</a></div>'
        for path in sorted(listing)
    )


def render_contents(artifact: RenderedArtifact | None) -> str:
    if artifact is None:
        return f"<main>{NOT_FOUND}</main>"

    return (
        "<main>"
        f'<div id="built-content">{artifact.content}</div>'
        f'<p class="word-count">Words: <span id="word-count">{artifact.word_count}</span></p>'
        "</main>"
    )


def render_page(title: str, artifact: RenderedArtifact | None, listing: list[str]) -> str:
    escaped_title = html.escape(title)
    return (
        "<!DOCTYPE html>"
        '<html><head><meta charset="utf-8">'
        f"<title>{escaped_title}</title>"
        f'<meta name="description" content="{escaped_title}">'
        '<script src="/.rsc/ws.js" defer></script>'
        f"<style>{STYLE}</style>"
        "</head><body>"
        f'<nav id="sidebar">{render_sidebar(listing)}</nav>'
        f'<div id="contents">{render_contents(artifact)}</div>'
        "</body></html>"
    )
