"""
Integration tests for Application: configuration wiring, the full
pipeline on a real directory and live updates through the polling watcher.
"""

import asyncio
from pathlib import Path

import pytest

from mdlive.core import Application
from mdlive.core.enumeration import BroadcastKind
from mdlive.core.exceptions import PipelineClosedError
from mdlive.core.fanout import iter_events
from mdlive.core.renderer import CachedRenderer, MarkdownRenderer
from mdlive.core.service import CmdService
from mdlive.mdlive_app import MdLiveApp


async def collect(channel: asyncio.Queue) -> list:
    return [event async for event in iter_events(channel)]


def make_docs(root: Path):
    (root / "README.md").write_text("# README", encoding="utf-8")
    (root / "test.md").write_text("# test header", encoding="utf-8")
    (root / ".git").mkdir()
    (root / ".git" / "hidden.md").write_text("# hidden", encoding="utf-8")


@pytest.mark.asyncio
async def test_initial_build(tmp_path):
    """Documents below the root are served once the application has started."""
    make_docs(tmp_path)

    async with Application(root_dir=tmp_path, init_logger=False, file_watcher={"backend": "none"}) as app:
        result = await app.get_file("/README.md")
        assert result.artifact.content == "<h1>README</h1>\n"
        assert sorted(result.listing) == ["/README.md", "/test.md"]
        assert isinstance(app.service_context.renderer, CachedRenderer)

    with pytest.raises(PipelineClosedError):
        await app.get_file("/README.md")


@pytest.mark.asyncio
async def test_renderer_backend_from_config(tmp_path):
    """The renderer backend is chosen by name."""
    make_docs(tmp_path)

    app = Application(
        root_dir=tmp_path,
        init_logger=False,
        file_watcher={"backend": "none"},
        renderer={"backend": "markdown", "enable_cache": False},
    )
    async with app:
        assert isinstance(app.service_context.renderer, MarkdownRenderer)
        assert (await app.get_file("/test.md")).artifact.content == "<h1>test header</h1>\n"


@pytest.mark.asyncio
async def test_invalid_root_fires_shutdown(tmp_path):
    """An invalid root shuts the application down instead of serving nothing."""
    app = Application(root_dir=tmp_path / "missing", init_logger=False, file_watcher={"backend": "none"})

    async with app:
        await asyncio.wait_for(app.wait_shutdown(), timeout=5)
        assert "invalid root" in app.shutdown_reason


@pytest.mark.asyncio
async def test_live_update_through_polling_watcher(tmp_path):
    """Editing a document while running rebuilds it and notifies subscribers."""
    make_docs(tmp_path)
    app = Application(
        root_dir=tmp_path,
        init_logger=False,
        file_watcher={"backend": "poll", "poll_delay_ms": 50, "debounce": 50},
    )

    async with app:
        _, channel = await app.attach()
        await asyncio.sleep(0.3)
        (tmp_path / "README.md").write_text("# Edited", encoding="utf-8")

        event = await asyncio.wait_for(channel.get(), timeout=10)
        assert event.kind == BroadcastKind.ARTIFACT_CHANGED
        assert event.path == "/README.md"
        assert event.artifact.content == "<h1>Edited</h1>\n"
        assert (await app.get_file("/README.md")).artifact.content == "<h1>Edited</h1>\n"

    # close delivered the exit event, which ends the iteration
    await asyncio.wait_for(collect(channel), timeout=5)


@pytest.mark.asyncio
async def test_cmd_service_returns_on_shutdown(tmp_path):
    """The headless service ends when the pipeline shuts down."""
    app = Application(root_dir=tmp_path / "missing", init_logger=False, file_watcher={"backend": "none"})

    await asyncio.wait_for(CmdService(app=app).execute(), timeout=5)

    assert app.pipeline.closed


def test_cli_positional_root():
    """A lone path argument is shorthand for root_dir."""
    assert MdLiveApp.normalize_arg("./docs") == "root_dir=./docs"
    assert MdLiveApp.normalize_arg("http.port=9000") == "http.port=9000"
    assert MdLiveApp.normalize_arg("verbose") == "verbose"

    app = MdLiveApp("./docs", "config=headless", init_logger=False)
    assert app.service_config.root_dir == "./docs"
    assert app.service_config.backend == "cmd"
