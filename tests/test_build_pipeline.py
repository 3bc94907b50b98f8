"""
Tests for BuildPipeline: initial discovery and build, change handling,
broadcast ordering and shutdown.
"""

import asyncio
from pathlib import Path

import pytest

from mdlive.core.builder import BuildCoordinator, BuildPipeline
from mdlive.core.enumeration import BroadcastKind, ChangeKind
from mdlive.core.fanout import SubscriberFanout
from mdlive.core.query import QueryService
from mdlive.core.renderer import CommonMarkRenderer
from mdlive.core.schema import FileChange
from mdlive.core.store import ArtifactStore


def write(root: Path, relative: str, content: str):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def make_pipeline(root_dir: Path, **kwargs) -> tuple[BuildPipeline, QueryService]:
    store = ArtifactStore()
    coordinator = BuildCoordinator(root_dir, store, CommonMarkRenderer())
    pipeline = BuildPipeline(root_dir, coordinator, SubscriberFanout(), **kwargs)
    return pipeline, QueryService(store, coordinator)


def drain(channel: asyncio.Queue) -> list:
    events = []
    while not channel.empty():
        events.append(channel.get_nowait())
    return events


@pytest.mark.asyncio
async def test_initial_build_end_to_end(tmp_path):
    """Discovery and the initial build publish every document below the root."""
    write(tmp_path, "README.md", "# README")
    write(tmp_path, "test.md", "# test header")
    pipeline, query = make_pipeline(tmp_path)

    assert await pipeline.start() is True
    result = await query.get_file("/README.md")

    assert result.artifact.content == "<h1>README</h1>\n"
    assert len(result.listing) == 2

    await pipeline.close()


@pytest.mark.asyncio
async def test_initial_build_uses_injected_discovery(tmp_path):
    """The discovery function can be replaced."""
    write(tmp_path, "a.md", "# a")
    write(tmp_path, "b.md", "# b")
    pipeline, query = make_pipeline(tmp_path, discover=lambda root, suffixes, ignore: {"a.md"})

    await pipeline.start()

    assert await query.get_listing() == ["/a.md"]
    await pipeline.close()


@pytest.mark.asyncio
async def test_created_file_broadcasts_listing_then_artifact(tmp_path):
    """A new document triggers a listing update followed by its artifact."""
    write(tmp_path, "README.md", "# README")
    pipeline, query = make_pipeline(tmp_path)
    await pipeline.start()
    _, channel = await pipeline.fanout.attach()

    write(tmp_path, "docs/new.md", "# new")
    await pipeline.handle_change(FileChange(kind=ChangeKind.CREATED, path="docs/new.md"))

    listing_event, artifact_event = drain(channel)
    assert listing_event.kind == BroadcastKind.LISTING_CHANGED
    assert listing_event.listing == ["/docs/new.md", "/README.md"]
    assert artifact_event.kind == BroadcastKind.ARTIFACT_CHANGED
    assert artifact_event.path == "/docs/new.md"
    assert artifact_event.artifact.content == "<h1>new</h1>\n"
    assert (await query.get_file("/docs/new.md")).found

    await pipeline.close()


@pytest.mark.asyncio
async def test_modified_file_broadcasts_artifact_only(tmp_path):
    """A changed document is rebuilt and only its artifact is broadcast."""
    write(tmp_path, "README.md", "# README")
    pipeline, query = make_pipeline(tmp_path)
    await pipeline.start()
    _, channel = await pipeline.fanout.attach()

    write(tmp_path, "README.md", "# Changed")
    await pipeline.handle_change(FileChange(kind=ChangeKind.MODIFIED, path="README.md"))

    events = drain(channel)
    assert [event.kind for event in events] == [BroadcastKind.ARTIFACT_CHANGED]
    assert (await query.get_file("/README.md")).artifact.content == "<h1>Changed</h1>\n"

    await pipeline.close()


@pytest.mark.asyncio
async def test_created_event_for_known_path_rebuilds(tmp_path):
    """Editors that replace files report a creation; the path is rebuilt like a modification."""
    write(tmp_path, "README.md", "# README")
    pipeline, query = make_pipeline(tmp_path)
    await pipeline.start()
    _, channel = await pipeline.fanout.attach()

    write(tmp_path, "README.md", "# Replaced")
    await pipeline.handle_change(FileChange(kind=ChangeKind.CREATED, path="README.md"))

    assert [event.kind for event in drain(channel)] == [BroadcastKind.ARTIFACT_CHANGED]
    assert (await query.get_file("/README.md")).artifact.content == "<h1>Replaced</h1>\n"

    await pipeline.close()


@pytest.mark.asyncio
async def test_deleted_file_keeps_artifact(tmp_path):
    """Deleting a source leaves its last artifact published without a broadcast."""
    write(tmp_path, "README.md", "# README")
    pipeline, query = make_pipeline(tmp_path)
    await pipeline.start()
    _, channel = await pipeline.fanout.attach()

    (tmp_path / "README.md").unlink()
    await pipeline.handle_change(FileChange(kind=ChangeKind.DELETED, path="README.md"))

    assert drain(channel) == []
    assert (await query.get_file("/README.md")).found

    await pipeline.close()


@pytest.mark.asyncio
async def test_unreadable_change_is_not_broadcast(tmp_path):
    """A change whose read fails produces no broadcast."""
    pipeline, _ = make_pipeline(tmp_path)
    await pipeline.start()
    _, channel = await pipeline.fanout.attach()

    result = await pipeline.handle_change(FileChange(kind=ChangeKind.MODIFIED, path="missing.md"))

    assert not result.success
    assert drain(channel) == []
    await pipeline.close()


@pytest.mark.asyncio
async def test_queued_events_are_consumed(tmp_path):
    """Events put on the queue are built by the consumer loop."""
    pipeline, query = make_pipeline(tmp_path)
    await pipeline.start()

    write(tmp_path, "late.md", "late arrival")
    await pipeline.event_queue.put(FileChange(kind=ChangeKind.CREATED, path="late.md"))
    await pipeline.wait_idle()

    assert (await query.get_file("/late.md")).artifact.content == "<p>late arrival</p>\n"
    await pipeline.close()


@pytest.mark.asyncio
async def test_exit_event_requests_shutdown(tmp_path):
    """A watcher exit event fires the shutdown signal."""
    pipeline, _ = make_pipeline(tmp_path)
    await pipeline.start()
    _, channel = await pipeline.fanout.attach()

    await pipeline.event_queue.put(FileChange(kind=ChangeKind.EXIT, reason="backend died"))
    await asyncio.wait_for(pipeline.shutdown_event.wait(), timeout=5)

    assert "backend died" in pipeline.shutdown_reason
    await pipeline.close()
    assert (await channel.get()).kind == BroadcastKind.EXIT


@pytest.mark.asyncio
async def test_invalid_root_requests_shutdown(tmp_path):
    """A missing root directory fails start and fires shutdown."""
    pipeline, _ = make_pipeline(tmp_path / "missing")

    assert await pipeline.start() is False
    assert pipeline.shutdown_event.is_set()
    await pipeline.close()


@pytest.mark.asyncio
async def test_file_root_requests_shutdown(tmp_path):
    """A root that is a file fails start and fires shutdown."""
    write(tmp_path, "file.md", "x")
    pipeline, _ = make_pipeline(tmp_path / "file.md")

    assert await pipeline.start() is False
    assert pipeline.shutdown_event.is_set()
    await pipeline.close()


@pytest.mark.asyncio
async def test_close_refuses_new_subscribers(tmp_path):
    """After close nobody can attach and existing subscribers got exit."""
    pipeline, _ = make_pipeline(tmp_path)
    await pipeline.start()
    _, channel = await pipeline.fanout.attach()

    await pipeline.close()
    await pipeline.close()

    assert (await channel.get()).kind == BroadcastKind.EXIT
    assert pipeline.fanout.closed
