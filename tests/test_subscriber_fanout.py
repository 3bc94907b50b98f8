"""
Unit tests for SubscriberFanout: registration, isolation and termination.
"""

import asyncio

import pytest

from mdlive.core.enumeration import BroadcastKind
from mdlive.core.exceptions import PipelineClosedError
from mdlive.core.fanout import SubscriberFanout, iter_events
from mdlive.core.schema import BroadcastEvent, RenderedArtifact


def artifact_event(path: str = "/a.md") -> BroadcastEvent:
    return BroadcastEvent.artifact_changed(path, RenderedArtifact(content="<p>a</p>\n", word_count=1))


@pytest.mark.asyncio
async def test_attach_assigns_increasing_ids():
    """Ids are unique and strictly increasing even when attached back to back."""
    fanout = SubscriberFanout()
    ids = [(await fanout.attach())[0] for _ in range(10)]

    assert ids == sorted(ids)
    assert len(set(ids)) == 10
    assert await fanout.count() == 10


@pytest.mark.asyncio
async def test_broadcast_reaches_every_subscriber():
    """Every attached subscriber receives the event."""
    fanout = SubscriberFanout()
    channels = [(await fanout.attach())[1] for _ in range(3)]

    delivered = await fanout.broadcast(artifact_event())

    assert delivered == 3
    for channel in channels:
        assert (await channel.get()).path == "/a.md"


@pytest.mark.asyncio
async def test_slow_subscriber_does_not_block_others():
    """A full channel only loses events for its own subscriber."""
    fanout = SubscriberFanout(channel_size=1)
    _, slow = await fanout.attach()
    _, fast = await fanout.attach()

    assert await fanout.broadcast(artifact_event("/1.md")) == 2
    await fast.get()
    assert await fanout.broadcast(artifact_event("/2.md")) == 1

    assert (await fast.get()).path == "/2.md"
    assert (await slow.get()).path == "/1.md"
    assert slow.empty()


@pytest.mark.asyncio
async def test_detach_is_idempotent():
    """Detaching twice is harmless and stops delivery."""
    fanout = SubscriberFanout()
    subscriber_id, channel = await fanout.attach()

    assert await fanout.detach(subscriber_id) is True
    assert await fanout.detach(subscriber_id) is False
    assert await fanout.broadcast(artifact_event()) == 0
    assert channel.empty()


@pytest.mark.asyncio
async def test_close_sends_exit_to_everyone():
    """Close delivers exit even to subscribers with a full channel."""
    fanout = SubscriberFanout(channel_size=1)
    _, full = await fanout.attach()
    _, empty = await fanout.attach()
    await fanout.broadcast(artifact_event())
    await empty.get()

    await fanout.close()

    assert (await full.get()).kind == BroadcastKind.EXIT
    assert (await empty.get()).kind == BroadcastKind.EXIT
    assert await fanout.count() == 0

    with pytest.raises(PipelineClosedError):
        await fanout.attach()


@pytest.mark.asyncio
async def test_iter_events_stops_at_exit():
    """The channel iterator yields events until the exit event."""
    fanout = SubscriberFanout()
    _, channel = await fanout.attach()
    await fanout.broadcast(artifact_event("/1.md"))
    await fanout.broadcast(BroadcastEvent.listing_changed(["/1.md"]))
    await fanout.close()

    events = [event async for event in iter_events(channel)]

    assert [event.kind for event in events] == [BroadcastKind.ARTIFACT_CHANGED, BroadcastKind.LISTING_CHANGED]


@pytest.mark.asyncio
async def test_concurrent_broadcast_and_detach():
    """Broadcasting while subscribers come and go never raises."""
    fanout = SubscriberFanout()
    attached = [await fanout.attach() for _ in range(20)]

    await asyncio.gather(
        *[fanout.broadcast(artifact_event(f"/{i}.md")) for i in range(20)],
        *[fanout.detach(subscriber_id) for subscriber_id, _ in attached[::2]],
    )

    assert await fanout.count() == 10


@pytest.mark.asyncio
async def test_detached_subscriber_misses_later_broadcasts():
    """After one of two subscribers detaches, only the other receives events."""
    fanout = SubscriberFanout()
    first_id, first = await fanout.attach()
    _, second = await fanout.attach()

    assert await fanout.broadcast(artifact_event("/1.md")) == 2
    await fanout.detach(first_id)
    assert await fanout.broadcast(artifact_event("/2.md")) == 1

    assert first.get_nowait().path == "/1.md"
    assert first.empty()
    assert [second.get_nowait().path, second.get_nowait().path] == ["/1.md", "/2.md"]
