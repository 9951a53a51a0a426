import asyncio

import pytest

from hub.sync.subscription import Subscription, SubscriptionSlot

from fakes import settle


async def _from_queue(q):
    while True:
        yield await q.get()


@pytest.mark.asyncio
async def test_canceled_handle_goes_inert():
    q = asyncio.Queue()
    seen = []

    async def deliver(handle, item):
        seen.append(item)

    sub = Subscription(_from_queue(q), deliver, name="t")
    q.put_nowait(1)
    await settle()

    sub.cancel()
    q.put_nowait(2)
    await settle()

    assert seen == [1]
    assert sub.active is False


@pytest.mark.asyncio
async def test_slot_cancels_prior_before_creating_next():
    slot = SubscriptionSlot("room")
    q1, q2 = asyncio.Queue(), asyncio.Queue()

    async def deliver(handle, item):
        return None

    first = slot.acquire(lambda: Subscription(_from_queue(q1), deliver, name="first"))
    prior_active_at_creation = []

    def make_second():
        prior_active_at_creation.append(first.active)
        return Subscription(_from_queue(q2), deliver, name="second")

    second = slot.acquire(make_second)

    assert prior_active_at_creation == [False]
    assert slot.current is second
    assert slot.owns(second) is True
    assert slot.owns(first) is False

    slot.release()
    assert slot.current is None
    assert second.active is False
    await settle()


@pytest.mark.asyncio
async def test_failing_source_ends_only_that_subscription():
    async def broken():
        yield "ok"
        raise RuntimeError("store went away")

    seen = []

    async def deliver(handle, item):
        seen.append(item)

    sub = Subscription(broken(), deliver, name="broken")
    await settle()

    assert seen == ["ok"]
    assert sub.active is False


@pytest.mark.asyncio
async def test_stream_failure_reported_once_and_handle_goes_inert():
    seen, failures = [], []

    async def broken():
        yield 1
        raise ConnectionError("gone")

    async def deliver(handle, item):
        seen.append(item)

    sub = Subscription(broken(), deliver, name="t", on_failure=failures.append)
    await settle()

    assert seen == [1]
    assert failures == [sub]
    assert sub.active is False


@pytest.mark.asyncio
async def test_slot_discards_only_its_own_handle():
    q = asyncio.Queue()

    async def deliver(handle, item):
        pass

    slot = SubscriptionSlot("answers")
    sub = slot.acquire(lambda: Subscription(_from_queue(q), deliver, name="a"))
    other = Subscription(_from_queue(asyncio.Queue()), deliver, name="b")

    assert slot.discard(other) is False
    assert slot.current is sub
    assert slot.discard(sub) is True
    assert slot.current is None
    other.cancel()
    sub.cancel()
