import asyncio

import pytest

from quotewatch.realtime.refresh_events import (
    InstrumentSetChanged,
    PeriodChanged,
    RefreshEventQueue,
    RefreshEventWorker,
)


@pytest.mark.asyncio
async def test_queue_publish_and_get():
    queue = RefreshEventQueue()
    await queue.publish(PeriodChanged(5))
    queue.publish_nowait(InstrumentSetChanged(()))

    assert queue.size() == 2
    assert await queue.get() == PeriodChanged(5)
    assert await queue.get() == InstrumentSetChanged(())


@pytest.mark.asyncio
async def test_worker_hands_events_to_handler_in_order():
    queue = RefreshEventQueue()
    handled = []

    async def handler(event):
        handled.append(event)

    worker = RefreshEventWorker(queue, handler)
    worker.start()
    queue.publish_nowait(PeriodChanged(2))
    queue.publish_nowait(PeriodChanged(3))

    await asyncio.wait_for(queue.join(), timeout=1)
    await worker.stop()

    assert handled == [PeriodChanged(2), PeriodChanged(3)]


@pytest.mark.asyncio
async def test_worker_survives_handler_errors(caplog):
    queue = RefreshEventQueue()
    handled = []

    async def handler(event):
        if event.minutes == 1:
            raise RuntimeError("handler blew up")
        handled.append(event)

    worker = RefreshEventWorker(queue, handler)
    worker.start()
    queue.publish_nowait(PeriodChanged(1))
    queue.publish_nowait(PeriodChanged(4))

    await asyncio.wait_for(queue.join(), timeout=1)
    await worker.stop()

    assert handled == [PeriodChanged(4)]
    assert "Refresh event handler failed for PeriodChanged" in caplog.text


@pytest.mark.asyncio
async def test_stop_with_drain_handles_queued_events():
    queue = RefreshEventQueue()
    handled = []

    async def handler(event):
        await asyncio.sleep(0)
        handled.append(event.minutes)

    worker = RefreshEventWorker(queue, handler)
    for minutes in (1, 2, 3):
        queue.publish_nowait(PeriodChanged(minutes))
    worker.start()
    assert worker.running

    await asyncio.wait_for(worker.stop(drain=True), timeout=1)

    assert handled == [1, 2, 3]
    assert not worker.running
