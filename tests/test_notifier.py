#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

import asyncio
import gc

import pytest

from ssdp_explorer import (
    DiscoveryNotifier,
    SsdpDiscovery,
    SsdpType,
    UniqueServiceName,
    SendFailedError,
  )

from conftest import RecordingObserver

def make_discovery(n):
    return SsdpDiscovery(
        UniqueServiceName(f"uuid:device-{n}::upnp:rootdevice"),
        f"http://10.0.0.{n}/desc.xml",
        SsdpType.from_raw("upnp:rootdevice"),
      )

@pytest.mark.asyncio
async def test_events_are_delivered_in_order(observer):
    explorer = object()
    notifier = DiscoveryNotifier(explorer, observer)
    notifier.notify_added(make_discovery(1))
    notifier.notify_removed(make_discovery(2))
    error = SendFailedError("boom")
    notifier.notify_failure(error)
    # Delivery is asynchronous
    assert observer.events == []
    await notifier.join()
    assert observer.events == [
        ('added', make_discovery(1)),
        ('removed', make_discovery(2)),
        ('failed', error),
    ]
    await notifier.aclose()

@pytest.mark.asyncio
async def test_repeated_events_are_not_deduplicated(observer):
    notifier = DiscoveryNotifier(object(), observer)
    for _ in range(3):
        notifier.notify_added(make_discovery(1))
    await notifier.aclose()
    assert observer.events == [('added', make_discovery(1))] * 3

@pytest.mark.asyncio
async def test_callbacks_never_overlap():
    active = 0
    max_active = 0

    class SlowObserver(RecordingObserver):
        async def discovery_added(self, explorer, discovery):
            nonlocal active, max_active
            active += 1
            max_active = max(max_active, active)
            await asyncio.sleep(0.01)
            active -= 1
            await super().discovery_added(explorer, discovery)

    observer = SlowObserver()
    notifier = DiscoveryNotifier(object(), observer)
    for n in range(5):
        notifier.notify_added(make_discovery(n))
    await notifier.aclose()
    assert max_active == 1
    assert [d.usn.uuid for _, d in observer.events] == [f"device-{n}" for n in range(5)]

@pytest.mark.asyncio
async def test_observer_exception_does_not_stop_delivery():
    class FailingObserver(RecordingObserver):
        async def discovery_added(self, explorer, discovery):
            if discovery == make_discovery(1):
                raise RuntimeError("observer bug")
            await super().discovery_added(explorer, discovery)

    observer = FailingObserver()
    notifier = DiscoveryNotifier(object(), observer)
    notifier.notify_added(make_discovery(1))
    notifier.notify_added(make_discovery(2))
    await notifier.aclose()
    assert observer.events == [('added', make_discovery(2))]

@pytest.mark.asyncio
async def test_observer_is_held_weakly():
    observer = RecordingObserver()
    notifier = DiscoveryNotifier(object(), observer)
    assert notifier.observer is observer
    del observer
    gc.collect()
    assert notifier.observer is None
    notifier.notify_added(make_discovery(1))
    await notifier.aclose()

@pytest.mark.asyncio
async def test_notifier_restarts_after_aclose(observer):
    notifier = DiscoveryNotifier(object(), observer)
    notifier.notify_added(make_discovery(1))
    await notifier.aclose()
    assert not notifier.is_running
    notifier.notify_added(make_discovery(2))
    assert notifier.is_running
    await notifier.aclose()
    assert [d for _, d in observer.events] == [make_discovery(1), make_discovery(2)]

@pytest.mark.asyncio
async def test_aclose_without_events_is_noop(observer):
    notifier = DiscoveryNotifier(object(), observer)
    await notifier.join()
    await notifier.aclose()
    assert observer.events == []

@pytest.mark.asyncio
async def test_event_queued_while_closing_keeps_single_delivery_task():
    active = 0
    max_active = 0

    class SlowObserver(RecordingObserver):
        async def discovery_added(self, explorer, discovery):
            nonlocal active, max_active
            active += 1
            max_active = max(max_active, active)
            await asyncio.sleep(0.01)
            active -= 1
            await super().discovery_added(explorer, discovery)

    observer = SlowObserver()
    notifier = DiscoveryNotifier(object(), observer)
    notifier.notify_added(make_discovery(1))
    old_task = notifier._delivery_task
    # Runs after the old task ends but before aclose() resumes
    old_task.add_done_callback(lambda _: notifier.notify_added(make_discovery(2)))
    await notifier.aclose()
    assert notifier.is_running
    assert notifier._delivery_task is not old_task
    notifier.notify_added(make_discovery(3))
    await notifier.join()
    await notifier.aclose()
    assert max_active == 1
    assert [d for _, d in observer.events] == [make_discovery(n) for n in (1, 2, 3)]
