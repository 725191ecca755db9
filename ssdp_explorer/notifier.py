#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Delivery of discovery events from an SsdpExplorer to its observer.

  SsdpExplorerObserver -- The abstract interface implemented by the caller to receive events.
  DiscoveryNotifier    -- Queues events and delivers them, one at a time and in arrival order,
                          from a single task on the explorer's event loop. Observers therefore never
                          see two callbacks running concurrently.

The notifier holds only a weak reference to the observer, so the observer's lifetime is
independent of the explorer's. Events raised after the observer has been garbage collected are
discarded.
"""

from __future__ import annotations

import asyncio
import weakref
from abc import ABC, abstractmethod

from .internal_types import *
from .pkg_logging import logger
from .discovery import SsdpDiscovery

if TYPE_CHECKING:
    from .explorer import SsdpExplorer

class SsdpExplorerObserver(ABC):
    """Receives discovery events from an SsdpExplorer.

    All callbacks are awaited on the explorer's event loop, one at a time, in the order
    the corresponding datagrams were received.
    """

    @abstractmethod
    async def discovery_added(self, explorer: SsdpExplorer, discovery: SsdpDiscovery) -> None:
        """Called for each search response, ssdp:alive and ssdp:update notification.
           Repeated advertisements of the same service produce repeated calls."""
        raise NotImplementedError()

    @abstractmethod
    async def discovery_removed(self, explorer: SsdpExplorer, discovery: SsdpDiscovery) -> None:
        """Called for each ssdp:byebye notification. discovery.description_url is the HOST
           header of the notification, not a dereferenceable location."""
        raise NotImplementedError()

    @abstractmethod
    async def exploration_failed(self, explorer: SsdpExplorer, error: Exception) -> None:
        """Called once when a running exploration session fails. The explorer has already
           stopped; start() must be called again to resume receiving discoveries."""
        raise NotImplementedError()

_Notification = Tuple[str, Union[SsdpDiscovery, Exception]]
"""(observer_method_name, argument)"""

class DiscoveryNotifier:
    explorer: SsdpExplorer
    """The explorer passed to observer callbacks."""

    _observer_ref: Optional[weakref.ReferenceType[SsdpExplorerObserver]] = None

    _queue: Optional[asyncio.Queue[Optional[_Notification]]] = None
    """Pending notifications. None is queued to end the delivery task."""

    _delivery_task: Optional[asyncio.Task[None]] = None

    def __init__(self, explorer: SsdpExplorer, observer: Optional[SsdpExplorerObserver]=None):
        self.explorer = explorer
        self.observer = observer

    @property
    def observer(self) -> Optional[SsdpExplorerObserver]:
        """The observer, or None if none is set or it has been garbage collected."""
        if self._observer_ref is None:
            return None
        return self._observer_ref()

    @observer.setter
    def observer(self, observer: Optional[SsdpExplorerObserver]) -> None:
        self._observer_ref = None if observer is None else weakref.ref(observer)

    @property
    def is_running(self) -> bool:
        return self._delivery_task is not None and not self._delivery_task.done()

    def notify_added(self, discovery: SsdpDiscovery) -> None:
        self._enqueue(('discovery_added', discovery))

    def notify_removed(self, discovery: SsdpDiscovery) -> None:
        self._enqueue(('discovery_removed', discovery))

    def notify_failure(self, error: Exception) -> None:
        self._enqueue(('exploration_failed', error))

    def _enqueue(self, notification: _Notification) -> None:
        """Queues a notification, starting the delivery task on the running event loop if needed.
           Must be called from the event loop."""
        if not self.is_running:
            self._queue = asyncio.Queue()
            self._delivery_task = asyncio.get_running_loop().create_task(self._run_delivery_task(self._queue))
        assert self._queue is not None
        self._queue.put_nowait(notification)

    async def _run_delivery_task(self, queue: asyncio.Queue[Optional[_Notification]]) -> None:
        logger.debug("Discovery delivery task starting")
        while True:
            notification = await queue.get()
            try:
                if notification is None:
                    # Notifications queued behind the end marker are still delivered
                    if queue.empty():
                        break
                    continue
                await self._deliver(*notification)
            finally:
                queue.task_done()
        logger.debug("Discovery delivery task exiting")

    async def _deliver(self, method_name: str, arg: Union[SsdpDiscovery, Exception]) -> None:
        observer = self.observer
        if observer is None:
            logger.debug(f"No observer; dropping {method_name}({arg})")
            return
        try:
            await getattr(observer, method_name)(self.explorer, arg)
        except Exception as e:
            logger.warning(f"Observer raised exception in {method_name}({arg}): {e}")

    async def join(self) -> None:
        """Waits until every notification queued so far has been delivered."""
        if self.is_running:
            assert self._queue is not None
            await self._queue.join()

    async def aclose(self) -> None:
        """Delivers all pending notifications, then ends the delivery task. A later notification
           starts a new delivery task."""
        task = self._delivery_task
        if task is None:
            return
        if not task.done():
            assert self._queue is not None
            self._queue.put_nowait(None)
        try:
            await task
        finally:
            # A notification queued after the task ended may already have started a new one
            if self._delivery_task is task:
                self._delivery_task = None
                self._queue = None
