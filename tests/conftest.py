#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

import asyncio
import socket

import pytest

from ssdp_explorer import SsdpExplorer, SsdpExplorerObserver

class RecordingObserver(SsdpExplorerObserver):
    """Records every callback as an (event_name, argument) tuple."""

    def __init__(self):
        self.events = []

    async def discovery_added(self, explorer, discovery):
        self.events.append(('added', discovery))

    async def discovery_removed(self, explorer, discovery):
        self.events.append(('removed', discovery))

    async def exploration_failed(self, explorer, error):
        self.events.append(('failed', error))

    async def wait_for_events(self, n, timeout=2.0):
        async def _wait():
            while len(self.events) < n:
                await asyncio.sleep(0.01)
        await asyncio.wait_for(_wait(), timeout)
        return self.events

class LoopbackExplorer(SsdpExplorer):
    """An SsdpExplorer that binds an ephemeral loopback port instead of joining the multicast group."""

    def bind_socket(self, sock):
        sock.bind(('127.0.0.1', 0))

    def join_multicast_group(self, sock):
        pass

@pytest.fixture
def observer():
    return RecordingObserver()

@pytest.fixture
def receiver():
    """A non-blocking UDP socket on loopback standing in for the multicast group."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(('127.0.0.1', 0))
    sock.setblocking(False)
    yield sock
    sock.close()

@pytest.fixture
def make_explorer(observer, receiver):
    """Returns a factory for LoopbackExplorers that send search requests to the receiver socket."""
    def _make(cls=LoopbackExplorer, **kwargs):
        host, port = receiver.getsockname()
        kwargs.setdefault('observer', observer)
        return cls(multicast_address=host, multicast_port=port, **kwargs)
    return _make

async def receive_datagram(sock, timeout=2.0):
    loop = asyncio.get_running_loop()
    return await asyncio.wait_for(loop.sock_recv(sock, 65535), timeout)

@pytest.fixture
def recv():
    return receive_datagram
