#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SsdpExplorer -- An SSDP control point that can:

  1. Join the SSDP multicast group (239.255.255.250:1900) and listen for datagrams
  2. Send an M-SEARCH request for each requested service type
  3. Parse and classify received search responses and alive/update/byebye notifications
  4. Report discovered and withdrawn services to an SsdpExplorerObserver

  Exploration is fire-and-forget: the explorer never times out, and the caller decides how long
  to wait for responses. An explorer is either idle or exploring; start() and stop() move between
  the two states. A send error or abnormal socket closure while exploring stops the explorer and is
  reported once through SsdpExplorerObserver.exploration_failed().

  Usage:
      async with SsdpExplorer(observer=my_observer) as explorer:
          await explorer.start(["urn:schemas-upnp-org:device:MediaServer:1"])
          await asyncio.sleep(5.0)
"""

from __future__ import annotations

import asyncio
import socket
import sys
from enum import Enum

from .internal_types import *
from .pkg_logging import logger
from .constants import SSDP_MULTICAST_ADDRESS, SSDP_PORT, SSDP_DEFAULT_MX, DEFAULT_GATEWAY_INTERFACE
from .exceptions import (
    SsdpError,
    SsdpParseError,
    SearchRequestEncodingError,
    SocketCreationFailedError,
    BindFailedError,
    MulticastJoinFailedError,
    ReceiveStartFailedError,
    SendFailedError,
    SocketClosedWithError,
    InvalidStateError,
  )
from .identifiers import SsdpType
from .ssdp_message import SsdpMessage
from .search_request import build_search_request
from .classifier import discovery_event_from_message
from .notifier import DiscoveryNotifier, SsdpExplorerObserver
from .util import default_user_agent, get_interface_ipv4_address, ip_mreq

class ExplorerState(Enum):
    IDLE = "idle"
    EXPLORING = "exploring"

class _IdleState:
    kind = ExplorerState.IDLE

    def __str__(self) -> str:
        return "Idle"

_IDLE = _IdleState()

class _ExploringState:
    """An exploration session. Owns the socket for as long as the explorer is exploring."""

    kind = ExplorerState.EXPLORING

    sock: socket.socket
    """The low-level bound multicast socket."""

    transport: Optional[asyncio.DatagramTransport] = None
    """The asyncio transport wrapping sock. Set once receiving has begun."""

    closed: bool = False

    def __init__(self, sock: socket.socket):
        self.sock = sock

    def close(self) -> None:
        """Closes the transport (or the bare socket if receiving never began). Only the first call
           has any effect."""
        if self.closed:
            return
        self.closed = True
        if self.transport is not None:
            try:
                self.transport.close()
            except Exception as e:
                logger.error(f"Error closing transport on {self}: {e}")
        else:
            try:
                self.sock.close()
            except OSError as e:
                logger.error(f"Error closing socket on {self}: {e}")

    def __str__(self) -> str:
        return f"Exploring({self.sock!r})"

_ExplorerSession = Union[_IdleState, _ExploringState]

class _SsdpExplorerProtocol(asyncio.DatagramProtocol):
    """An adapter between the asyncio transport and SsdpExplorer for a single exploration session."""

    explorer: SsdpExplorer
    session: _ExploringState

    def __init__(self, explorer: SsdpExplorer, session: _ExploringState):
        self.explorer = explorer
        self.session = session

    def connection_made(self, transport: asyncio.BaseTransport):
        """Called when a connection is made."""
        # asyncio datagram transports do not inherit from asyncio.DatagramTransport
        self.session.transport = transport # type: ignore[assignment]

    def datagram_received(self, data: bytes, addr: Tuple[str, int]):
        """Called when some datagram is received."""
        self.explorer._datagram_received(self.session, addr, data)

    def error_received(self, exc: Exception):
        """Called when a send or receive operation raises an OSError.

        (Other than BlockingIOError or InterruptedError.)
        """
        error = SendFailedError(f"SSDP socket error: {exc}")
        error.__cause__ = exc
        self.explorer._session_failed(self.session, error)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        """Called when the connection is lost or closed."""
        self.explorer._connection_lost(self.session, exc)

class SsdpExplorer(AsyncContextManager['SsdpExplorer']):
    """
    Discovers SSDP services on the local network. See the module docstring.

    Subclasses can override create_socket(), bind_socket() and join_multicast_group() to
    customize how the socket is set up.
    """

    multicast_address: str = SSDP_MULTICAST_ADDRESS
    """The multicast group to join and send search requests to."""

    multicast_port: int = SSDP_PORT
    """The port to bind and send search requests to."""

    mx: int = SSDP_DEFAULT_MX
    """The MX header value (maximum response delay in seconds) sent in search requests."""

    user_agent: Optional[str] = None
    """The USER-AGENT header value sent in search requests, or None to omit the header."""

    interface_address: Optional[str] = None
    """The local IPv4 address of the interface on which to join the multicast group. If None,
       the interface named by interface_name is used, or the system default if that is None too."""

    interface_name: Optional[str] = None
    """The name of the network interface on which to join the multicast group. "default" selects
       the interface of the default IPv4 gateway."""

    _state: _ExplorerSession
    _notifier: DiscoveryNotifier

    def __init__(
            self,
            observer: Optional[SsdpExplorerObserver]=None,
            multicast_address: str=SSDP_MULTICAST_ADDRESS,
            multicast_port: int=SSDP_PORT,
            mx: int=SSDP_DEFAULT_MX,
            user_agent: Optional[str]=None,
            include_user_agent: bool=True,
            interface_address: Optional[str]=None,
            interface_name: Optional[str]=None,
          ) -> None:
        """Create an idle explorer.

        Parameters:
            observer:           The observer to receive discovery events. Held by weak reference.
            multicast_address:  The multicast group address. Defaults to 239.255.255.250.
            multicast_port:     The multicast port. Defaults to 1900.
            mx:                 The MX value for search requests. Defaults to 3.
            user_agent:         The USER-AGENT header for search requests. Defaults to the
                                  User-Agent of the HTTP layer (requests).
            include_user_agent: If False, no USER-AGENT header is sent. Defaults to True.
            interface_address:  The local IPv4 address on which to join the multicast group.
            interface_name:     A network interface name on which to join the multicast group;
                                  "default" for the default IPv4 gateway's interface.
                                  Ignored if interface_address is provided.
        """
        self.multicast_address = multicast_address
        self.multicast_port = multicast_port
        self.mx = mx
        if include_user_agent:
            self.user_agent = default_user_agent() if user_agent is None else user_agent
        else:
            self.user_agent = None
        self.interface_address = interface_address
        self.interface_name = interface_name
        self._state = _IDLE
        self._notifier = DiscoveryNotifier(self, observer)

    def __str__(self) -> str:
        return f"SsdpExplorer({self.multicast_address}:{self.multicast_port}, state={self._state})"

    def __repr__(self) -> str:
        return str(self)

    @property
    def observer(self) -> Optional[SsdpExplorerObserver]:
        return self._notifier.observer

    @observer.setter
    def observer(self, observer: Optional[SsdpExplorerObserver]) -> None:
        self._notifier.observer = observer

    @property
    def state(self) -> ExplorerState:
        return self._state.kind

    @property
    def is_exploring(self) -> bool:
        return self._state.kind == ExplorerState.EXPLORING

    @property
    def local_address(self) -> Optional[HostAndPort]:
        """The address the socket is bound to while exploring, or None when idle."""
        state = self._state
        if not isinstance(state, _ExploringState):
            return None
        return cast(HostAndPort, state.sock.getsockname())

    def create_socket(self) -> socket.socket:
        """Creates the IPv4 UDP socket. Raises OSError on failure."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            # Allow other SSDP listeners on this host to share the port
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            if sys.platform not in ( 'win32', 'cygwin' ) and hasattr(socket, 'SO_REUSEPORT'):
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
        except BaseException:
            sock.close()
            raise
        return sock

    def bind_socket(self, sock: socket.socket) -> None:
        """Binds the socket. Raises OSError on failure."""
        # Multicast listeners MUST bind to 0.0.0.0:<port> to receive multicast packets
        sock.bind(('', self.multicast_port))

    def join_multicast_group(self, sock: socket.socket) -> None:
        """Joins the multicast group. Raises OSError or SsdpError on failure."""
        interface_address = self.interface_address
        if interface_address is None and self.interface_name is not None:
            if self.interface_name == DEFAULT_GATEWAY_INTERFACE:
                interface_address = get_interface_ipv4_address()
            else:
                interface_address = get_interface_ipv4_address(self.interface_name)
        mreq = ip_mreq(self.multicast_address, interface_address)
        logger.debug(f"Joining multicast group {self.multicast_address} on {interface_address or 'default interface'}; mreq={mreq!r}")
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, mreq)
        if interface_address is not None:
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_IF, socket.inet_aton(interface_address))

    async def start(self, ssdp_types: Iterable[Union[SsdpType, str]]) -> None:
        """Starts exploring, and sends one M-SEARCH request for each of ssdp_types.

        Raises InvalidStateError if already exploring; the running session is left untouched.
        Raises ValueError if a str in ssdp_types is not a valid SSDP type.
        Raises SocketCreationFailedError, BindFailedError, MulticastJoinFailedError or
        ReceiveStartFailedError if the socket cannot be set up; in that case the explorer
        remains idle.
        """
        types = [ SsdpType.coerce(t) for t in ssdp_types ]
        if self.is_exploring:
            raise InvalidStateError("SsdpExplorer is already exploring; stop it first")

        try:
            sock = self.create_socket()
        except OSError as e:
            raise SocketCreationFailedError(f"Socket could not be created: {e}") from e

        session = _ExploringState(sock)
        self._state = session
        try:
            try:
                self.bind_socket(sock)
            except OSError as e:
                raise BindFailedError(f"Could not bind socket to port {self.multicast_port}: {e}") from e
            try:
                self.join_multicast_group(sock)
            except (OSError, SsdpError) as e:
                raise MulticastJoinFailedError(f"Could not join multicast group {self.multicast_address}: {e}") from e
            await self._begin_receiving(session)
        except BaseException as e:
            logger.debug(f"SsdpExplorer: start failed: {e}")
            self._end_session(session)
            raise

        logger.debug(f"SsdpExplorer: exploring on {self.local_address} for {types}")
        self._send_search_requests(session, types)

    async def _begin_receiving(self, session: _ExploringState) -> None:
        loop = asyncio.get_running_loop()
        try:
            untyped_transport, _ = await loop.create_datagram_endpoint(
                lambda: _SsdpExplorerProtocol(self, session),
                sock=session.sock
              )
        except OSError as e:
            raise ReceiveStartFailedError(f"Could not begin receiving: {e}") from e
        transport: asyncio.DatagramTransport = untyped_transport # type: ignore[assignment]
        session.transport = transport
        if self._state is not session:
            transport.close()
            raise ReceiveStartFailedError("SsdpExplorer was stopped before receiving began")

    async def search(self, ssdp_types: Iterable[Union[SsdpType, str]]) -> None:
        """Sends one more M-SEARCH request for each of ssdp_types on the running session.

        Raises InvalidStateError if not exploring.
        """
        types = [ SsdpType.coerce(t) for t in ssdp_types ]
        state = self._state
        if not isinstance(state, _ExploringState):
            raise InvalidStateError("SsdpExplorer is not exploring")
        self._send_search_requests(state, types)

    def _send_search_requests(self, session: _ExploringState, types: Iterable[SsdpType]) -> None:
        dest = (self.multicast_address, self.multicast_port)
        for ssdp_type in types:
            try:
                data = build_search_request(
                    ssdp_type,
                    multicast_address=self.multicast_address,
                    multicast_port=self.multicast_port,
                    mx=self.mx,
                    user_agent=self.user_agent,
                  )
            except SearchRequestEncodingError as e:
                logger.warning(f"Skipping search request: {e}")
                continue
            # A send error is reported synchronously through error_received and ends the session
            if self._state is not session:
                break
            assert session.transport is not None
            logger.debug(f"Sending M-SEARCH for {ssdp_type} to {dest}")
            session.transport.sendto(data, dest)

    def stop(self) -> None:
        """Stops exploring and closes the socket. Does nothing if already idle.

        Must be called on the explorer's event loop; from other threads use
        loop.call_soon_threadsafe(explorer.stop).
        """
        state = self._state
        if isinstance(state, _ExploringState):
            logger.debug("SsdpExplorer: stopping")
            self._end_session(state)

    def _end_session(self, session: _ExploringState) -> None:
        if self._state is session:
            self._state = _IDLE
        session.close()

    def _datagram_received(self, session: _ExploringState, addr: HostAndPort, data: bytes) -> None:
        if self._state is not session:
            return
        try:
            message = SsdpMessage.from_bytes(data)
        except SsdpParseError as e:
            logger.debug(f"Ignoring datagram from {addr}: {e}")
            return
        logger.debug(f"Received datagram from {addr}: {message}")
        event = discovery_event_from_message(message)
        if event is None:
            return
        discovery, added = event
        if added:
            self._notifier.notify_added(discovery)
        else:
            self._notifier.notify_removed(discovery)

    def _session_failed(self, session: _ExploringState, error: Exception) -> None:
        if self._state is not session:
            return
        logger.info(f"SsdpExplorer: exploration failed: {error}")
        self._end_session(session)
        self._notifier.notify_failure(error)

    def _connection_lost(self, session: _ExploringState, exc: Optional[Exception]) -> None:
        logger.debug(f"Connection to transport lost on {session}, exc={exc}")
        if exc is None:
            if self._state is session:
                self._end_session(session)
        else:
            error = SocketClosedWithError(f"SSDP socket closed with error: {exc}")
            error.__cause__ = exc
            self._session_failed(session, error)

    async def flush(self) -> None:
        """Waits until every observer notification queued so far has been delivered."""
        await self._notifier.join()

    async def aclose(self) -> None:
        """Stops exploring and waits for all pending observer notifications to be delivered."""
        self.stop()
        await self._notifier.aclose()

    async def __aenter__(self) -> SsdpExplorer:
        return self

    async def __aexit__(
            self,
            exc_type: Optional[type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType]
      ) -> bool:
        await self.aclose()
        return False
