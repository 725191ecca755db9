# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Package ssdp_explorer discovers network services with the Simple Service Discovery Protocol (SSDP).

SSDP is the UDP multicast discovery protocol defined by the UPnP Forum. A control point
multicasts M-SEARCH requests to 239.255.255.250:1900 and listens on the same group for search
responses and for the NOTIFY messages services send when they appear (ssdp:alive), change
(ssdp:update) or leave (ssdp:byebye) the network. Messages use HTTP/1.1 syntax carried in
single UDP datagrams.

SsdpExplorer joins the multicast group, sends searches for a set of service types, and reports
each discovered or withdrawn service to an SsdpExplorerObserver. Fetching the device description
documents that discoveries point to is left to the caller.
"""

from .version import __version__

from .internal_types import HostAndPort

from .exceptions import (
    SsdpError,
    SsdpParseError,
    SearchRequestEncodingError,
    ExplorerError,
    SocketCreationFailedError,
    BindFailedError,
    MulticastJoinFailedError,
    ReceiveStartFailedError,
    SendFailedError,
    SocketClosedWithError,
    InvalidStateError,
  )

from .identifiers import SsdpType, SsdpTypeKind, UniqueServiceName
from .discovery import SsdpDiscovery
from .ssdp_message import SsdpMessage
from .search_request import build_search_request, search_request_message
from .classifier import (
    SsdpMessageKind,
    classify_message,
    extract_discovery,
    is_addition,
    discovery_event_from_message,
  )
from .notifier import SsdpExplorerObserver, DiscoveryNotifier
from .explorer import SsdpExplorer, ExplorerState
from .util import CaseInsensitiveDict, default_user_agent
from .constants import SSDP_MULTICAST_ADDRESS, SSDP_PORT, SSDP_DEFAULT_MX

__all__ = [
    '__version__',
    'HostAndPort',
    'SsdpError', 'SsdpParseError', 'SearchRequestEncodingError',
    'ExplorerError', 'SocketCreationFailedError', 'BindFailedError', 'MulticastJoinFailedError',
    'ReceiveStartFailedError', 'SendFailedError', 'SocketClosedWithError', 'InvalidStateError',
    'SsdpType', 'SsdpTypeKind', 'UniqueServiceName',
    'SsdpDiscovery',
    'SsdpMessage',
    'build_search_request', 'search_request_message',
    'SsdpMessageKind', 'classify_message', 'extract_discovery', 'is_addition', 'discovery_event_from_message',
    'SsdpExplorerObserver', 'DiscoveryNotifier',
    'SsdpExplorer', 'ExplorerState',
    'CaseInsensitiveDict', 'default_user_agent',
    'SSDP_MULTICAST_ADDRESS', 'SSDP_PORT', 'SSDP_DEFAULT_MX',
]
