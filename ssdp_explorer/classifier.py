#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Classification of received SSDP messages, and extraction of the SsdpDiscovery they describe.

Received datagrams come from arbitrary peers on the network, so nothing in this module
raises on malformed input; a message that cannot be classified or is missing a required
field simply produces no discovery.
"""

from __future__ import annotations

from enum import Enum
from urllib.parse import urlsplit

from .internal_types import *
from .pkg_logging import logger
from .constants import (
    SEARCH_RESPONSE_STATEMENT,
    NOTIFY_STATEMENT,
    NTS_ALIVE,
    NTS_UPDATE,
    NTS_BYEBYE,
  )
from .identifiers import SsdpType, UniqueServiceName
from .discovery import SsdpDiscovery
from .ssdp_message import SsdpMessage

class SsdpMessageKind(Enum):
    """The kinds of SSDP message that produce discovery events."""
    SEARCH_RESPONSE = "search_response"
    AVAILABLE_NOTIFICATION = "available_notification"
    UPDATE_NOTIFICATION = "update_notification"
    UNAVAILABLE_NOTIFICATION = "unavailable_notification"

_notification_kinds: Dict[str, SsdpMessageKind] = {
    NTS_ALIVE: SsdpMessageKind.AVAILABLE_NOTIFICATION,
    NTS_UPDATE: SsdpMessageKind.UPDATE_NOTIFICATION,
    NTS_BYEBYE: SsdpMessageKind.UNAVAILABLE_NOTIFICATION,
}

def classify_message(message: SsdpMessage) -> Optional[SsdpMessageKind]:
    """Returns the kind of a received message, or None if it is not one of the SSDP messages
       of interest (e.g., another node's M-SEARCH request)."""
    statement_line = message.statement_line
    if statement_line == SEARCH_RESPONSE_STATEMENT:
        return SsdpMessageKind.SEARCH_RESPONSE
    if statement_line == NOTIFY_STATEMENT:
        nts = message.headers.get('nts')
        if nts is not None:
            return _notification_kinds.get(nts)
    return None

def is_addition(kind: SsdpMessageKind) -> bool:
    """True if a message of this kind announces a service; False if it withdraws one."""
    return kind != SsdpMessageKind.UNAVAILABLE_NOTIFICATION

def extract_discovery(kind: SsdpMessageKind, message: SsdpMessage) -> Optional[SsdpDiscovery]:
    """Builds the SsdpDiscovery described by a classified message.

    Returns None if USN, LOCATION (HOST for byebye), or ST/NT is missing or malformed.
    """
    headers = message.headers

    usn_raw = headers.get('usn')
    if usn_raw is None:
        logger.debug(f"Dropping SSDP message without USN: {message}")
        return None
    try:
        usn = UniqueServiceName(usn_raw)
    except ValueError as e:
        logger.debug(f"Dropping SSDP message with bad USN: {e}")
        return None

    # byebye messages don't have a location
    if kind == SsdpMessageKind.UNAVAILABLE_NOTIFICATION:
        location = headers.get('host')
    else:
        location = headers.get('location')
    if location is None or location == '':
        logger.debug(f"Dropping SSDP message without location: {message}")
        return None
    try:
        urlsplit(location)
    except ValueError as e:
        logger.debug(f"Dropping SSDP message with bad location {location!r}: {e}")
        return None

    ssdp_type_raw = headers.get('st')
    if ssdp_type_raw is None:
        ssdp_type_raw = headers.get('nt')
    if ssdp_type_raw is None:
        logger.debug(f"Dropping SSDP message without ST or NT: {message}")
        return None
    try:
        ssdp_type = SsdpType.from_raw(ssdp_type_raw)
    except ValueError as e:
        logger.debug(f"Dropping SSDP message with bad type: {e}")
        return None

    return SsdpDiscovery(usn, location, ssdp_type)

def discovery_event_from_message(message: SsdpMessage) -> Optional[Tuple[SsdpDiscovery, bool]]:
    """Classifies a received message and extracts its discovery.

    Returns a Tuple[discovery, added], where added is False for removals, or None if the
    message produces no event.
    """
    kind = classify_message(message)
    if kind is None:
        return None
    discovery = extract_discovery(kind, message)
    if discovery is None:
        return None
    return (discovery, is_addition(kind))
