#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Construction of SSDP M-SEARCH request datagrams.
"""

from __future__ import annotations

from .internal_types import *
from .constants import (
    SSDP_MULTICAST_ADDRESS,
    SSDP_PORT,
    SSDP_DEFAULT_MX,
    MSEARCH_STATEMENT,
    SSDP_DISCOVER,
  )
from .exceptions import SearchRequestEncodingError
from .identifiers import SsdpType
from .ssdp_message import SsdpMessage

def search_request_message(
        ssdp_type: SsdpType,
        multicast_address: str=SSDP_MULTICAST_ADDRESS,
        multicast_port: int=SSDP_PORT,
        mx: int=SSDP_DEFAULT_MX,
        user_agent: Optional[str]=None,
      ) -> SsdpMessage:
    """Returns the M-SEARCH SsdpMessage for a single search target.

    The USER-AGENT header is appended only if user_agent is not None.
    """
    headers: List[Tuple[str, str]] = [
        ("HOST", f"{multicast_address}:{multicast_port}"),
        ("MAN", SSDP_DISCOVER),
        ("ST", ssdp_type.raw_value),
        ("MX", str(mx)),
      ]
    if user_agent is not None:
        headers.append(("USER-AGENT", user_agent))
    return SsdpMessage(MSEARCH_STATEMENT, headers)

def build_search_request(
        ssdp_type: SsdpType,
        multicast_address: str=SSDP_MULTICAST_ADDRESS,
        multicast_port: int=SSDP_PORT,
        mx: int=SSDP_DEFAULT_MX,
        user_agent: Optional[str]=None,
      ) -> bytes:
    """Returns the raw bytes of an M-SEARCH request for a single search target.

    Raises SearchRequestEncodingError if the request cannot be encoded as UTF-8 without loss.
    """
    message = search_request_message(
        ssdp_type,
        multicast_address=multicast_address,
        multicast_port=multicast_port,
        mx=mx,
        user_agent=user_agent,
      )
    try:
        return message.encode()
    except UnicodeEncodeError as e:
        raise SearchRequestEncodingError(f"Unable to encode M-SEARCH request for {ssdp_type!r}: {e}") from e
