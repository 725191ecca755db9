# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants used by this package"""

SSDP_MULTICAST_ADDRESS = "239.255.255.250"
"""The IPv4 multicast group address used by SSDP."""

SSDP_PORT = 1900
"""The UDP port number used by SSDP for multicast."""

SSDP_DEFAULT_MX = 3
"""The default MX (maximum response delay in seconds) sent in M-SEARCH requests."""

MSEARCH_STATEMENT = "M-SEARCH * HTTP/1.1"
"""Statement line of an SSDP search request."""

SEARCH_RESPONSE_STATEMENT = "HTTP/1.1 200 OK"
"""Statement line of a successful SSDP search response."""

NOTIFY_STATEMENT = "NOTIFY * HTTP/1.1"
"""Statement line of an SSDP notification."""

SSDP_DISCOVER = '"ssdp:discover"'
"""The quoted value of the MAN header in an M-SEARCH request."""

NTS_ALIVE = "ssdp:alive"
NTS_UPDATE = "ssdp:update"
NTS_BYEBYE = "ssdp:byebye"

DEFAULT_GATEWAY_INTERFACE = "default"
"""An interface_name that selects the interface of the default IPv4 gateway."""
