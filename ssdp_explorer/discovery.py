#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SsdpDiscovery -- the unit of output of an SsdpExplorer.
"""

from __future__ import annotations

from .internal_types import *
from .identifiers import SsdpType, UniqueServiceName

class SsdpDiscovery:
    """A service discovered (or withdrawn) on the network.

    Instances are built fresh from each received message and are never mutated.

    A discovery delivered as a removal does not carry a dereferenceable description URL;
    byebye notifications have no LOCATION header, so description_url holds the
    HOST header value of the notification instead.
    """

    _usn: UniqueServiceName
    _description_url: str
    _ssdp_type: SsdpType

    def __init__(self, usn: UniqueServiceName, description_url: str, ssdp_type: SsdpType):
        self._usn = usn
        self._description_url = description_url
        self._ssdp_type = ssdp_type

    @property
    def usn(self) -> UniqueServiceName:
        """The unique service name from the USN header"""
        return self._usn

    @property
    def description_url(self) -> str:
        """The device description URL from the LOCATION header (or the HOST header for removals)"""
        return self._description_url

    @property
    def ssdp_type(self) -> SsdpType:
        """The service type from the ST or NT header"""
        return self._ssdp_type

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, SsdpDiscovery):
            return False
        return (self._usn == other._usn and
                self._description_url == other._description_url and
                self._ssdp_type == other._ssdp_type)

    def __hash__(self) -> int:
        return hash((self._usn, self._description_url, self._ssdp_type))

    def __str__(self) -> str:
        return f"SsdpDiscovery(usn='{self._usn}', description_url='{self._description_url}', type='{self._ssdp_type}')"

    def __repr__(self) -> str:
        return str(self)
