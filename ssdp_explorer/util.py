#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Simple utility functions used by this package
"""

from __future__ import annotations

import netifaces
import socket
from ipaddress import IPv4Address

from requests.structures import CaseInsensitiveDict
from requests.utils import default_headers

from .internal_types import *
from .exceptions import SsdpError

def default_user_agent() -> Optional[str]:
    """Returns the User-Agent header value that the HTTP layer (requests) sends by default,
       or None if it does not provide one."""
    result = default_headers().get('User-Agent')
    if not isinstance(result, str) or result == '':
        return None
    return result

def get_default_ip_gateway() -> Tuple[Optional[str], Optional[str]]:
    """Returns the (gateway_ip_address: str, gateway_interface_name: str) for the default IPv4 gateway, if any.
       returns (None, None) if there is no default IPv4 gateway."""
    gws = netifaces.gateways()
    if "default" in gws:
        default_gateway_infos = gws["default"]
        if netifaces.AF_INET in default_gateway_infos:
            gw_ip, gw_interface_name = default_gateway_infos[netifaces.AF_INET][:2]
            return (gw_ip, gw_interface_name)
    return (None, None)

def get_interface_ipv4_address(interface_name: Optional[str]=None) -> str:
    """Returns the first IPv4 address assigned to a named network interface.

    If interface_name is None, the interface of the default IPv4 gateway is used.

    Raises SsdpError if the interface does not exist or has no IPv4 address.
    """
    if interface_name is None:
        _, interface_name = get_default_ip_gateway()
        if interface_name is None:
            raise SsdpError("There is no default IPv4 gateway interface")
    if interface_name not in netifaces.interfaces():
        raise SsdpError(f"Unknown network interface: {interface_name}")
    ifinfo = netifaces.ifaddresses(interface_name)
    for addrinfo in ifinfo.get(netifaces.AF_INET, []):
        ip_str = addrinfo.get('addr')
        if isinstance(ip_str, str):
            # Validates the address
            return str(IPv4Address(ip_str))
    raise SsdpError(f"Network interface {interface_name} has no IPv4 address")

def ip_mreq(group_address: str, interface_address: Optional[str]=None) -> bytes:
    """Builds the struct ip_mreq value for IP_ADD_MEMBERSHIP.

    If interface_address is None, the kernel chooses the interface (INADDR_ANY).
    """
    group_bin = socket.inet_aton(group_address)
    if interface_address is None:
        interface_bin = socket.inet_aton('0.0.0.0')
    else:
        interface_bin = socket.inet_aton(interface_address)
    return group_bin + interface_bin
