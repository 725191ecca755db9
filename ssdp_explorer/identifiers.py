#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Identity tokens carried in SSDP headers:

  SsdpType           -- A search target or notification type (ST/NT header), e.g.
                        "urn:schemas-upnp-org:device:MediaServer:1".
  UniqueServiceName  -- A unique service name (USN header), e.g.
                        "uuid:abc::urn:schemas-upnp-org:device:MediaServer:1".
"""

from __future__ import annotations

import re
from enum import Enum

from .internal_types import *

class SsdpTypeKind(Enum):
    """The syntactic category of an SsdpType."""
    ALL = "all"
    ROOT_DEVICE = "root_device"
    UUID = "uuid"
    DEVICE = "device"
    SERVICE = "service"

class SsdpType:
    """An immutable SSDP search target / notification type.

    Instances are hashable and compare equal when their raw values are equal.
    """

    ALL_RAW_VALUE = "ssdp:all"
    ROOT_DEVICE_RAW_VALUE = "upnp:rootdevice"

    _uuid_re = re.compile(r'^uuid:(?P<uuid>.+)$')
    _urn_re = re.compile(r'^urn:(?P<domain>[^:]+):(?P<category>device|service):(?P<name>[^:]+):(?P<version>[^:]+)$')

    _raw_value: str
    _kind: SsdpTypeKind

    def __init__(self, raw_value: str, kind: SsdpTypeKind):
        self._raw_value = raw_value
        self._kind = kind

    @classmethod
    def from_raw(cls, raw_value: str) -> SsdpType:
        """Parses a raw ST/NT header value.

        Raises ValueError if the value is not a recognized SSDP type.
        """
        if not isinstance(raw_value, str):
            raise ValueError(f"SSDP type must be a str: {raw_value!r}")
        if raw_value == cls.ALL_RAW_VALUE:
            return cls(raw_value, SsdpTypeKind.ALL)
        if raw_value == cls.ROOT_DEVICE_RAW_VALUE:
            return cls(raw_value, SsdpTypeKind.ROOT_DEVICE)
        if cls._uuid_re.match(raw_value):
            return cls(raw_value, SsdpTypeKind.UUID)
        m = cls._urn_re.match(raw_value)
        if m:
            kind = SsdpTypeKind.DEVICE if m.group('category') == 'device' else SsdpTypeKind.SERVICE
            return cls(raw_value, kind)
        raise ValueError(f"Unrecognized SSDP type: {raw_value!r}")

    @classmethod
    def coerce(cls, value: Union[SsdpType, str]) -> SsdpType:
        """Returns value if it is already an SsdpType, otherwise parses it with from_raw()."""
        if isinstance(value, SsdpType):
            return value
        return cls.from_raw(value)

    @property
    def raw_value(self) -> str:
        """The header value, e.g. "urn:schemas-upnp-org:device:MediaServer:1"."""
        return self._raw_value

    @property
    def kind(self) -> SsdpTypeKind:
        return self._kind

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, SsdpType):
            return False
        return self._raw_value == other._raw_value

    def __hash__(self) -> int:
        return hash(self._raw_value)

    def __str__(self) -> str:
        return self._raw_value

    def __repr__(self) -> str:
        return f"SsdpType({self._raw_value!r}, kind={self._kind.name})"

class UniqueServiceName:
    """An immutable, validated SSDP unique service name.

    All forms of USN begin with "uuid:<device-uuid>", optionally followed by
    "::" and either "upnp:rootdevice" or a device/service type URN.
    """

    _usn_re = re.compile(r'^uuid:(?P<uuid>(?:(?!::).)+)(?:::(?P<suffix>.+))?$')

    _raw_value: str
    _uuid: str
    _suffix: Optional[str]

    def __init__(self, raw_value: str):
        """Parses a raw USN header value. Raises ValueError if it is malformed."""
        if not isinstance(raw_value, str):
            raise ValueError(f"USN must be a str: {raw_value!r}")
        m = self._usn_re.match(raw_value)
        if not m:
            raise ValueError(f"Malformed USN: {raw_value!r}")
        self._raw_value = raw_value
        self._uuid = m.group('uuid')
        self._suffix = m.group('suffix')

    @property
    def raw_value(self) -> str:
        return self._raw_value

    @property
    def uuid(self) -> str:
        """The device UUID, without the "uuid:" prefix."""
        return self._uuid

    @property
    def is_root_device(self) -> bool:
        return self._suffix == SsdpType.ROOT_DEVICE_RAW_VALUE

    @property
    def custom_type(self) -> Optional[str]:
        """The type following "::", unless it is "upnp:rootdevice". None if there is none."""
        if self._suffix is None or self.is_root_device:
            return None
        return self._suffix

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, UniqueServiceName):
            return False
        return self._raw_value == other._raw_value

    def __hash__(self) -> int:
        return hash(self._raw_value)

    def __str__(self) -> str:
        return self._raw_value

    def __repr__(self) -> str:
        return f"UniqueServiceName({self._raw_value!r})"
