# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Type hints used internally by this package.

Modules in this package pull these in with "from .internal_types import *".
"""

from typing import (
    TYPE_CHECKING,
    Any,
    AsyncContextManager,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Tuple,
    Type,
    TypeVar,
    Union,
    cast,
)

from types import TracebackType
from typing_extensions import Self

HostAndPort = Tuple[str, int]
"""An (ip_address, port) tuple as used by the socket module for AF_INET addresses."""

