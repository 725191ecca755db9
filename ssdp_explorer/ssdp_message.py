#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Abstraction of an HTTP-over-UDP message used in the SSDP protocol.
"""

from __future__ import annotations

import re

from .internal_types import *
from .pkg_logging import logger
from .exceptions import SsdpParseError
from .util import CaseInsensitiveDict

class SsdpMessage(Mapping[str, str]):
    """Wrapper for a raw SSDP datagram.

    This class provides parsing and formatting of the HTTP-like packets and a
    read-only dict-like interface to the headers.

    Headers parsed from a received datagram are keyed by lower-cased name and their values
    are trimmed. Lookups are case-insensitive. If a header is repeated, the last occurrence wins.
    """

    _header_line_re = re.compile(r'^([a-z0-9-]+): *(.+)$', re.IGNORECASE)

    _statement_line: str
    """The first line of the datagram; e.g., "HTTP/1.1 200 OK", "NOTIFY * HTTP/1.1", etc."""

    _headers: CaseInsensitiveDict[str]

    def __init__(
            self,
            statement: str,
            headers: Optional[Union[Mapping[str, str], Iterable[Tuple[str, str]]]]=None,
          ):
        """Create a message from a statement line and headers.

        The case of header names is preserved when the message is encoded, and headers are
        encoded in the order provided.
        """
        assert isinstance(statement, str)
        self._statement_line = statement
        self._headers = CaseInsensitiveDict()
        if headers is not None:
            items = headers.items() if isinstance(headers, Mapping) else headers
            for name, value in items:
                self._headers[name] = value

    @classmethod
    def from_bytes(cls, raw_data: bytes) -> SsdpMessage:
        """Parse a received datagram.

        Raises SsdpParseError if the datagram is not valid UTF-8 or is empty.
        """
        try:
            text = raw_data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise SsdpParseError(f"Datagram is not valid UTF-8: {e}") from e
        lines = text.splitlines()
        if len(lines) == 0:
            raise SsdpParseError("Datagram is empty")
        return cls(lines[0], cls.parse_header_lines(lines[1:]))

    @classmethod
    def parse_header_lines(cls, lines: Iterable[str]) -> CaseInsensitiveDict[str]:
        """Parses "Name: value" header lines into a CaseInsensitiveDict keyed by lower-cased name.

        Lines that do not look like a header (including blank lines) are ignored.
        """
        headers: CaseInsensitiveDict[str] = CaseInsensitiveDict()
        for line in lines:
            m = cls._header_line_re.match(line)
            if m:
                headers[m.group(1).lower()] = m.group(2).strip()
            elif line.strip() != '':
                logger.debug(f"Ignoring malformed SSDP header line: {line!r}")
        return headers

    def __str__(self) -> str:
        return f"SsdpMessage('{self._statement_line}', headers={dict(self._headers.items())})"

    def __repr__(self) -> str:
        return str(self)

    @property
    def statement_line(self) -> str:
        """The first line of the datagram; e.g., "HTTP/1.1 200 OK", "NOTIFY * HTTP/1.1", etc."""
        return self._statement_line

    @property
    def headers(self) -> CaseInsensitiveDict[str]:
        return self._headers

    @property
    def raw_data(self) -> bytes:
        """The encoded datagram. See encode()."""
        return self.encode()

    def encode(self) -> bytes:
        """Renders the statement line and headers joined with CRLF, with no trailing blank line,
           as strict UTF-8.

        Raises UnicodeEncodeError if the text cannot be encoded.
        """
        lines = [ self._statement_line ]
        for name, value in self._headers.items():
            lines.append(f"{name}: {value}")
        return '\r\n'.join(lines).encode('utf-8')

    def __getitem__(self, key: str) -> str:
        return self._headers[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def lower_items(self):
        """Like items(), but with all lowercase keys."""
        return self._headers.lower_items()

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, SsdpMessage):
            return False
        return (self._statement_line == other._statement_line and
                self._headers == other._headers)
