#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package"""

class SsdpError(Exception):
  """Base class for all error exceptions defined by this package."""
  pass

class SsdpParseError(SsdpError):
  """A received datagram could not be parsed as an SSDP message."""
  pass

class SearchRequestEncodingError(SsdpError):
  """An M-SEARCH request could not be encoded as UTF-8."""
  pass

class ExplorerError(SsdpError):
  """Base class for errors in the lifecycle of an SsdpExplorer session."""
  pass

class SocketCreationFailedError(ExplorerError):
  """The UDP socket could not be created."""
  pass

class BindFailedError(ExplorerError):
  """The UDP socket could not be bound to the SSDP port."""
  pass

class MulticastJoinFailedError(ExplorerError):
  """The socket could not join the SSDP multicast group."""
  pass

class ReceiveStartFailedError(ExplorerError):
  """The socket could not begin receiving datagrams."""
  pass

class SendFailedError(ExplorerError):
  """A datagram could not be sent, or the socket reported an error while receiving.
     Ends the exploration session."""
  pass

class SocketClosedWithError(ExplorerError):
  """The socket was closed abnormally while exploring. Ends the exploration session."""
  pass

class InvalidStateError(ExplorerError):
  """The operation is not valid in the explorer's current state; e.g., start() while already exploring."""
  pass
