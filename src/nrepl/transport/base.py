"""Transport interface.

This is the (small) contract that transport implementations should follow.
It lives outside :mod:`nrepl.protocol` so the protocol remains transport-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors."""


class ConnectionTimeout(TransportError):
    """The connection was not established within the allotted time."""


class ConnectionLost(TransportError):
    """The connection closed, or failed, before a request was answered."""


class RequestTimeout(TransportError):
    """A request did not receive its final response in time.

    :ivar request: the request that timed out.
    """

    def __init__(self, message: str, request=None):
        TransportError.__init__(self, message)
        self.request = request


# Callback signatures. The transport instance is always passed first, so a
# client can ignore events from a transport it has already replaced.

ReceiveCallback = Callable[["Transport", bytes], None]
ClosedCallback = Callable[["Transport", str], None]


class Transport(ABC):
    """Minimal contract for a byte-stream transport."""

    def __init__(self, receive: ReceiveCallback, closed: ClosedCallback):
        self.receive = receive
        self.closed = closed

    @abstractmethod
    def open(self) -> None:
        """Begin establishing the underlying connection."""

    @abstractmethod
    def wait_open(self, timeout: Optional[float]) -> bool:
        """Block until the connection is established; False on timeout."""

    @abstractmethod
    def close(self) -> None:
        """Tear down the underlying connection without invoking *closed*."""

    @abstractmethod
    def send(self, data: bytes) -> None:
        """Queue *data* for transmission; raises ConnectionLost if closed."""

    @property
    def is_open(self) -> bool:
        """Whether the transport is currently connected."""
        return False
