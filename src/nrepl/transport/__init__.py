"""Transport layer implementations."""

import os

from .base import (
    TransportError,
    ConnectionTimeout,
    ConnectionLost,
    RequestTimeout,
    Transport,
)
from .session import PendingRequest, RequestSession

_BACKEND = os.environ.get("NREPL_TRANSPORT", "zmq")

if _BACKEND == "zmq":
    from .zmq import stream
    from .zmq.stream import StreamTransport
else:
    raise ImportError(f"unknown NREPL_TRANSPORT backend: {_BACKEND!r}")
