"""Transport-agnostic request correlation.

Every outbound request carries a correlation id; the server echoes that id
on each of the (possibly many) responses it sends back. A
:class:`RequestSession` keeps one :class:`PendingRequest` per id in flight,
accumulates the responses for it, and releases the caller once the
terminal 'done' response arrives or the deadline passes.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from ..protocol import request as validation
from ..protocol.message import Request, Response
from .base import ConnectionLost, RequestTimeout, TransportError

logger = logging.getLogger(__name__)


class PendingRequest:
    """Client-side helper that accumulates responses for one request."""

    def __init__(self, req: Request, timeout: float):
        self.req = req
        self.responses: List[Response] = []
        self.deadline = time.monotonic() + timeout
        self.error: Optional[TransportError] = None
        self.done_event = threading.Event()

    @property
    def id(self) -> str:
        return self.req.id

    @property
    def remaining(self) -> float:
        return max(0.0, self.deadline - time.monotonic())

    def poll(self) -> bool:
        """Return True if the request is complete, otherwise False."""
        return self.done_event.is_set()

    def _append(self, response: Response) -> bool:
        """Store *response*; returns True if it was the terminal one."""
        self.responses.append(response)
        return response.done

    def _complete(self) -> None:
        self.done_event.set()

    def _fail(self, error: TransportError) -> None:
        self.error = error
        self.done_event.set()


class RequestSession:
    """Client-side request/response correlation.

    The *write* callable puts an encoded request on the wire; it is invoked
    on the caller's thread. Incoming responses are handed to
    :meth:`_handle_incoming`, typically from the transport's thread.
    """

    timeout = 30

    def __init__(self, write: Callable[[Request], None], timeout: Optional[float] = None):
        self.write = write
        if timeout is not None:
            self.timeout = timeout

        self._pending: Dict[str, PendingRequest] = {}
        self._lock = threading.Lock()

    def __contains__(self, id: str) -> bool:
        with self._lock:
            return id in self._pending

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def _handle_incoming(self, response: Response) -> None:
        """Correlate an incoming response to a PendingRequest."""
        id = response.id
        if id is None:
            logger.debug("dropping response without an id: %r", response)
            return

        with self._lock:
            pending = self._pending.get(id)
            if pending is None:
                logger.debug("dropping response for unknown id %s", id)
                return

            terminal = pending._append(response)
            if terminal:
                del self._pending[id]

        if terminal:
            pending._complete()

    def fail_all(self, reason: str) -> int:
        """Fail every pending request with ConnectionLost; returns how many."""
        with self._lock:
            pending = list(self._pending.values())
            self._pending.clear()

        for request in pending:
            request._fail(ConnectionLost(reason))

        return len(pending)

    def send(self, request: Request, timeout: Optional[float] = None) -> PendingRequest:
        validation.validate(request)

        if timeout is None:
            timeout = self.timeout

        with self._lock:
            while request.id in self._pending:
                request = request.with_id(None)

            pending = PendingRequest(request, timeout)
            self._pending[pending.id] = pending

        logger.debug("sending %r", request)

        try:
            self.write(request)
        except Exception:
            with self._lock:
                self._pending.pop(pending.id, None)
            raise

        return pending

    def wait(self, pending: PendingRequest) -> List[Response]:
        """Block until *pending* completes; return all of its responses."""
        if not pending.done_event.wait(pending.remaining):
            with self._lock:
                expired = self._pending.pop(pending.id, None)

            if expired is not None:
                raise RequestTimeout(
                    f"nREPL request timed out. Message: {pending.req!r}",
                    pending.req,
                )

            # Already removed by whoever is completing it; that thread sets
            # the event immediately after.
            pending.done_event.wait()

        if pending.error is not None:
            raise pending.error

        return pending.responses

    def request(self, request: Request, timeout: Optional[float] = None) -> List[Response]:
        """Send *request* and block until all of its responses arrive."""
        pending = self.send(request, timeout)
        return self.wait(pending)
