"""ZeroMQ raw TCP transport.

nREPL servers speak plain TCP, not ZMTP, so this transport uses a ZeroMQ
STREAM socket: every inbound message is a (routing id, data) pair, where
the data is whatever chunk of the TCP byte stream arrived. A zero-length
data frame is a notification; the first one means the connection is up,
the next one means the peer went away.

The socket is owned by a single background thread, as ZeroMQ sockets are
not thread-safe. Callers queue outbound bytes and poke the thread via an
inproc PAIR socket, the same arrangement the request client uses.
"""

from __future__ import annotations

import itertools
import logging
import queue
import threading
from typing import Optional

import zmq

from ..base import ClosedCallback, ConnectionLost, ReceiveCallback, Transport

logger = logging.getLogger(__name__)

zmq_context = zmq.Context()
_instance = itertools.count()


class StreamTransport(Transport):
    """Connect to *address*:*port* and shuttle bytes to and from it."""

    poll_interval = 1000

    def __init__(
        self,
        address: str,
        port: int,
        receive: ReceiveCallback,
        closed: ClosedCallback,
    ):
        Transport.__init__(self, receive, closed)

        self.address = address
        self.port = int(port)

        self.socket = zmq_context.socket(zmq.STREAM)
        self.socket.setsockopt(zmq.LINGER, 0)

        # Reconnection is handled by the client, which always replaces the
        # transport; libzmq must not quietly bring this one back.
        self.socket.setsockopt(zmq.RECONNECT_IVL, -1)

        self._outbox: queue.SimpleQueue = queue.SimpleQueue()

        internal = f"inproc://nrepl.StreamTransport:signal:{next(_instance)}"
        self._signal_rx = zmq_context.socket(zmq.PAIR)
        self._signal_rx.bind(internal)
        self._signal_tx = zmq_context.socket(zmq.PAIR)
        self._signal_tx.connect(internal)
        self._signal_lock = threading.Lock()

        self._routing_id: Optional[bytes] = None
        self._connected = threading.Event()
        self._open = False
        self._shutdown = False
        self._thread: Optional[threading.Thread] = None

    def __repr__(self) -> str:
        return f"<StreamTransport tcp://{self.address}:{self.port}>"

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        server = f"tcp://{self.address}:{self.port}"
        logger.debug("connecting to %s", server)

        self.socket.connect(server)
        self._thread = threading.Thread(target=self.run, daemon=True)
        self._thread.start()

    def wait_open(self, timeout: Optional[float]) -> bool:
        return self._connected.wait(timeout)

    def close(self) -> None:
        self._shutdown = True
        self._open = False

        thread = self._thread
        if thread is None:
            self._teardown()
        elif thread is not threading.current_thread():
            self._signal()
            thread.join(timeout=1)

        # Callers may be inside _signal() on another thread.
        with self._signal_lock:
            self._signal_tx.close()

    def send(self, data: bytes) -> None:
        if not self._open:
            raise ConnectionLost(f"not connected to {self.address}:{self.port}")

        self._outbox.put(data)
        if not self._signal():
            raise ConnectionLost(f"connection to {self.address}:{self.port} is closed")

    # --- internal ---
    def _signal(self) -> bool:
        # The transport thread may already be gone, in which case nobody
        # will ever read the signal; a blocking send would hang forever.
        with self._signal_lock:
            if self._signal_tx.closed:
                return False
            try:
                self._signal_tx.send(b"", flags=zmq.NOBLOCK)
            except zmq.ZMQError:
                return False
        return True

    def _handle_outgoing(self) -> None:
        # Clear one signal and send one chunk.
        self._signal_rx.recv(flags=zmq.NOBLOCK)

        try:
            data = self._outbox.get(block=False)
        except queue.Empty:
            return

        self.socket.send_multipart((self._routing_id, data))

    def _handle_incoming(self) -> bool:
        """Process one inbound message; False once the peer is gone."""
        routing_id, data = self.socket.recv_multipart()

        if data:
            self.receive(self, data)
            return True

        if self._routing_id is None:
            self._routing_id = routing_id
            self._open = True
            logger.info("connected to %s:%d", self.address, self.port)
            self._connected.set()
            return True

        return False

    def _teardown(self) -> None:
        self._open = False
        self.socket.close()
        self._signal_rx.close()

    def run(self) -> None:
        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)
        poller.register(self._signal_rx, zmq.POLLIN)

        reason = "Connection closed"
        running = True

        try:
            while running and not self._shutdown:
                for active, _flag in poller.poll(self.poll_interval):
                    if active == self._signal_rx:
                        self._handle_outgoing()
                    elif active == self.socket:
                        running = self._handle_incoming()
                        if not running:
                            break
        except Exception as e:
            reason = str(e) or e.__class__.__name__
            logger.warning("transport to %s:%d failed: %s", self.address, self.port, reason)
        finally:
            self._teardown()

        # A close() requested locally is not reported back.
        if self._shutdown:
            return

        logger.info("connection to %s:%d closed: %s", self.address, self.port, reason)
        self.closed(self, reason)
