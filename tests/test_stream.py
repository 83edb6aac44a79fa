""" Exercise the ZeroMQ STREAM transport against a plain TCP listener.
"""

import socket
import threading

import pytest

from nrepl.transport import ConnectionLost, StreamTransport


class Events:

    def __init__(self):
        self.received = list()
        self.closed = list()
        self.data_event = threading.Event()
        self.closed_event = threading.Event()

    def receive(self, transport, data):
        self.received.append(data)
        self.data_event.set()

    def close(self, transport, reason):
        self.closed.append((transport, reason))
        self.closed_event.set()


@pytest.fixture
def listener():

    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    server.bind(('127.0.0.1', 0))
    server.listen(1)
    server.settimeout(2)

    yield server

    server.close()


def test_round_trip(listener):

    events = Events()
    port = listener.getsockname()[1]
    transport = StreamTransport('127.0.0.1', port, events.receive, events.close)

    try:
        assert transport.is_open == False

        transport.open()
        connection, address = listener.accept()
        assert transport.wait_open(2) == True
        assert transport.is_open == True

        transport.send(b'd2:op5:clonee')
        connection.settimeout(2)
        assert connection.recv(4096) == b'd2:op5:clonee'

        connection.sendall(b'5:hello')
        assert events.data_event.wait(2) == True
        assert b''.join(events.received) == b'5:hello'

        # The peer closing the connection is reported.

        connection.close()
        assert events.closed_event.wait(2) == True
        assert events.closed[0][0] is transport
        assert events.closed[0][1] == 'Connection closed'
        assert transport.is_open == False

        with pytest.raises(ConnectionLost):
            transport.send(b'i1e')
    finally:
        transport.close()


def test_local_close(listener):

    events = Events()
    port = listener.getsockname()[1]
    transport = StreamTransport('127.0.0.1', port, events.receive, events.close)

    transport.open()
    connection, address = listener.accept()
    assert transport.wait_open(2) == True

    transport.close()
    connection.close()

    assert transport.is_open == False
    assert events.closed_event.wait(0.2) == False

    with pytest.raises(ConnectionLost):
        transport.send(b'i1e')


def test_close_while_sending(listener):

    events = Events()
    port = listener.getsockname()[1]
    transport = StreamTransport('127.0.0.1', port, events.receive, events.close)

    transport.open()
    connection, address = listener.accept()
    assert transport.wait_open(2) == True

    outcomes = list()
    start = threading.Event()

    def sender():
        start.wait()
        for count in range(200):
            try:
                transport.send(b'i1e')
            except ConnectionLost:
                outcomes.append('lost')
                return
        outcomes.append('sent')

    threads = [threading.Thread(target=sender) for count in range(4)]
    for thread in threads:
        thread.start()

    start.set()
    transport.close()

    for thread in threads:
        thread.join(timeout=2)

    connection.close()

    assert len(outcomes) == 4
    assert transport._signal() == False

    with pytest.raises(ConnectionLost):
        transport.send(b'i1e')


def test_no_listener():

    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(('127.0.0.1', 0))
    port = probe.getsockname()[1]
    probe.close()

    events = Events()
    transport = StreamTransport('127.0.0.1', port, events.receive, events.close)

    try:
        transport.open()
        assert transport.wait_open(0.2) == False
        assert transport.is_open == False

        with pytest.raises(ConnectionLost):
            transport.send(b'i1e')
    finally:
        transport.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
