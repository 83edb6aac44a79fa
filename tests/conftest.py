import pytest
import socket

import nrepl
import unitserver


@pytest.fixture
def nrepl_server():

    server = unitserver.Server()
    server.start()

    yield server

    server.stop()


@pytest.fixture
def client(nrepl_server):

    # Short timeouts keep the failure cases from dragging the tests out.

    instance = nrepl.Client(nrepl_server.port, '127.0.0.1', connect_timeout=2, request_timeout=2)

    yield instance

    instance.close()


@pytest.fixture
def unused_port():

    # Bind to an ephemeral port and release it again; nothing should be
    # listening there for the duration of a test.

    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(('127.0.0.1', 0))
    port = probe.getsockname()[1]
    probe.close()

    return port


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
