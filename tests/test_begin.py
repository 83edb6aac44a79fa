import nrepl
import pytest


@pytest.fixture
def connected(nrepl_server):

    client = nrepl.connect(nrepl_server.port, '127.0.0.1', connect_timeout=2, request_timeout=2)

    yield client

    nrepl.begin.close()


def test_not_connected():

    nrepl.begin.close()

    with pytest.raises(RuntimeError):
        nrepl.evaluate('(+ 40 2)')

    with pytest.raises(RuntimeError):
        nrepl.begin.ns_vars('user')

    status = nrepl.begin.status()
    assert status['connected'] == False
    assert status['session'] is None


def test_connect(connected):

    assert connected.connected == True
    assert connected.session is not None
    assert nrepl.begin.status() == connected.status()


def test_connect_replaces(connected, nrepl_server):

    replacement = nrepl.connect(nrepl_server.port, '127.0.0.1')

    assert replacement is not connected
    assert connected.connected == False
    assert replacement.session != connected.session


def test_connect_port_file(nrepl_server, tmp_path, monkeypatch):

    port_file = tmp_path / '.nrepl-port'
    port_file.write_text(str(nrepl_server.port))

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv('NREPL_PORT', raising=False)
    monkeypatch.delenv('NREPL_HOST', raising=False)

    try:
        client = nrepl.connect()
        assert client.port == nrepl_server.port
        assert client.connected == True
    finally:
        nrepl.begin.close()


def test_evaluate(connected):

    assert nrepl.evaluate('(+ 40 2)') == '42'


def test_evaluate_ns(connected):

    assert nrepl.evaluate('*ns*') == '#namespace[user]'
    assert nrepl.evaluate('*ns*', ns='my.app') == '#namespace[my.app]'

    # The namespace switch persists in the session.

    assert nrepl.evaluate('*ns*') == '#namespace[my.app]'


def test_ns_vars(connected, nrepl_server):

    nrepl.begin.ns_vars('my.app')

    code = nrepl_server.received[-1]['code']
    assert "(ns-publics 'my.app)" in code


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
