import pytest

from nrepl import config


def test_host(monkeypatch):

    monkeypatch.delenv('NREPL_HOST', raising=False)
    assert config.host() == '127.0.0.1'

    monkeypatch.setenv('NREPL_HOST', 'repl.example.com')
    assert config.host() == 'repl.example.com'

    monkeypatch.setenv('NREPL_HOST', '  ')
    assert config.host() == '127.0.0.1'


def test_port_environment(monkeypatch, tmp_path):

    monkeypatch.setenv('NREPL_PORT', '7888')
    assert config.port(tmp_path) == 7888

    monkeypatch.setenv('NREPL_PORT', 'seven')
    with pytest.raises(ValueError):
        config.port(tmp_path)

    monkeypatch.setenv('NREPL_PORT', '70000')
    with pytest.raises(ValueError):
        config.port(tmp_path)


def test_port_file(monkeypatch, tmp_path):

    monkeypatch.delenv('NREPL_PORT', raising=False)

    project = tmp_path / 'project'
    nested = project / 'src' / 'app'
    nested.mkdir(parents=True)

    (project / '.nrepl-port').write_text('54321\n')

    assert config.find_port_file(nested) == str(project / '.nrepl-port')
    assert config.port(nested) == 54321
    assert config.port(project) == 54321


def test_timeouts(monkeypatch):

    monkeypatch.delenv('NREPL_CONNECT_TIMEOUT', raising=False)
    monkeypatch.delenv('NREPL_REQUEST_TIMEOUT', raising=False)

    assert config.connect_timeout() == 5
    assert config.request_timeout() == 30

    monkeypatch.setenv('NREPL_CONNECT_TIMEOUT', '0.5')
    monkeypatch.setenv('NREPL_REQUEST_TIMEOUT', '120')

    assert config.connect_timeout() == 0.5
    assert config.request_timeout() == 120

    monkeypatch.setenv('NREPL_REQUEST_TIMEOUT', '-1')
    with pytest.raises(ValueError):
        config.request_timeout()

    monkeypatch.setenv('NREPL_REQUEST_TIMEOUT', 'forever')
    with pytest.raises(ValueError):
        config.request_timeout()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
