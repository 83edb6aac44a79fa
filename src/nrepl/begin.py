""" Module-level entry points for a process that talks to a single nREPL
    server at a time, such as a tool server exposing 'connect', 'evaluate',
    and namespace inspection to its own host. The current :class:`Client`
    is cached here; :func:`connect` replaces it.
"""

import atexit
import threading

from . import config
from .client import Client
from .protocol import factory


_current = None
_lock = threading.Lock()


def _client():
    """ Return the current :class:`Client`, or raise RuntimeError if
        :func:`connect` has not been called.
    """

    client = _current
    if client is None:
        raise RuntimeError('not connected to an nREPL server - use connect() first')

    return client



def connect(port=None, address=None, **kwargs):
    """ Connect to the nREPL server at *address* and *port*, establishing
        the initial session. Any previously connected client is closed
        first. If the *port* is not specified it is located via
        :func:`config.port`. Additional keyword arguments are passed to
        the :class:`Client` constructor. Returns the new client.
    """

    global _current

    if port is None:
        port = config.port()
        if port is None:
            raise ValueError('no nREPL port specified, and no .nrepl-port file found')

    client = Client(port, address, **kwargs)

    with _lock:
        previous = _current
        _current = client

    if previous is not None:
        previous.close()

    client.connect()
    return client



def evaluate(code, ns=None):
    """ Evaluate *code* and return its output. If a namespace *ns* is
        specified the session switches to it first; the switch persists for
        subsequent evaluations in the same session.
    """

    client = _client()

    if ns:
        client.evaluate(factory.in_ns(ns))

    return client.evaluate(code)



def ns_vars(ns):
    """ Return the printed form of a map from each public var in namespace
        *ns* to its metadata and current value.
    """

    client = _client()
    return client.evaluate(factory.ns_vars(ns))



def status():
    """ Return the status dictionary of the current client. If there is no
        client the dictionary reports a disconnected state.
    """

    client = _current

    if client is None:
        status = dict()
        status['address'] = None
        status['port'] = None
        status['connected'] = False
        status['state'] = 'disconnected'
        status['session'] = None
        status['last_error'] = None
        return status

    return client.status()



def close():
    """ Close and forget the current client, if any.
    """

    global _current

    with _lock:
        client = _current
        _current = None

    if client is not None:
        client.close()


atexit.register(close)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
