""" Python client for nREPL servers. This includes the bencode codec used on
    the wire, and a client that evaluates code in a remote session over a
    persistent connection.
"""

# Utility components.

from . import bencode
from . import config

# Submodules used by multiple other components.

from . import protocol
from . import transport

# Primary public-facing interfaces.

from . import begin
connect = begin.connect
evaluate = begin.evaluate

from .client import Client, State

from .bencode import (
    CodecError,
    MalformedInteger,
    UnterminatedList,
    UnterminatedMap,
    NonStringKey,
    TruncatedString,
    UnsupportedType,
)
from .protocol import (
    ProtocolError,
    SessionEstablishmentFailure,
    NoActiveSession,
    EvalError,
)
from .transport import (
    TransportError,
    ConnectionTimeout,
    ConnectionLost,
    RequestTimeout,
)

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
