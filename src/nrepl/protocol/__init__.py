"""
nREPL Protocol Layer
====================

This package defines the messages exchanged with an nREPL server, and
how the responses to a request are interpreted. It does not know how the
bytes get to the server; see :mod:`nrepl.transport` for that.

Layer Architecture Overview
---------------------------

Client (client.py)
    Connection state, sessions, evaluate()

    │
    ▼
Message Builders (factory.py)
    clone() / evaluate() requests, namespace forms

    │
    ▼
Message Model (message.py)
    Read-only Request / Response mappings, correlation ids

    │
    ▼
Field Vocabulary (fields.py)
    Canonical names for operations, fields and status tokens

Responses are reduced to an outcome by request.py; the exceptions raised
for protocol-level failures live in errors.py.
"""

from . import errors
from . import factory
from . import fields
from . import message
from . import request

from .errors import (
    ProtocolError,
    SessionEstablishmentFailure,
    NoActiveSession,
    EvalError,
)
from .message import Message, Request, Response


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
