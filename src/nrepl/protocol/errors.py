"""Protocol-level exceptions.

These are raised when the exchange with the server completed at the
transport level, but did not produce what the operation needed.
"""


class ProtocolError(Exception):
    """Base class for protocol-level failures; these are never retried."""


class SessionEstablishmentFailure(ProtocolError):
    """A clone request completed without reporting a new session."""


class NoActiveSession(ProtocolError):
    """An evaluation was attempted without an established session."""


class EvalError(Exception):
    """The remote side reported an error while evaluating code.

    :ivar text: the error text from every response, joined in arrival order.
    :ivar responses: the full list of responses for the evaluation.
    """

    def __init__(self, text, responses=()):
        Exception.__init__(self, text)
        self.text = text
        self.responses = list(responses)
