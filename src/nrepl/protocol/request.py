""" Validation of outbound requests, and interpretation of the complete
    list of responses that answered one.
"""

from . import errors
from . import fields


valid_ops = set((fields.CLONE, fields.EVAL))


def validate(request):
    """ Raise ValueError if *request* is not something this package knows
        how to send.
    """

    op = request.get(fields.OP)
    if op not in valid_ops:
        raise ValueError('unsupported operation: ' + repr(op))

    if not request.get(fields.ID):
        raise ValueError('requests must have an id to be put on the wire')

    if op == fields.EVAL:
        if not request.get(fields.SESSION):
            raise ValueError('eval requests require a session')
        if not isinstance(request.get(fields.CODE), str):
            raise ValueError('eval requests require code')


def new_session(responses):
    """ Return the session id reported in answer to a clone request. Raises
        :class:`errors.SessionEstablishmentFailure` if no response carries
        one.
    """

    for response in responses:
        session = response.new_session
        if session:
            return session

    raise errors.SessionEstablishmentFailure('failed to create new session')


def result(responses):
    """ Reduce the responses to an eval request to a single string. If any
        response reports an error, the errors from every response are joined
        in arrival order and raised as :class:`errors.EvalError`; otherwise
        the value or output of every response is joined the same way and
        returned. The two outcomes are mutually exclusive.
    """

    failures = list()
    output = list()

    for response in responses:
        error = response.error
        if error:
            failures.append(str(error))

        value = response.output
        if value:
            output.append(str(value))

    if failures:
        raise errors.EvalError('\n'.join(failures), responses)

    return '\n'.join(output)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
