""" A class representation of an nREPL message. Every message on the wire
    is a single bencoded dictionary; the classes here wrap that dictionary
    with accessors for the fields this package cares about.
"""

import collections.abc
import itertools
import threading

from .. import bencode
from . import fields


class Message(collections.abc.Mapping):
    """ The :class:`Message` provides a very thin, read-only encapsulation
        of the dictionary that goes on the wire. Instances behave like a
        dictionary for lookups and iteration, but cannot be modified once
        created; a request is never changed after it has been sent.
    """

    def __init__(self, contents=None, **kwargs):

        contents = dict(contents or ())
        contents.update(kwargs)
        self._fields = contents


    def __getitem__(self, key):
        return self._fields[key]


    def __iter__(self):
        return iter(self._fields)


    def __len__(self):
        return len(self._fields)


    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, self._fields)


    @property
    def id(self):
        return self._fields.get(fields.ID)


    @property
    def session(self):
        return self._fields.get(fields.SESSION)


    def encode(self):
        """ Return the bencoded form of this message.
        """

        return bencode.encode(self._fields)


# end of class Message



class Request(Message):
    """ A :class:`Request` is a :class:`Message` that always carries an
        operation name and a correlation id. The expectation is that the id
        is locally unique, so that the correlator can tie each incoming
        response to the request that generated it; for nearly all requests
        the *id* argument will be None, and a fresh one is generated here.
    """

    def __init__(self, op, id=None, **kwargs):

        if id is None:
            id = _id_next()

        # Fields with a value of None are simply left off the wire.

        contents = dict()
        for key, value in kwargs.items():
            if value is not None:
                contents[key] = value

        contents[fields.OP] = op
        contents[fields.ID] = id

        Message.__init__(self, contents)


    @property
    def op(self):
        return self._fields[fields.OP]


    def with_id(self, id):
        """ Return a copy of this request with a different correlation id.
        """

        contents = dict(self._fields)
        op = contents.pop(fields.OP)
        del contents[fields.ID]
        return Request(op, id, **contents)


# end of class Request



class Response(Message):
    """ A :class:`Response` wraps a dictionary decoded from the wire. A
        request may be answered by any number of responses; the last one
        has 'done' among its status tokens.
    """

    @property
    def status(self):
        status = self._fields.get(fields.STATUS)

        if status is None:
            return ()
        if isinstance(status, str):
            return (status,)

        return tuple(status)


    @property
    def done(self):
        return fields.DONE in self.status


    @property
    def new_session(self):
        return self._fields.get(fields.NEW_SESSION)


    @property
    def error(self):
        """ The first error field present in this response, checking 'ex',
            then 'root-ex', then 'err'. Returns None if there is no error.
        """

        for field in fields.ERROR_FIELDS:
            value = self._fields.get(field)
            if value:
                return value


    @property
    def output(self):
        """ The 'value' of this response if present, otherwise its 'out'.
        """

        for field in fields.OUTPUT_FIELDS:
            value = self._fields.get(field)
            if value:
                return value


# end of class Response



_id_min = 0
_id_max = 0xFFFFFFFF
_id_lock = threading.Lock()
_id_ticker = itertools.count(_id_min)


def _id_next():
    """ Return the next request identification string for subroutines to
        use when constructing a message.
    """

    global _id_ticker

    with _id_lock:
        id = next(_id_ticker)

        if id >= _id_max:
            _id_ticker = itertools.count(_id_min)

    return '%08x' % (id)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
