""" The :class:`Client` maintains a persistent connection to one nREPL
    server, evaluates code within a session on that server, and collects
    the responses. Connections that drop are re-established, along with a
    fresh session, the next time the client is asked to evaluate something.
"""

import concurrent.futures
import enum
import logging
import threading

from . import bencode
from . import config
from .protocol import factory
from .protocol import request as outcome
from .protocol.errors import EvalError, NoActiveSession
from .protocol.message import Response
from .transport import (
    ConnectionLost,
    ConnectionTimeout,
    RequestSession,
    StreamTransport,
    TransportError,
)

logger = logging.getLogger(__name__)


class State(enum.Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'



class Client:
    """ Evaluate code in a remote nREPL server. The *port* must be specified;
        the *address* defaults to :func:`config.host`. The client starts
        out disconnected: :func:`connect` establishes the connection and
        the initial session, and :func:`evaluate` will do the same on demand.

        Any number of threads may call :func:`evaluate` at the same time;
        the requests share one connection and are told apart by their
        correlation ids.

        :ivar session: The id of the current nREPL session, if any.
        :ivar last_error: The most recent error observed by this client.
        :ivar state: The :class:`State` of the connection.
    """

    def __init__(self, port, address=None, connect_timeout=None, request_timeout=None):

        if address is None:
            address = config.host()
        if connect_timeout is None:
            connect_timeout = config.connect_timeout()
        if request_timeout is None:
            request_timeout = config.request_timeout()

        self.address = address
        self.port = int(port)
        self.connect_timeout = connect_timeout

        self.session = None
        self.last_error = None
        self.state = State.DISCONNECTED
        self.transport = None
        self.stream = bencode.Stream()

        self.requests = RequestSession(self._write, request_timeout)

        # The lock guards the state, transport, and stream attributes, all
        # of which are touched by both the transport thread and callers.

        self._lock = threading.Lock()
        self._attempt = None


    def __repr__(self):
        return '<nrepl.Client %s:%d %s>' % (self.address, self.port, self.state.value)


    def __enter__(self):
        return self


    def __exit__(self, *exc_info):
        self.close()


    @property
    def connected(self):
        return self.state == State.CONNECTED


    def status(self):
        """ Return a dictionary describing the connection, suitable for
            diagnostic reporting.
        """

        status = dict()
        status['address'] = self.address
        status['port'] = self.port
        status['connected'] = self.connected
        status['state'] = self.state.value
        status['session'] = self.session
        status['last_error'] = self.last_error

        return status


    def connect(self):
        """ Establish a new connection and a new session, replacing any that
            already exist. Any requests still waiting on a replaced
            connection fail with :class:`ConnectionLost`. Returns the new
            session id.
        """

        return self._connect(force=True)


    def ensure_connected(self):
        """ Make sure the client is connected, reconnecting and establishing
            a new session if it is not. Returns the current session id.
        """

        return self._connect(force=False)


    def _connect(self, force):
        """ Only one connection attempt runs at a time. Any caller that comes
            along while an attempt is underway waits for that attempt, and
            sees the same outcome, rather than starting one of its own.
        """

        with self._lock:
            attempt = self._attempt

            if attempt is None:
                if self.state == State.CONNECTED and not force:
                    return self.session

                attempt = concurrent.futures.Future()
                self._attempt = attempt
                owner = True
            else:
                owner = False

        if owner:
            try:
                session = self._reconnect()
            except Exception as e:
                attempt.set_exception(e)
            else:
                attempt.set_result(session)
            finally:
                with self._lock:
                    self._attempt = None

                if not attempt.done():
                    attempt.cancel()

        return attempt.result()


    def _reconnect(self):

        with self._lock:
            previous = self.transport
            self.transport = None
            self.session = None
            self.state = State.CONNECTING
            self.stream = bencode.Stream()

        if previous is not None:
            previous.close()
            self.requests.fail_all('Connection replaced')

        # The transport is put in place before it is opened so that nothing
        # it receives is discarded as coming from a stale connection.

        current = StreamTransport(self.address, self.port, self._receive, self._closed)

        with self._lock:
            self.transport = current

        logger.info('connecting to nREPL server at %s:%d', self.address, self.port)
        current.open()

        if not current.wait_open(self.connect_timeout):
            self._abandon(current, 'Connection timeout')
            raise ConnectionTimeout('Connection timeout: no connection to %s:%d after %.1f sec' % (self.address, self.port, self.connect_timeout))

        with self._lock:
            lost = self.transport is not current or not current.is_open

        if lost:
            reason = self.last_error or 'Connection closed'
            self._abandon(current, reason)
            raise ConnectionLost(reason)

        # A new connection means the server has no memory of any previous
        # session; always establish a new one. The client is not Connected
        # until it has one.

        try:
            session = self.establish_session()
        except Exception as e:
            self._abandon(current, str(e) or e.__class__.__name__)
            raise

        with self._lock:
            lost = self.transport is not current or not current.is_open
            if not lost:
                self.state = State.CONNECTED

        if lost:
            reason = self.last_error or 'Connection closed'
            self._abandon(current, reason)
            raise ConnectionLost(reason)

        return session


    def _abandon(self, transport, reason):
        """ Give up on a connection attempt: close the *transport*, and if it
            is still the current one, go back to Disconnected.
        """

        transport.close()

        with self._lock:
            if self.transport is transport:
                self.transport = None
                self.state = State.DISCONNECTED
                self.session = None
                self.stream = bencode.Stream()
            self.last_error = reason

        logger.warning('could not connect to %s:%d: %s', self.address, self.port, reason)


    def establish_session(self):
        """ Ask the server for a new session, and make it the current session
            for this client. Returns the new session id.
        """

        responses = self._exchange(factory.clone())
        session = outcome.new_session(responses)

        self.session = session
        logger.info('established nREPL session %s', session)
        return session


    def evaluate(self, code):
        """ Evaluate *code* in the current session and return the values and
            output it produced, joined with newlines. An :class:`EvalError`
            is raised instead if the server reported any errors.
        """

        self.ensure_connected()

        session = self.session
        if not session:
            raise NoActiveSession('No active session')

        responses = self._exchange(factory.evaluate(code, session))

        try:
            return outcome.result(responses)
        except EvalError as e:
            self.last_error = e.text
            raise


    def close(self):
        """ Close the connection. Requests still in flight fail with
            :class:`ConnectionLost`; a subsequent :func:`evaluate` will
            reconnect.
        """

        with self._lock:
            current = self.transport
            self.transport = None
            self.state = State.DISCONNECTED
            self.stream = bencode.Stream()

        if current is not None:
            current.close()
            logger.info('closed connection to %s:%d', self.address, self.port)

        self.requests.fail_all('Client closed')


    def _exchange(self, request):

        try:
            return self.requests.request(request)
        except TransportError as e:
            self.last_error = str(e)
            raise


    def _write(self, request):
        """ Put an encoded request on the wire. This is the writer handed to
            the :class:`RequestSession`.
        """

        data = request.encode()

        with self._lock:
            current = self.transport

        if current is None:
            raise ConnectionLost('not connected to %s:%d' % (self.address, self.port))

        current.send(data)


    def _receive(self, transport, data):
        """ Invoked by the transport thread with each chunk of inbound bytes.
            Every complete message in the buffer is decoded and handed to
            the correlator; an incomplete message stays buffered until the
            rest of it arrives.
        """

        values = list()

        with self._lock:
            if transport is not self.transport:
                return

            self.stream.feed(data)

            try:
                for value in self.stream:
                    values.append(value)
            except bencode.CodecError as e:
                self.last_error = 'undecodable data from server: ' + str(e)
                logger.error('discarding undecodable data from %s:%d: %s', self.address, self.port, e)

        for value in values:
            if isinstance(value, dict):
                self.requests._handle_incoming(Response(value))
            else:
                logger.debug('dropping message that is not a dictionary: %r', value)


    def _closed(self, transport, reason):
        """ Invoked by the transport thread when the connection drops. Every
            pending request fails, rather than waiting out its deadline.
        """

        with self._lock:
            if transport is not self.transport:
                return

            self.state = State.DISCONNECTED
            self.last_error = reason

        logger.warning('connection to %s:%d lost: %s', self.address, self.port, reason)
        self.requests.fail_all(reason)


# end of class Client


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
