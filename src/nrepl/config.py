""" Runtime settings for nREPL clients. Every setting has a built-in default
    that can be overridden with an environment variable; the port, which
    has no sensible default, can also be discovered from the ``.nrepl-port``
    file that nREPL servers write into the directory they are started from.
"""

import os


default_host = '127.0.0.1'
default_connect_timeout = 5
default_request_timeout = 30

port_filename = '.nrepl-port'


def host():
    """ Return the address of the nREPL server, from the ``NREPL_HOST``
        environment variable if set, otherwise the local loopback address.
    """

    try:
        found = os.environ['NREPL_HOST']
    except KeyError:
        return default_host

    found = found.strip()
    if found == '':
        return default_host

    return found



def port(directory=None):
    """ Return the port number of the nREPL server. The ``NREPL_PORT``
        environment variable takes precedence; otherwise the ``.nrepl-port``
        file is searched for in *directory* (the current working directory
        by default) and each of its parents. Returns None if no port can be
        found.
    """

    try:
        found = os.environ['NREPL_PORT']
    except KeyError:
        pass
    else:
        return _port_number(found, 'NREPL_PORT')

    filename = find_port_file(directory)
    if filename is None:
        return None

    with open(filename) as port_file:
        contents = port_file.read()

    return _port_number(contents, filename)



def find_port_file(directory=None):
    """ Return the path to the nearest ``.nrepl-port`` file, starting in
        *directory* and working up toward the root. Returns None if there
        isn't one.
    """

    if directory is None:
        directory = os.getcwd()

    directory = os.path.abspath(str(directory))

    while True:
        candidate = os.path.join(directory, port_filename)
        if os.path.isfile(candidate):
            return candidate

        parent = os.path.dirname(directory)
        if parent == directory:
            return None

        directory = parent



def connect_timeout():
    """ Seconds to wait for a connection to be established.
    """

    return _seconds('NREPL_CONNECT_TIMEOUT', default_connect_timeout)


def request_timeout():
    """ Seconds to wait for the final response to a request.
    """

    return _seconds('NREPL_REQUEST_TIMEOUT', default_request_timeout)



def _port_number(value, source):

    value = str(value).strip()

    try:
        number = int(value)
    except ValueError:
        raise ValueError('invalid port number from %s: %r' % (source, value))

    if number < 1 or number > 65535:
        raise ValueError('port number out of range from %s: %d' % (source, number))

    return number



def _seconds(variable, default):

    try:
        value = os.environ[variable]
    except KeyError:
        return default

    try:
        seconds = float(value)
    except ValueError:
        raise ValueError('invalid number of seconds in %s: %r' % (variable, value))

    if seconds <= 0:
        raise ValueError('%s must be positive, not %r' % (variable, value))

    return seconds


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
