""" Encoding and decoding of the bencode value format used on the nREPL wire.
    Only the four value types nREPL relies upon are supported: strings,
    integers, lists, and dictionaries.

    Strings are length-prefixed by their UTF-8 byte count, integers are
    wrapped as ``i<n>e``, lists as ``l...e``, and dictionaries as ``d...e``
    with their keys in sorted order. Decoding works on bytes; the
    :class:`Decoder` reports how many bytes it consumed so that a caller can
    slice consecutive values out of one buffer, and the :class:`Stream`
    class does exactly that for an accumulating network buffer.
"""

import collections.abc


int64_min = -(2 ** 63)
int64_max = 2 ** 63 - 1

_digits = b'0123456789'


class CodecError(ValueError):
    """ Base class for all encoding and decoding failures. The *position*
        is the absolute offset in the buffer where decoding failed, if
        known; *incomplete* is True if the failure is due to running out of
        data, meaning more bytes may still make the value decodable.
    """

    incomplete = False

    def __init__(self, message, position=None, incomplete=None):
        ValueError.__init__(self, message)
        self.position = position

        if incomplete is not None:
            self.incomplete = incomplete


class MalformedInteger(CodecError):
    pass

class UnterminatedList(CodecError):
    incomplete = True

class UnterminatedMap(CodecError):
    incomplete = True

class NonStringKey(CodecError):
    pass

class TruncatedString(CodecError):
    incomplete = True

class UnsupportedType(CodecError):
    pass



def encode(value):
    """ Return the bencoded form of *value* as bytes. Dictionary keys are
        emitted in ascending order of their UTF-8 encoding, regardless of
        the order in which they were inserted.
    """

    chunks = list()
    _encode(value, chunks)
    return b''.join(chunks)


def _encode(value, chunks):

    if isinstance(value, str):
        encoded = value.encode('utf-8')
        chunks.append(b'%d:' % (len(encoded)))
        chunks.append(encoded)

    elif isinstance(value, bool):
        # bool is a subclass of int, but there is no boolean on the wire.
        raise UnsupportedType('cannot bencode a boolean: ' + repr(value))

    elif isinstance(value, int):
        if value < int64_min or value > int64_max:
            raise UnsupportedType('integer out of 64-bit range: ' + str(value))
        chunks.append(b'i%de' % (value))

    elif isinstance(value, (list, tuple)):
        chunks.append(b'l')
        for item in value:
            _encode(item, chunks)
        chunks.append(b'e')

    elif isinstance(value, collections.abc.Mapping):
        pairs = list()
        for key, item in value.items():
            if not isinstance(key, str):
                raise NonStringKey('dictionary keys must be strings: ' + repr(key))
            pairs.append((key.encode('utf-8'), key, item))

        pairs.sort(key=lambda pair: pair[0])

        chunks.append(b'd')
        for encoded_key, key, item in pairs:
            chunks.append(b'%d:' % (len(encoded_key)))
            chunks.append(encoded_key)
            _encode(item, chunks)
        chunks.append(b'e')

    else:
        raise UnsupportedType('cannot bencode type ' + type(value).__name__)



class Decoder:
    """ Decode a single value from *data*, starting at *offset*. The decoder
        tracks its own position; after a successful :func:`decode` the
        :attr:`consumed` attribute is the number of bytes that made up the
        value, so the caller knows where the next value starts.

        A :class:`CodecError` is raised if the data is malformed or if it
        ends before the value is complete. The *incomplete* attribute of
        the exception distinguishes the two cases, though a caller reading
        from a network buffer will usually wait for more data either way.
    """

    # Lists and dictionaries nest no deeper than this; the decoder recurses
    # once per level.
    max_depth = 200

    def __init__(self, data, offset=0):

        if isinstance(data, str):
            data = data.encode('utf-8')

        self.data = bytes(data)
        self.start = offset
        self.position = offset


    @property
    def consumed(self):
        return self.position - self.start


    def decode(self):
        """ Decode and return the next value. The position is only advanced
            past values that decoded cleanly.
        """

        position = self.position
        try:
            value = self._decode()
        except CodecError:
            self.position = position
            raise

        return value


    def _decode(self, depth=0):

        data = self.data
        position = self.position

        if position >= len(data):
            raise CodecError('no data to decode at position %d' % (position), position, True)

        first = data[position:position+1]

        if first == b'i':
            return self._decode_integer()
        if first == b'l':
            return self._decode_list(depth)
        if first == b'd':
            return self._decode_dictionary(depth)
        if first in _digits:
            return self._decode_string()

        raise CodecError('invalid bencode data at position %d: %r' % (position, first), position)


    def _decode_integer(self):

        data = self.data
        start = self.position + 1
        end = data.find(b'e', start)

        if end == -1:
            partial = data[start:]
            if partial.startswith(b'-'):
                partial = partial[1:]
            if partial == b'' or partial.isdigit():
                raise MalformedInteger('unterminated integer at position %d' % (self.position), self.position, True)
            raise MalformedInteger('invalid integer at position %d' % (self.position), self.position)

        digits = data[start:end]
        if not _valid_integer(digits):
            raise MalformedInteger('invalid integer at position %d: %r' % (self.position, digits), self.position)

        self.position = end + 1
        return int(digits)


    def _decode_string(self):

        data = self.data
        colon = data.find(b':', self.position)

        if colon == -1:
            # The length prefix itself may still be arriving.
            prefix = data[self.position:]
            if prefix.isdigit():
                raise TruncatedString('incomplete string length at position %d' % (self.position), self.position)
            raise CodecError('invalid string length at position %d' % (self.position), self.position)

        prefix = data[self.position:colon]
        if not prefix.isdigit():
            raise CodecError('invalid string length at position %d: %r' % (self.position, prefix), self.position)

        length = int(prefix)
        start = colon + 1
        end = start + length

        if end > len(data):
            raise TruncatedString('string at position %d declares %d bytes, %d available' % (self.position, length, len(data) - start), self.position)

        self.position = end
        return data[start:end].decode('utf-8', errors='replace')


    def _check_depth(self, depth):

        if depth >= self.max_depth:
            raise CodecError('nesting deeper than %d levels at position %d' % (self.max_depth, self.position), self.position)


    def _decode_list(self, depth):

        data = self.data
        start = self.position
        self._check_depth(depth)
        self.position += 1
        result = list()

        while True:
            if self.position >= len(data):
                raise UnterminatedList('unterminated list at position %d' % (start), start)

            if data[self.position:self.position+1] == b'e':
                break

            result.append(self._decode(depth + 1))

        self.position += 1
        return result


    def _decode_dictionary(self, depth):

        data = self.data
        start = self.position
        self._check_depth(depth)
        self.position += 1
        result = dict()

        while True:
            if self.position >= len(data):
                raise UnterminatedMap('unterminated dictionary at position %d' % (start), start)

            if data[self.position:self.position+1] == b'e':
                break

            key_position = self.position
            key = self._decode(depth + 1)
            if not isinstance(key, str):
                raise NonStringKey('dictionary key at position %d is not a string' % (key_position), key_position)

            if self.position >= len(data):
                raise UnterminatedMap('unterminated dictionary at position %d' % (start), start)

            result[key] = self._decode(depth + 1)

        self.position += 1
        return result


# end of class Decoder



def _valid_integer(digits):
    """ Return True if *digits* is a canonical bencoded integer body: an
        optional minus sign, no leading zeros, and no negative zero.
    """

    if digits.startswith(b'-'):
        magnitude = digits[1:]
        if magnitude == b'0':
            return False
    else:
        magnitude = digits

    if magnitude == b'' or not magnitude.isdigit():
        return False

    if len(magnitude) > 1 and magnitude.startswith(b'0'):
        return False

    return True



def decode(data, offset=0):
    """ Decode one value from *data* starting at *offset*. Returns a tuple
        of the value and the number of bytes it occupied.
    """

    decoder = Decoder(data, offset)
    value = decoder.decode()
    return value, decoder.consumed



class Stream:
    """ Accumulate bytes as they arrive from the network and slice complete
        values off the front of the buffer. Iterating over a :class:`Stream`
        yields every complete value currently buffered, in order; iteration
        stops at the first incomplete value, which stays buffered until
        :func:`feed` supplies the rest of it.

        Malformed data cannot be skipped over reliably, since there is no
        way to find the start of the next value; the buffer is discarded
        and the :class:`CodecError` is raised to the caller.
    """

    def __init__(self):
        self.buffer = b''


    def __iter__(self):

        while self.buffer:
            try:
                value, consumed = decode(self.buffer)
            except CodecError as e:
                if e.incomplete:
                    return
                self.buffer = b''
                raise

            self.buffer = self.buffer[consumed:]
            yield value


    def __len__(self):
        return len(self.buffer)


    def feed(self, data):
        """ Append *data* to the buffer. Returns the number of bytes now
            buffered.
        """

        if isinstance(data, str):
            data = data.encode('utf-8')

        self.buffer += data
        return len(self.buffer)


    def clear(self):
        self.buffer = b''


# end of class Stream


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
