import logging

from .exceptions import BoundsException


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around a mutable buffer to uniform the
    access to it: the data can be passed as bytearray (modified in place),
    bytes (copied) or a path (read completely in memory).

    Besides the capacity of the buffer we keep a logical length: everything
    after it is stale data and it's not accessible.'''

    def __init__(self, obj, length=None):
        '''Here we normalize the object in order to be accessed as a mutable buffer'''
        self._type = type(obj)
        self.obj = obj
        self._position = 0

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)

        if init_method is None:
            raise ValueError('\'%s\' is the wrong kind of object to use as stream' % self._type.__name__)

        init_method()

        capacity = len(self.obj)
        self.length = capacity if length is None else length

        if self.length < 0 or self.length > capacity:
            raise BoundsException(f'length {self.length} exceeds the capacity of the buffer ({capacity} bytes)')

    def __repr__(self):
        return f'<{self.__class__.__name__}(length=0x{self.length:x},capacity=0x{len(self.obj):x})>'

    def __len__(self):
        return self.length

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\'' % self.obj)
        with open(self.obj, 'rb') as f:
            self.obj = bytearray(f.read())

    init_PosixPath = init_str
    init_WindowsPath = init_str

    def init_bytes(self):
        '''We think these are raw bytes: since they are immutable we need a copy'''
        self.obj = bytearray(self.obj)

    def init_bytearray(self):
        pass

    def check(self, offset, size):
        '''Raise BoundsException if [offset, offset + size) is not inside the logical length'''
        if offset < 0 or size < 0 or offset + size > self.length:
            raise BoundsException(
                f'range 0x{offset:x}-0x{offset + size:x} is outside the data (length 0x{self.length:x})')

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        self._position = offset

        return self

    def tell(self):
        return self._position

    def read(self, size):
        self.check(self._position, size)

        data = bytes(self.obj[self._position:self._position + size])
        self._position += size

        return data

    def write(self, data):
        self.check(self._position, len(data))

        self.obj[self._position:self._position + len(data)] = data
        self._position += len(data)

        return self

    def move(self, src, dst, size):
        '''Copy size bytes from src to dst inside the buffer.

        Only backward moves are allowed: the destination never overtakes
        the source so the bytes still to be moved are never overwritten.'''
        if dst > src:
            raise BoundsException(f'cannot move data forward (0x{src:x} -> 0x{dst:x})')

        self.check(src, size)

        self.obj[dst:dst + size] = self.obj[src:src + size]

    def truncate(self, length):
        '''Set the logical length: the data after it is left as it is.'''
        if length < 0 or length > len(self.obj):
            raise BoundsException(f'cannot set length to 0x{length:x}')

        self.length = length

    def getvalue(self):
        return bytes(self.obj[:self.length])
