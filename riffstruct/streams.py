import logging
import mmap
import os
import struct

from .exceptions import UnderrunException


logger = logging.getLogger(__name__)


class Cursor(object):
    '''A read-only window over a buffer with a current position.

    Every read goes through _check() so that asking for more bytes than
    the window holds raises UnderrunException and leaves the position
    untouched. Sub-cursors share the same underlying buffer, positions
    are always absolute offsets into it.'''

    def __init__(self, view, position=0, limit=None):
        self.view = view if isinstance(view, memoryview) else memoryview(view)
        limit = len(self.view) if limit is None else limit

        if not 0 <= position <= limit <= len(self.view):
            raise ValueError('invalid window [%d, %d) over %d bytes' % (position, limit, len(self.view)))

        self.position = position
        self.limit = limit

    def __repr__(self):
        return '<%s(position=%d, limit=%d)>' % (self.__class__.__name__, self.position, self.limit)

    def remaining(self):
        return self.limit - self.position

    def _check(self, n):
        if n < 0:
            raise ValueError('cannot read a negative amount of bytes (%d)' % n)

        if self.remaining() < n:
            raise UnderrunException(n, self.remaining(), offset=self.position)

    def peek(self, n):
        self._check(n)
        return self.view[self.position:self.position + n]

    def read(self, n):
        data = self.peek(n)
        self.position += n
        return data

    def skip(self, n):
        self._check(n)
        self.position += n

    def read_struct(self, fmt):
        return struct.unpack(fmt, self.read(struct.calcsize(fmt)))[0]

    def sub(self, n):
        '''Returns a cursor over the next n bytes and moves past them.'''
        self._check(n)
        child = Cursor(self.view, self.position, self.position + n)
        self.position += n
        return child


class Stream(object):
    '''This is a simple wrapper around path/bytes objects to
    uniform how the data is accessed: whatever is passed in we
    end up with a read-only memoryview over it.

    Paths are memory-mapped, the mapping lives until close() is called.'''
    def __init__(self, obj):
        self._type = type(obj)
        self.obj = os.fspath(obj) if isinstance(obj, os.PathLike) else obj
        self.view = None
        self._file = None
        self._mmap = None

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)

        if init_method is None:
            raise ValueError('\'%s\' is the wrong kind of object to read from' % self._type.__name__)

        init_method()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __len__(self):
        return len(self.view)

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\'' % self.obj)
        self._file = open(self.obj, 'rb')

        try:
            size = os.fstat(self._file.fileno()).st_size
            # an empty file cannot be mapped
            if size == 0:
                self.view = memoryview(b'')
            else:
                self._mmap = mmap.mmap(self._file.fileno(), size, access=mmap.ACCESS_READ)
                self.view = memoryview(self._mmap)
        except (OSError, ValueError):
            self._file.close()
            raise

        logger.debug('mapped %d bytes from \'%s\'' % (size, self.obj))

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.view = memoryview(self.obj)

    def init_bytearray(self):
        self.view = memoryview(self.obj).toreadonly()

    def init_memoryview(self):
        self.view = self.obj.toreadonly()

    def cursor(self):
        return Cursor(self.view)

    def close(self):
        if self.view is not None:
            self.view.release()
        if self._mmap is not None:
            self._mmap.close()
            self._mmap = None
        if self._file is not None:
            self._file.close()
            self._file = None
