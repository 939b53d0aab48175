from .utils import escape


class RiffException(Exception):
    '''Base class to extend in order to throw exception in riffstruct.

    Together with a message it takes the chain of the layers that
    caused the exception: every record the exception passes through
    appends the name of the field that was being unpacked, so the
    innermost field comes first.
    '''

    def __init__(self, message, chain=None):
        self.message = message
        self.chain = chain if chain is not None else []
        super().__init__(message)

    @property
    def location(self):
        return '.'.join(reversed(self.chain))

    def __str__(self):
        if not self.chain:
            return self.message

        return '%s (at %s)' % (self.message, self.location)


class UnderrunException(RiffException):
    '''A read would go past the end of the current view.'''
    description = 'reading'

    def __init__(self, requested, remaining, offset=None, chain=None):
        self.requested = requested
        self.remaining = remaining
        self.offset = offset
        where = '' if offset is None else ' at offset %d' % offset
        super().__init__(
            '%s %d bytes%s exceeds the remaining size[%d]' % (self.description, requested, where, remaining),
            chain=chain,
        )

    @classmethod
    def from_underrun(cls, exc):
        return cls(exc.requested, exc.remaining, offset=exc.offset, chain=exc.chain)


class TruncatedHeaderException(UnderrunException):
    description = 'truncated header:'


class TruncatedIdException(UnderrunException):
    description = 'truncated SubChunk header:'


class TruncatedTagException(UnderrunException):
    description = 'truncated LIST tag:'


class MagicException(RiffException):
    '''A literal tag does not match the expected one.'''

    def __init__(self, expected, found, chain=None):
        self.expected = expected
        self.found = found
        super().__init__(self.format_message(expected, found), chain=chain)

    def format_message(self, expected, found):
        return "expected magic '%s' but found '%s'" % (escape(expected), escape(found))


class MissingFmtChunkException(MagicException):

    def format_message(self, expected, found):
        return "expected the '%s' chunk after the RIFF header but found '%s'" % (escape(expected), escape(found))


class UnsupportedFormatException(MagicException):

    def format_message(self, expected, found):
        return "the big-endian '%s' variant is not supported (expected '%s')" % (escape(found), escape(expected))


class SizeOverflowException(RiffException):
    '''A declared length claims more bytes than there are.'''
    template = '%s[%d] is larger than the remaining file size[%d]'

    def __init__(self, declared, remaining, what='ChunkSize', chain=None):
        self.declared = declared
        self.remaining = remaining
        super().__init__(self.template % (what, declared, remaining), chain=chain)


class ChunkSizeOverflowException(SizeOverflowException):
    template = '%s[%d] extends above the remaining size of file[%d]'


class InfoFieldOverflowException(SizeOverflowException):
    template = '%s[%d] exceeds the remaining LIST size[%d]'


class NonAsciiChunkIdException(RiffException):
    '''The bytes at a chunk boundary are not a printable identifier,
    usually because the parser lost track of the chunk boundaries.'''

    def __init__(self, found, chain=None):
        self.found = found
        super().__init__("SubChunk id '%s' is not printable ASCII" % escape(found), chain=chain)


class UnexpectedFmtSizeException(RiffException):

    def __init__(self, declared, expected, chain=None):
        self.declared = declared
        self.expected = expected
        super().__init__('fmt chunk size[%d] is not the expected %d' % (declared, expected), chain=chain)
