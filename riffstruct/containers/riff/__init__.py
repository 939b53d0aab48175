'''
# Resource Interchange File Format

Generic tagged-chunk container, WAV is the instance we care about. Every
chunk has the following layout

  .------------------------------.
  | id    4 bytes                |
  | size  4 bytes little endian  |
  | data  size bytes             |
  '------------------------------'

The file starts with the 'RIFF' chunk whose data is a four bytes form type
('WAVE') followed by the subchunks, the first of them must be 'fmt '.

Chunks are meant to be word aligned, i.e. odd sized data is followed by one
NUL byte. At the top level that byte is skipped only if Compliant.ALIGN is
set; inside an INFO list any run of NUL bytes after a field is consumed.

The big-endian 'RIFX' variant is not supported.
'''
import logging

from ...core import Chunk
from ... import fields
from ...enum import Compliant
from ...exceptions import (
    ChunkSizeOverflowException,
    InfoFieldOverflowException,
    MissingFmtChunkException,
    NonAsciiChunkIdException,
    SizeOverflowException,
    TruncatedIdException,
    TruncatedTagException,
    UnexpectedFmtSizeException,
    UnsupportedFormatException,
)
from ...properties import Dependency
from ...utils import escape, is_ascii, is_printable
from .enum import ChunkKind, audio_format_name


logger = logging.getLogger(__name__)

FMT_SIZE = 16
FIRST_SUBCHUNK_NUMBER = 2  # 'fmt ' is the first one


class RIFFHeader(Chunk):
    '''The twelve bytes at the start of the file.

    ChunkSize is what the file says it is long; it can't be more than what
    we have counting from the start of the header, i.e. 8 bytes more than
    what is left after the size field: a file declaring exactly its own
    length is accepted.'''
    id         = fields.FourCCField(default=b'RIFF', is_magic=True)
    chunk_size = fields.StructField('I')
    format     = fields.FourCCField()

    def on_id(self, field, cursor):
        if field.value == b'RIFX':
            raise UnsupportedFormatException(field.default, field.value)

    def on_chunk_size(self, field, cursor):
        available = cursor.limit - self.offset
        if field.value > available:
            raise SizeOverflowException(field.value, available, what='RIFF header ChunkSize')

    def __str__(self):
        return "RIFF[ChunkSize: %d, Format: '%s']" % (self.chunk_size.value, self.format)


class FormatChunk(Chunk):
    '''
    AudioFormat is the codec, PCM is 1.
    ByteRate is SampleRate * NumChannels * BitsPerSample / 8.
    BlockAlign is NumChannels * BitsPerSample / 8, the bytes of one frame.

    Non-PCM formats can declare more than 16 bytes, the rest is kept as
    an opaque extension when Compliant.SIZE is not set.
    '''
    id              = fields.FourCCField(default=b'fmt ', is_magic=True, exception=MissingFmtChunkException)
    chunk_size      = fields.StructField('I')
    audio_format    = fields.StructField('H')
    num_channels    = fields.StructField('H')
    sample_rate     = fields.StructField('I')
    byte_rate       = fields.StructField('I')
    block_align     = fields.StructField('H')
    bits_per_sample = fields.StructField('H')
    extension       = fields.StringField(Dependency('.extension_length'))

    number = 1

    def on_chunk_size(self, field, cursor):
        if field.value == FMT_SIZE:
            return

        if field.value < FMT_SIZE or self.is_compliant(Compliant.SIZE):
            raise UnexpectedFmtSizeException(field.value, FMT_SIZE)

        logger.warning('fmt chunk declares %d bytes, %d of them are extension' % (
            field.value, field.value - FMT_SIZE))

    def extension_length(self):
        return max(self.chunk_size.value - FMT_SIZE, 0)

    @property
    def audio_format_name(self):
        return audio_format_name(self.audio_format.value)

    def __str__(self):
        msg = "[SubChunk%dId: '%s', size: %d, AudioFormat: '%s', NumChannels: %d, SampleRate: %d, " \
              "ByteRate: %d, BlockAlign: %d, BitsPerSample: %d" % (
                  self.number,
                  self.id,
                  self.chunk_size.value,
                  self.audio_format_name,
                  self.num_channels.value,
                  self.sample_rate.value,
                  self.byte_rate.value,
                  self.block_align.value,
                  self.bits_per_sample.value,
              )
        if len(self.extension):
            msg += ', Extension: %d bytes' % len(self.extension)

        return msg + ']'


class InfoField(Chunk):
    '''One tagged text of an INFO list, for example

     - IART: artist
     - INAM: title
     - IPRD: product (album title)
     - ICRD: creation date
     - IGNR: genre
     - ICMT: comments
     - ICOP: copyright
     - ISFT: software

    The text is followed by a NUL byte when its size is odd; we are not
    that picky and take all the NUL bytes we find after it. They are not
    part of the text.'''
    truncated  = TruncatedTagException
    tag        = fields.FourCCField()
    chunk_size = fields.SizeField(overflow=InfoFieldOverflowException, what='INFO field size')
    text       = fields.StringField(Dependency('.chunk_size'))
    padding    = fields.PaddingField()

    def __str__(self):
        extra = 'Extra[%s]' % self.padding if self.padding.value else ''
        return "\t%s[size: %d, '%s']%s" % (self.tag, self.chunk_size.value, escape(self.text.value), extra)


list2field = {
    b'INFO': (fields.ArrayField, (InfoField(),), {}),
    fields.SelectField.Type.DEFAULT: (fields.OpaqueField, (), {}),
}


class InfoList(Chunk):
    '''The data of a LIST chunk: only the INFO list type is understood,
    anything else is skipped.'''
    truncated = TruncatedTagException
    list_type = fields.FourCCField()
    entries   = fields.SelectField('list_type', list2field)

    @property
    def info(self):
        if self.list_type.value != b'INFO':
            return []

        return list(self.entries.field)

    def __str__(self):
        if self.list_type.value != b'INFO':
            return str(self.entries)

        return 'INFO[\n%s]' % ''.join('%s\n' % entry for entry in self.info)


type2field = {
    ChunkKind.LIST:   (InfoList, (), {}),
    ChunkKind.TEXT:   (fields.TextField, (), {}),
    ChunkKind.OPAQUE: (fields.OpaqueField, (), {}),
}


class ChunkHeader(Chunk):
    '''Reading an id that is not printable means we are not at the start
    of a chunk anymore, there is no point in going on.'''
    truncated  = TruncatedIdException
    id         = fields.FourCCField()
    chunk_size = fields.SizeField(overflow=ChunkSizeOverflowException, what='SubChunk size')

    def on_id(self, field, cursor):
        if not is_printable(field.value):
            raise NonAsciiChunkIdException(field.value)


class SubChunk(ChunkHeader):
    payload = fields.SelectField('kind', type2field, bound=Dependency('.chunk_size'))

    padding = 0

    @property
    def number(self):
        return FIRST_SUBCHUNK_NUMBER + (self.index or 0)

    def kind(self, cursor):
        if self.id.value == b'LIST':
            kind = ChunkKind.LIST
        elif is_ascii(cursor.peek(cursor.remaining())):
            kind = ChunkKind.TEXT
        else:
            kind = ChunkKind.OPAQUE

        logger.debug('dispatching %r (%d bytes) as %s' % (self.id.value, cursor.remaining(), kind))

        return kind

    def on_payload(self, field, cursor):
        if not self.is_compliant(Compliant.ALIGN) or self.chunk_size.value % 2 == 0:
            return

        if cursor.remaining() > 0 and cursor.peek(1)[0] == 0:
            cursor.skip(1)
            self.padding = 1

    def __str__(self):
        return "[SubChunk%dId: '%s', size: %d, %s]" % (self.number, self.id, self.chunk_size.value, self.payload)


class RIFFFile(Chunk):
    '''The whole file: after the header and the format chunk the
    subchunks follow until the end of the data.'''
    header = RIFFHeader()
    fmt    = FormatChunk()
    chunks = fields.ArrayField(SubChunk())

    def __init__(self, source=None, compliant=Compliant.STRICT, **kwargs):
        super().__init__(source, compliant=compliant, **kwargs)


def validate_riff(cursor, compliant=Compliant.STRICT):
    '''Returns the declared ChunkSize and the form type'''
    header = RIFFHeader(cursor, compliant=compliant)

    return header.chunk_size.value, header.format.value


def validate_fmt(cursor, compliant=Compliant.STRICT):
    return FormatChunk(cursor, compliant=compliant)


def walk_subchunks(cursor, compliant=Compliant.STRICT):
    '''Yields the subchunks following 'fmt ' until the cursor is exhausted'''
    chunks = fields.ArrayField(SubChunk(), name='chunks', compliant=compliant)

    yield from chunks.iter_unpack(cursor)


def parse_info_list(cursor, compliant=Compliant.STRICT):
    return InfoList(cursor, compliant=compliant)
