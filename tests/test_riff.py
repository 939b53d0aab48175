import struct

import pytest

from riffstruct.containers.riff import (
    FormatChunk,
    InfoList,
    RIFFFile,
    SubChunk,
    parse_info_list,
    validate_fmt,
    validate_riff,
    walk_subchunks,
)
from riffstruct.containers.riff.enum import AUDIO_FORMATS, ChunkKind, audio_format_name
from riffstruct.enum import Compliant
from riffstruct.fields import OpaqueField, TextField
from riffstruct.exceptions import (
    ChunkSizeOverflowException,
    InfoFieldOverflowException,
    MagicException,
    MissingFmtChunkException,
    NonAsciiChunkIdException,
    SizeOverflowException,
    TruncatedHeaderException,
    TruncatedIdException,
    TruncatedTagException,
    UnexpectedFmtSizeException,
    UnsupportedFormatException,
)
from riffstruct.streams import Cursor


def test_audio_format_name():
    assert audio_format_name(0x0001) == 'PCM'
    assert audio_format_name(0x0003) == 'Microsoft IEEE float'
    assert audio_format_name(0xfffe) == 'Extensible'
    assert audio_format_name(0x1234) == '4660'


def test_audio_formats_is_read_only():
    with pytest.raises(TypeError):
        AUDIO_FORMATS[0x1234] = 'mine'


def test_validate_riff(minimal_wav):
    cursor = Cursor(minimal_wav)

    assert validate_riff(cursor) == (36, b'WAVE')
    assert cursor.position == 12


def test_validate_riff_any_form_type(make_riff, make_fmt):
    assert validate_riff(Cursor(make_riff(make_fmt(), form=b'AVI '))) == (28, b'AVI ')


def test_validate_riff_bad_magic(make_riff, make_fmt):
    with pytest.raises(MagicException) as e:
        validate_riff(Cursor(make_riff(make_fmt(), magic=b'FORM')))

    assert e.value.found == b'FORM'
    assert e.value.expected == b'RIFF'
    assert str(e.value) == "expected magic 'RIFF' but found 'FORM' (at id)"


def test_validate_riff_rifx(make_riff, make_fmt):
    data = make_riff(make_fmt(), magic=b'RIFX')

    with pytest.raises(UnsupportedFormatException):
        validate_riff(Cursor(data))

    # not even a lenient parsing goes on with it
    with pytest.raises(UnsupportedFormatException):
        validate_riff(Cursor(data), compliant=Compliant.NONE)


def test_validate_riff_size_overflow(make_riff, make_fmt):
    data = make_riff(make_fmt(), chunk_size=1000000)
    cursor = Cursor(data)

    with pytest.raises(SizeOverflowException) as e:
        validate_riff(cursor)

    assert e.value.declared == 1000000
    assert e.value.remaining == len(data)
    assert e.value.chain == ['chunk_size']
    # the form type was never read
    assert cursor.position == 8


def test_validate_riff_exact_size(make_riff, make_fmt):
    data = make_riff(make_fmt(), chunk_size=36)

    assert validate_riff(Cursor(data))[0] == 36

    with pytest.raises(SizeOverflowException):
        validate_riff(Cursor(make_riff(make_fmt(), chunk_size=37)))


def test_validate_riff_truncated():
    with pytest.raises(TruncatedHeaderException):
        validate_riff(Cursor(b'RIF'))

    with pytest.raises(TruncatedHeaderException):
        validate_riff(Cursor(b'RIFF\x00\x00\x00\x00WA'))

    with pytest.raises(TruncatedHeaderException):
        validate_riff(Cursor(b''))


def test_validate_fmt(make_fmt):
    fmt = validate_fmt(Cursor(make_fmt(audio_format=3, channels=2, rate=44100, byte_rate=352800, align=8, bits=32)))

    assert fmt.audio_format.value == 3
    assert fmt.audio_format_name == 'Microsoft IEEE float'
    assert fmt.num_channels.value == 2
    assert fmt.sample_rate.value == 44100
    assert fmt.byte_rate.value == 352800
    assert fmt.block_align.value == 8
    assert fmt.bits_per_sample.value == 32
    assert fmt.extension.value == b''


def test_validate_fmt_missing(make_chunk):
    with pytest.raises(MissingFmtChunkException) as e:
        validate_fmt(Cursor(make_chunk(b'data', b'\x00' * 16)))

    assert e.value.found == b'data'


def test_validate_fmt_truncated(make_fmt):
    with pytest.raises(TruncatedHeaderException):
        validate_fmt(Cursor(make_fmt()[:20]))


def test_validate_fmt_unexpected_size(make_fmt):
    data = make_fmt(audio_format=0xfffe, size=18, extension=b'\x00\x00')

    with pytest.raises(UnexpectedFmtSizeException) as e:
        validate_fmt(Cursor(data))

    assert e.value.declared == 18


def test_validate_fmt_extension_when_lenient(make_fmt):
    data = make_fmt(audio_format=0xfffe, size=18, extension=b'\x16\x00')
    cursor = Cursor(data)

    fmt = validate_fmt(cursor, compliant=Compliant.MAGIC)

    assert fmt.extension.value == b'\x16\x00'
    assert cursor.remaining() == 0
    assert str(fmt).endswith(', Extension: 2 bytes]')


def test_validate_fmt_too_small_even_when_lenient(make_fmt):
    with pytest.raises(UnexpectedFmtSizeException):
        validate_fmt(Cursor(make_fmt(size=14)), compliant=Compliant.NONE)


def test_format_chunk_str(make_fmt):
    fmt = FormatChunk(Cursor(make_fmt()))

    assert str(fmt) == (
        "[SubChunk1Id: 'fmt ', size: 16, AudioFormat: 'PCM', NumChannels: 1, SampleRate: 8000, "
        "ByteRate: 16000, BlockAlign: 2, BitsPerSample: 16]"
    )


def test_format_chunk_unknown_codec(make_fmt):
    fmt = FormatChunk(Cursor(make_fmt(audio_format=0x1234)))

    assert "AudioFormat: '4660'" in str(fmt)


def test_walk_subchunks(make_chunk, make_info):
    data = (
        make_chunk(b'LIST', make_info((b'IART', b'Alice'))) +
        make_chunk(b'note', b'hello') +
        make_chunk(b'data', b'\x00\xff\x10\x80')
    )

    chunks = list(walk_subchunks(Cursor(data)))

    assert [_.id.value for _ in chunks] == [b'LIST', b'note', b'data']
    assert [_.number for _ in chunks] == [2, 3, 4]
    assert isinstance(chunks[0].payload.field, InfoList)
    assert chunks[1].payload.value == b'hello'
    assert str(chunks[1]) == "[SubChunk3Id: 'note', size: 5, hello]"
    assert str(chunks[2]) == "[SubChunk4Id: 'data', size: 4, ...]"


def test_subchunk_kind(make_chunk):
    text = SubChunk(Cursor(make_chunk(b'ISFT', b'Lavf\x00')))
    opaque = SubChunk(Cursor(make_chunk(b'data', b'\xff\xfe')))
    empty = SubChunk(Cursor(make_chunk(b'junk', b'')))

    assert isinstance(text.payload.field, TextField)
    assert isinstance(opaque.payload.field, OpaqueField)
    assert text.kind(Cursor(b'abc')) == ChunkKind.TEXT
    assert text.kind(Cursor(b'\xff')) == ChunkKind.OPAQUE
    assert str(text) == "[SubChunk2Id: 'ISFT', size: 5, Lavf\\0]"
    assert str(opaque) == "[SubChunk2Id: 'data', size: 2, ...]"
    assert str(empty) == "[SubChunk2Id: 'junk', size: 0, ]"


def test_walk_subchunks_truncated_id():
    with pytest.raises(TruncatedIdException):
        list(walk_subchunks(Cursor(b'da')))

    with pytest.raises(TruncatedIdException):
        list(walk_subchunks(Cursor(b'data\x01\x00')))


def test_walk_subchunks_non_ascii_id(make_chunk):
    data = make_chunk(b'note', b'hello') + make_chunk(b'\x00\x01ab', b'')
    chunks = walk_subchunks(Cursor(data))

    assert next(chunks).id.value == b'note'

    with pytest.raises(NonAsciiChunkIdException) as e:
        next(chunks)

    assert e.value.found == b'\x00\x01ab'
    assert e.value.location == '1.id'
    assert str(e.value) == "SubChunk id '\\0\\??ab' is not printable ASCII (at 1.id)"


def test_walk_subchunks_size_overflow():
    """No payload byte is read when the declared size doesn't fit."""
    data = b'data' + struct.pack('<I', 100) + b'\x00\x01\x02\x03'
    cursor = Cursor(data)

    with pytest.raises(ChunkSizeOverflowException) as e:
        list(walk_subchunks(cursor))

    assert e.value.declared == 100
    assert e.value.remaining == 4
    assert cursor.position == 8


def test_walk_subchunks_exact_fit(make_chunk):
    """A buffer exactly as long as declared, without any slack, is fine."""
    data = make_chunk(b'data', b'\x80' * 7)

    chunks = list(walk_subchunks(Cursor(data)))

    assert chunks[0].chunk_size.value == 7
    assert chunks[0].payload.value == 7


def test_walk_subchunks_does_not_skip_padding(make_chunk):
    data = make_chunk(b'note', b'abc', pad=True) + make_chunk(b'next', b'xy')

    with pytest.raises(NonAsciiChunkIdException):
        list(walk_subchunks(Cursor(data)))


def test_walk_subchunks_align(make_chunk):
    data = make_chunk(b'note', b'abc', pad=True) + make_chunk(b'next', b'xy')

    chunks = list(walk_subchunks(Cursor(data), compliant=Compliant.STRICT | Compliant.ALIGN))

    assert [_.id.value for _ in chunks] == [b'note', b'next']
    assert chunks[0].padding == 1
    assert chunks[1].padding == 0


def test_walk_subchunks_align_at_the_end(make_chunk):
    """The pad byte of the last chunk can be missing."""
    data = make_chunk(b'note', b'abc')

    chunks = list(walk_subchunks(Cursor(data), compliant=Compliant.ALIGN))

    assert chunks[0].padding == 0


def test_walk_subchunks_list_failure_is_fatal(make_chunk):
    info = b'INFO' + b'IART' + struct.pack('<I', 50) + b'Alice'
    data = make_chunk(b'LIST', info) + make_chunk(b'note', b'never')
    cursor = Cursor(data)

    with pytest.raises(InfoFieldOverflowException) as e:
        list(walk_subchunks(cursor))

    assert e.value.location == '0.payload.entries.0.chunk_size'


def test_parse_info_list(make_info):
    info = parse_info_list(Cursor(make_info((b'IART', b'Alice'), (b'INAM', b'Song'))))

    assert info.list_type.value == b'INFO'
    assert [(_.tag.value, _.text.value) for _ in info.info] == [
        (b'IART', b'Alice'),
        (b'INAM', b'Song'),
    ]
    assert info.info[0].chunk_size.value == 5
    assert info.info[0].padding.value == 1
    assert info.info[1].padding.value == 0
    assert str(info) == "INFO[\n\tIART[size: 5, 'Alice']Extra[\\0]\n\tINAM[size: 4, 'Song']\n]"


def test_parse_info_list_empty():
    info = parse_info_list(Cursor(b'INFO'))

    assert info.info == []
    assert str(info) == 'INFO[\n]'


def test_parse_info_list_other_type():
    cursor = Cursor(b'adtl' + b'labl\x04\x00\x00\x00\x01\x00\x00\x00')

    info = parse_info_list(cursor)

    assert info.list_type.value == b'adtl'
    assert info.info == []
    assert str(info) == '...'
    assert cursor.remaining() == 0


def test_parse_info_list_nul_run():
    data = b'INFO' + b'ICMT' + struct.pack('<I', 3) + b'abc' + b'\x00\x00\x00' + b'ISFT' + struct.pack('<I', 2) + b'ok'

    info = parse_info_list(Cursor(data))

    assert len(info.info) == 2
    assert info.info[0].padding.value == 3
    assert str(info.info[0]) == "\tICMT[size: 3, 'abc']Extra[\\0\\0\\0]"


def test_parse_info_list_padding_does_not_change_text():
    padded = b'INFO' + b'IART' + struct.pack('<I', 5) + b'Alice\x00'
    unpadded = b'INFO' + b'IART' + struct.pack('<I', 5) + b'Alice'

    first = parse_info_list(Cursor(padded)).info[0]
    second = parse_info_list(Cursor(unpadded)).info[0]

    assert first.text.value == second.text.value == b'Alice'
    assert first.chunk_size.value == second.chunk_size.value == 5


def test_parse_info_list_truncated_type():
    with pytest.raises(TruncatedTagException):
        parse_info_list(Cursor(b'IN'))


def test_parse_info_list_truncated_tag():
    with pytest.raises(TruncatedTagException):
        parse_info_list(Cursor(b'INFO' + b'IA'))

    with pytest.raises(TruncatedTagException):
        parse_info_list(Cursor(b'INFO' + b'IART\x05\x00'))


def test_parse_info_list_overflow():
    cursor = Cursor(b'INFO' + b'IART' + struct.pack('<I', 6) + b'Alice')

    with pytest.raises(InfoFieldOverflowException) as e:
        parse_info_list(cursor)

    assert e.value.declared == 6
    assert e.value.remaining == 5
    assert cursor.position == 12


def test_riff_file(make_riff, make_fmt, make_chunk, make_info):
    data = make_riff(
        make_fmt(channels=2, rate=44100, byte_rate=176400, align=4) +
        make_chunk(b'LIST', make_info((b'IART', b'Alice'))) +
        make_chunk(b'data', b'\x00\x80' * 4)
    )

    riff = RIFFFile(data)

    assert riff.header.chunk_size.value == len(data) - 8
    assert riff.header.format.value == b'WAVE'
    assert riff.fmt.num_channels.value == 2
    assert riff.fmt.sample_rate.value == 44100
    assert [_.id.value for _ in riff.chunks] == [b'LIST', b'data']
    assert riff.chunks[0].payload.field.info[0].text.value == b'Alice'


@pytest.mark.parametrize('values', [
    dict(audio_format=1, channels=1, rate=8000, byte_rate=16000, align=2, bits=16),
    dict(audio_format=1, channels=2, rate=44100, byte_rate=176400, align=4, bits=16),
    dict(audio_format=3, channels=6, rate=96000, byte_rate=2304000, align=24, bits=32),
    dict(audio_format=0x1234, channels=0, rate=0, byte_rate=0, align=0, bits=0),
])
def test_riff_file_format_values(make_riff, make_fmt, values):
    riff = RIFFFile(make_riff(make_fmt(**values)))

    assert riff.fmt.audio_format.value == values['audio_format']
    assert riff.fmt.num_channels.value == values['channels']
    assert riff.fmt.sample_rate.value == values['rate']
    assert riff.fmt.byte_rate.value == values['byte_rate']
    assert riff.fmt.block_align.value == values['align']
    assert riff.fmt.bits_per_sample.value == values['bits']
    assert len(riff.chunks) == 0


def test_riff_file_from_path(write_file, minimal_wav):
    riff = RIFFFile(write_file(minimal_wav))

    assert riff.header.chunk_size.value == 36
    assert riff.fmt.audio_format_name == 'PCM'


def test_riff_file_error_location(make_riff, make_fmt):
    with pytest.raises(MissingFmtChunkException) as e:
        RIFFFile(make_riff(b'fmx ' + make_fmt()[4:]))

    assert e.value.location == 'fmt.id'
