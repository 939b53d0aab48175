import struct

import pytest


def build_chunk(cid, payload, pad=False):
    data = cid + struct.pack('<I', len(payload)) + payload
    if pad and len(payload) % 2:
        data += b'\x00'

    return data


def build_fmt(audio_format=1, channels=1, rate=8000, byte_rate=16000, align=2, bits=16, size=16, extension=b''):
    return b'fmt ' + struct.pack('<IHHIIHH', size, audio_format, channels, rate, byte_rate, align, bits) + extension


def build_riff(body, chunk_size=None, magic=b'RIFF', form=b'WAVE'):
    chunk_size = 4 + len(body) if chunk_size is None else chunk_size
    return magic + struct.pack('<I', chunk_size) + form + body


def build_info(*fields, list_type=b'INFO'):
    return list_type + b''.join(build_chunk(tag, text, pad=True) for tag, text in fields)


@pytest.fixture
def make_chunk():
    return build_chunk


@pytest.fixture
def make_fmt():
    return build_fmt


@pytest.fixture
def make_riff():
    return build_riff


@pytest.fixture
def make_info():
    return build_info


@pytest.fixture
def minimal_wav():
    '''RIFF header and fmt chunk, nothing else: 36 bytes'''
    return build_riff(build_fmt(), chunk_size=36)


@pytest.fixture
def write_file(tmp_path):
    def _write(data, name='sample.wav'):
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)

    return _write
