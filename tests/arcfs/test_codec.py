from io import BytesIO

import pytest
import zstandard

from arcfs import codec
from arcfs.errors import DecompressionError, TruncatedSectionError
from tests.arcfs.datagen import uint, encode_table

_TABLE = b"file system table " * 8


class TestDecodeTable:
    def test_compressed(self):
        with BytesIO(encode_table(_TABLE)) as stream:
            assert codec.decode_table(stream) == _TABLE

    def test_raw_includes_its_own_size(self):
        body = uint(24) + b"\x01" * 20
        with BytesIO(body + b"trailing") as stream:
            assert codec.decode_table(stream) == body
            assert stream.tell() == 24

    def test_stored(self):
        buffer = uint(0) + uint(5) + uint(5) + uint(0) + b"abcde"
        with BytesIO(buffer) as stream:
            assert codec.decode_table(stream) == b"abcde"

    def test_starts_where_the_stream_is(self):
        buffer = b"\xff" * 7 + encode_table(_TABLE)
        with BytesIO(buffer) as stream:
            stream.seek(7)
            assert codec.decode_table(stream) == _TABLE

    def test_truncated(self):
        section = encode_table(_TABLE)[:-4]
        with BytesIO(section) as stream:
            with pytest.raises(TruncatedSectionError):
                codec.decode_table(stream)

    def test_missing_header(self):
        with BytesIO(b"\x10\0\0\0") as stream:
            with pytest.raises(TruncatedSectionError):
                codec.decode_table(stream)


class TestDecompressPayload:
    def test_decompress(self):
        data = zstandard.ZstdCompressor().compress(_TABLE)
        assert codec.decompress_payload(data, len(_TABLE)) == _TABLE

    def test_size_mismatch(self):
        data = zstandard.ZstdCompressor().compress(_TABLE)
        with pytest.raises(DecompressionError) as info:
            codec.decompress_payload(data, len(_TABLE) + 1)
        assert info.value.received == len(_TABLE)
        assert info.value.expected == len(_TABLE) + 1

    def test_garbage(self):
        with pytest.raises(DecompressionError):
            codec.decompress_payload(b"definitely not zstd", 10)


def test_encode_table_is_decodable():
    section = codec.encode_table(_TABLE, level=3)
    with BytesIO(section) as stream:
        header = codec.CompressedTableHeader.unpack(stream)
        stream.seek(0)
        assert codec.decode_table(stream) == _TABLE
    assert header.data_offset == codec.COMPRESSED_DATA_OFFSET
    assert header.decompressed_size == len(_TABLE)
    assert header.section_size == len(section)
