"""
Table-section and payload (de)compression.

Table sections start with a 16 byte header; its `data_offset` decides how the section body is stored:
    > 0x10  the table is stored raw and starts with its own u32 size (the header is part of the table)
    == 0x10 the body is a zstd frame of `compressed_size` bytes
    else    the body is `compressed_size` raw bytes
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import BinaryIO, ClassVar

import zstandard
from serialization_tools.structx import Struct

from arcfs import config
from arcfs._serializers import _unpack_struct, _read_exact, count_layout
from arcfs.errors import DecompressionError

logger = logging.getLogger(__name__)

COMPRESSED_DATA_OFFSET = 0x10


@dataclass
class CompressedTableHeader:
    data_offset: int
    decompressed_size: int
    compressed_size: int
    section_size: int

    LAYOUT: ClassVar[Struct] = Struct("<4I")

    @classmethod
    def unpack(cls, stream: BinaryIO) -> CompressedTableHeader:
        args = _unpack_struct(stream, cls.LAYOUT, "Table Section Header")
        return cls(*args)

    def pack(self, stream: BinaryIO) -> int:
        args = self.data_offset, self.decompressed_size, self.compressed_size, self.section_size
        return self.LAYOUT.pack_stream(stream, *args)


def decode_table(stream: BinaryIO) -> bytes:
    start = stream.tell()
    header = CompressedTableHeader.unpack(stream)
    if header.data_offset > COMPRESSED_DATA_OFFSET:
        stream.seek(start)
        size, = _unpack_struct(stream, count_layout, "Raw Table Size")
        stream.seek(start)
        logger.debug("Table at 0x%X is stored raw (%d bytes)", start, size)
        return _read_exact(stream, size, "Raw Table")
    elif header.data_offset == COMPRESSED_DATA_OFFSET:
        logger.debug("Table at 0x%X is compressed (%d -> %d bytes)", start, header.compressed_size, header.decompressed_size)
        buffer = _read_exact(stream, header.compressed_size, "Compressed Table")
        return decompress_payload(buffer, header.decompressed_size)
    else:
        return _read_exact(stream, header.compressed_size, "Table")


def decompress_payload(data: bytes, expected_size: int) -> bytes:
    # Decompressors are cheap and not safe to share between threads; make one per call
    try:
        buffer = zstandard.ZstdDecompressor().decompressobj().decompress(data)
    except zstandard.ZstdError as e:
        raise DecompressionError(None, expected_size) from e
    if len(buffer) != expected_size:
        raise DecompressionError(len(buffer), expected_size)
    return buffer


def compress_table(data: bytes, level: int = config.REBUILD_COMPRESSION_LEVEL) -> bytes:
    return zstandard.ZstdCompressor(level=level).compress(data)


def encode_table(data: bytes, level: int = config.REBUILD_COMPRESSION_LEVEL) -> bytes:
    """ Compresses a table body and prefixes it with its section header. """
    compressed = compress_table(data, level)
    header = CompressedTableHeader(COMPRESSED_DATA_OFFSET, len(data), len(compressed), CompressedTableHeader.LAYOUT.size + len(compressed))
    with BytesIO() as stream:
        header.pack(stream)
        stream.write(compressed)
        return stream.getvalue()
