from __future__ import annotations

import dataclasses
import logging
from typing import BinaryIO, List, Type, Iterable

from serialization_tools.structx import Struct

from arcfs._abc import Table, HashIndexGroup, DirectoryList, DirectoryOffset, SubFileInfo, StreamNameToHash, StreamIndexToOffset, StreamOffset
from arcfs.errors import TruncatedSectionError
from arcfs.protocols import StreamSerializer, T

logger = logging.getLogger(__name__)


class RecordSerializer(StreamSerializer[T]):
    """ Maps a fixed-size layout onto a record dataclass, field for field, in declaration order. """

    def __init__(self, layout: Struct, record: Type[T]):
        self.layout = layout
        self.record = record

    @property
    def size(self) -> int:
        return self.layout.size

    def unpack(self, stream: BinaryIO) -> T:
        args = self.layout.unpack_stream(stream)
        return self.record(*args)

    def pack(self, stream: BinaryIO, value: T) -> int:
        args = dataclasses.astuple(value)
        return self.layout.pack_stream(stream, *args)


hash_index_group_layout = Struct("<2I")
hash_index_group_serializer = RecordSerializer(hash_index_group_layout, HashIndexGroup)

directory_list_layout = Struct("<12I")
directory_list_serializer = RecordSerializer(directory_list_layout, DirectoryList)

directory_offset_layout = Struct("<Q 5I")
directory_offset_serializer = RecordSerializer(directory_offset_layout, DirectoryOffset)

sub_file_layout = Struct("<4I")
sub_file_serializer = RecordSerializer(sub_file_layout, SubFileInfo)

stream_name_to_hash_layout = Struct("<3I")
stream_name_to_hash_serializer = RecordSerializer(stream_name_to_hash_layout, StreamNameToHash)

stream_index_to_offset_layout = Struct("<I")
stream_index_to_offset_serializer = RecordSerializer(stream_index_to_offset_layout, StreamIndexToOffset)

stream_offset_layout = Struct("<2Q")
stream_offset_serializer = RecordSerializer(stream_offset_layout, StreamOffset)

count_layout = Struct("<I")


def _remaining(stream: BinaryIO) -> int:
    here = stream.tell()
    end = stream.seek(0, 2)
    stream.seek(here)
    return end - here


def _require(stream: BinaryIO, size: int, name: str) -> None:
    available = _remaining(stream)
    if size > available:
        raise TruncatedSectionError(name, size, available)


def _read_exact(stream: BinaryIO, size: int, name: str) -> bytes:
    _require(stream, size, name)
    return stream.read(size)


def _skip(stream: BinaryIO, size: int, name: str) -> None:
    _require(stream, size, name)
    stream.seek(size, 1)


def _unpack_struct(stream: BinaryIO, layout: Struct, name: str) -> tuple:
    _require(stream, layout.size, name)
    return layout.unpack_stream(stream)


def _unpack_table(stream: BinaryIO, count: int, serializer: RecordSerializer[T], name: str) -> Table[T]:
    logger.debug("Reading `%s` (%d record(s)) at 0x%X", name, count, stream.tell())
    _require(stream, count * serializer.size, name)
    records: List[T] = [serializer.unpack(stream) for _ in range(count)]
    return Table(name, records)


def _pack_table(stream: BinaryIO, records: Iterable[T], serializer: StreamSerializer[T]) -> int:
    return sum(serializer.pack(stream, record) for record in records)
