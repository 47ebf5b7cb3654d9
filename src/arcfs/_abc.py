from __future__ import annotations

from dataclasses import dataclass
from typing import List, Generic, TypeVar, Iterator, Sequence, BinaryIO, overload

from arcfs import protocols as p
from arcfs._core import SchemaKind, Version
from arcfs.errors import TableBoundsError

T = TypeVar("T")
TTables = TypeVar("TTables")


class Table(Sequence[T]):
    """ A read-only record array; indices that fall outside of it raise TableBoundsError instead of wrapping. """

    def __init__(self, name: str, records: List[T]):
        self.name = name
        self._records = records

    @overload
    def __getitem__(self, index: int) -> T:
        ...

    @overload
    def __getitem__(self, index: slice) -> List[T]:
        ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return self._records[index]
        if not 0 <= index < len(self._records):
            raise TableBoundsError(self.name, index, len(self._records))
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[T]:
        return iter(self._records)

    def __eq__(self, other):
        if isinstance(other, Table):
            return self.name == other.name and self._records == other._records
        return NotImplemented

    def __repr__(self) -> str:
        return f"Table({self.name!r}, {len(self._records)} record(s))"


def _length(meta: int) -> int:
    return meta & 0xFF


def _index(meta: int) -> int:
    return meta >> 8


@dataclass(frozen=True)
class HashIndexGroup:
    hash: int
    meta: int

    @property
    def length(self) -> int:
        return _length(self.meta)

    @property
    def index(self) -> int:
        return _index(self.meta)


@dataclass(frozen=True)
class DirectoryList:
    path_hash: int
    path_meta: int
    name_hash: int
    name_meta: int
    parent_hash: int
    parent_meta: int
    extra: int
    file_info_start_index: int
    file_info_count: int
    child_directory_start_index: int
    child_directory_count: int
    flags: int

    @property
    def file_info_range(self) -> range:
        return range(self.file_info_start_index, self.file_info_start_index + self.file_info_count)

    @property
    def child_directory_range(self) -> range:
        return range(self.child_directory_start_index, self.child_directory_start_index + self.child_directory_count)


@dataclass(frozen=True)
class DirectoryOffset:
    offset: int
    decomp_size: int
    size: int
    sub_data_start_index: int
    sub_data_count: int
    resource_index: int


@dataclass(frozen=True)
class SubFileInfo:
    # in 4-byte units, relative to the owning directory offset
    offset: int
    comp_size: int
    decomp_size: int
    flags: int

    @property
    def is_compressed(self) -> bool:
        return self.decomp_size > 0 and self.decomp_size != self.comp_size


@dataclass(frozen=True)
class StreamNameToHash:
    hash: int
    name_index: int
    flags: int

    @property
    def length(self) -> int:
        return _length(self.name_index)

    @property
    def index(self) -> int:
        return _index(self.name_index)

    @property
    def is_regional(self) -> bool:
        return self.flags in (1, 2)


@dataclass(frozen=True)
class StreamIndexToOffset:
    file_index: int


@dataclass(frozen=True)
class StreamOffset:
    size: int
    offset: int


@dataclass
class StreamTables:
    name_to_hash: Table[StreamNameToHash]
    index_to_offset: Table[StreamIndexToOffset]
    offsets: Table[StreamOffset]


# for good typing; manually define attributes in construct
class API(p.API):
    def __init__(self, kind: SchemaKind, version: Version, serializer: APISerializer[TTables]):
        self.kind = kind
        self.version = version
        self._serializer = serializer

    def read(self, buffer: bytes, subversion_table_size: int) -> TTables:
        return self._serializer.read(buffer, subversion_table_size)

    def write(self, stream: BinaryIO, tables: TTables) -> int:
        return self._serializer.write(stream, tables)


class APISerializer(Generic[TTables]):
    def read(self, buffer: bytes, subversion_table_size: int) -> TTables:
        raise NotImplementedError

    def write(self, stream: BinaryIO, tables: TTables) -> int:
        raise NotImplementedError
