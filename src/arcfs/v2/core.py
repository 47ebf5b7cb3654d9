from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional

from arcfs import config
from arcfs._abc import Table, HashIndexGroup, DirectoryList, DirectoryOffset, SubFileInfo, StreamTables
from arcfs._core import Version, SchemaKind

version = Version.from_int(config.BASELINE_VERSION)

REDIRECT_FLAG = 0x00000010
REGIONAL_FLAG = 0x00008000


@dataclass(frozen=True)
class FileSystemHeader:
    table_file_size: int
    file_info_path_count: int
    file_info_index_count: int
    directory_count: int
    directory_offset_count_1: int
    directory_hash_search_count: int
    file_info_count: int
    file_info_sub_index_count: int
    sub_file_count: int
    directory_offset_count_2: int
    sub_file_count_2: int
    padding: int
    unk1_10: int
    unk2_10: int
    regional_count_1: int
    regional_count_2: int
    padding_2: int


@dataclass(frozen=True)
class ExtendedHeader:
    """ Present on 3.0+ tables, directly after the base header. """
    version: int
    extra_folder: int
    extra_count: int
    reserved: bytes
    extra_count_2: int
    extra_sub_count: int


@dataclass(frozen=True)
class StreamHeader:
    quick_dir_count: int
    stream_hash_count: int
    stream_index_to_offset_count: int
    stream_offset_count: int


@dataclass(frozen=True)
class StreamUnk:
    hash: int
    meta: int
    count: int


@dataclass(frozen=True)
class StreamHashToName:
    hash: int
    meta: int


@dataclass(frozen=True)
class FileInfoUnknownTable:
    some_index: int
    some_index_2: int


@dataclass(frozen=True)
class FileInfoPath:
    path_hash: int
    directory_index: int
    extension_hash: int
    extension_meta: int
    parent_hash: int
    parent_meta: int
    filename_hash: int
    filename_meta: int


@dataclass(frozen=True)
class FileInfoIndex:
    directory_offset_index: int
    file_info_index: int


@dataclass(frozen=True)
class FileInfo:
    path_index: int
    index_index: int
    sub_index_index: int
    flags: int

    @property
    def is_redirect(self) -> bool:
        return (self.flags & REDIRECT_FLAG) == REDIRECT_FLAG

    @property
    def is_regional(self) -> bool:
        return (self.flags & REGIONAL_FLAG) == REGIONAL_FLAG

    @property
    def path_key(self) -> int:
        return self.path_index


@dataclass(frozen=True)
class FileInfoSubIndex:
    directory_offset_index: int
    sub_file_index: int
    file_info_index_and_flag: int


@dataclass
class Tables:
    kind: ClassVar[SchemaKind] = SchemaKind.Modern

    version: Version
    header: FileSystemHeader
    extended: Optional[ExtendedHeader]
    regional_bytes: bytes
    stream_header: StreamHeader
    stream_unk: Table[StreamUnk]
    stream_hash_to_name: Table[StreamHashToName]
    streams: StreamTables
    file_info_unknown: Table[FileInfoUnknownTable]
    file_path_hash_group: Table[HashIndexGroup]
    file_info_path: Table[FileInfoPath]
    file_info_index: Table[FileInfoIndex]
    directory_hash_group: Table[HashIndexGroup]
    directory_list: Table[DirectoryList]
    directory_offsets: Table[DirectoryOffset]
    directory_child_hash_group: Table[HashIndexGroup]
    file_info: Table[FileInfo]
    file_info_sub_index: Table[FileInfoSubIndex]
    sub_files: Table[SubFileInfo]
