from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Tuple

from arcfs import config
from arcfs._abc import Table, HashIndexGroup, DirectoryList, DirectoryOffset, SubFileInfo, StreamTables
from arcfs._core import Version, SchemaKind

version = Version.from_int(config.LEGACY_VERSION)

REDIRECT_MASK = 0x00300000
# The low 24 bits of a redirecting record's sub file flags hold the target record
REDIRECT_TARGET_MASK = 0x00FFFFFF

# Tables start at a fixed offset; the header does not fill all of it
TABLES_OFFSET = 0x68
LEGACY_HASH_SIZE = 0x8


@dataclass(frozen=True)
class FileSystemHeader:
    table_file_size: int
    stream_hash_count: int
    stream_index_to_offset_count: int
    stream_offset_count: int
    folder_count: int
    file_count_1: int
    file_count_2: int
    hash_folder_count: int
    file_information_count: int
    sub_file_count: int
    sub_file_count_2: int


@dataclass(frozen=True)
class FileInfo:
    path_hash: int
    path_meta: int
    parent_hash: int
    parent_meta: int
    name_hash: int
    name_meta: int
    extension_hash: int
    extension_meta: int
    directory_index: int
    sub_file_index: int
    file_table_flag: int
    flags: int

    @property
    def is_redirect(self) -> bool:
        return (self.flags & REDIRECT_MASK) == REDIRECT_MASK

    @property
    def is_regional(self) -> bool:
        return (self.file_table_flag >> 8) > 0

    @property
    def regional_sub_file_index(self) -> int:
        return self.file_table_flag >> 8

    @property
    def path_key(self) -> Tuple[int, int]:
        return self.path_hash, self.path_meta


@dataclass
class Tables:
    kind: ClassVar[SchemaKind] = SchemaKind.Legacy

    version: Version
    header: FileSystemHeader
    streams: StreamTables
    directory_list: Table[DirectoryList]
    directory_offsets: Table[DirectoryOffset]
    directory_child_hash_group: Table[HashIndexGroup]
    file_info: Table[FileInfo]
    sub_files: Table[SubFileInfo]
