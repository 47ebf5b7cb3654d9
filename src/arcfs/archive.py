from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from os import PathLike
from typing import List, Optional, Iterator, Tuple, Union, Any

from arcfs import config, codec, writer, _apis
from arcfs._apis import Tables
from arcfs._core import ArchiveHeader, SchemaKind, Version
from arcfs.errors import TruncatedSectionError
from arcfs.hashes import get_default_registry, path_hash
from arcfs.paths import PathIndex
from arcfs.protocols import HashResolver
from arcfs.resolver import OffsetResolver
from arcfs.shared import SharedFileIndex

logger = logging.getLogger(__name__)

Region = Union[int, str]


@dataclass(frozen=True)
class FileInformation:
    offset: int = 0
    comp_size: int = 0
    decomp_size: int = 0
    regional: bool = False

    @property
    def found(self) -> bool:
        return self.comp_size > 0 or self.decomp_size > 0

    @property
    def is_compressed(self) -> bool:
        return self.decomp_size > 0 and self.decomp_size != self.comp_size


NOT_FOUND = FileInformation()


@dataclass(frozen=True)
class FileEntry:
    path: str
    offset: int
    comp_size: int
    decomp_size: int
    regional: bool
    redirected: bool
    stream: bool = False


@dataclass(frozen=True)
class DirectoryInfo:
    path: str
    directories: List[str]
    files: List[str]


class Arc:
    """
    A read-only view over an ARC container.

    Tables are parsed once (at construction, or on first use when `lazy`) and never change afterwards, so any
    number of threads may query the same instance. Every read of file data opens its own handle.

    A container too small to hold a header leaves the archive uninitialized instead of raising; check
    `initialized` before relying on empty results.
    """

    def __init__(self, path: Union[str, PathLike], registry: Optional[HashResolver] = None, options: Optional[config.ReadOptions] = None, lazy: bool = False):
        self.path = str(path)
        self.registry = registry if registry is not None else get_default_registry()
        self.options = options if options is not None else config.DEFAULT_OPTIONS
        self._lock = threading.Lock()
        self._loaded = False
        self._initialized = False
        self._header: Optional[ArchiveHeader] = None
        self._tables: Optional[Tables] = None
        self._resolver: Optional[OffsetResolver] = None
        self._paths: Optional[PathIndex] = None
        self._shared: Optional[SharedFileIndex] = None
        if not lazy:
            self._ensure_loaded()

    @classmethod
    def open(cls, path: Union[str, PathLike], registry: Optional[HashResolver] = None, options: Optional[config.ReadOptions] = None) -> Arc:
        return cls(path, registry, options)

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._lock:
            if self._loaded:
                return
            self._load()
            self._loaded = True

    def _load(self) -> None:
        with open(self.path, "rb") as stream:
            result = _apis.read(stream, self.options)
        if result is None:
            logger.warning("`%s` is too small to be an archive; leaving it uninitialized", self.path)
            return
        header, tables = result
        resolver = OffsetResolver(header, tables, self.options.max_redirect_depth)
        paths = PathIndex(tables, self.registry)
        shared = SharedFileIndex(tables, resolver, paths)
        self._header, self._tables = header, tables
        self._resolver, self._paths, self._shared = resolver, paths, shared
        self._initialized = True
        logger.info("Opened `%s` (%s, %d file(s), %d stream(s))", self.path, tables.version, len(tables.file_info), len(tables.streams.name_to_hash))

    @property
    def initialized(self) -> bool:
        self._ensure_loaded()
        return self._initialized

    @property
    def header(self) -> Optional[ArchiveHeader]:
        self._ensure_loaded()
        return self._header

    @property
    def tables(self) -> Optional[Tables]:
        self._ensure_loaded()
        return self._tables

    @property
    def schema(self) -> Optional[SchemaKind]:
        tables = self.tables
        return tables.kind if tables is not None else None

    @property
    def version(self) -> Optional[Version]:
        tables = self.tables
        return tables.version if tables is not None else None

    def refresh_paths(self) -> None:
        """ Re-derives path strings; call after reloading the hash registry. """
        if self.initialized:
            self._paths.rebuild()

    def list_files(self) -> List[str]:
        if not self.initialized:
            return []
        return list(self._paths.paths)

    def list_stream_files(self) -> List[str]:
        if not self.initialized:
            return []
        return list(self._paths.stream_paths)

    def iter_records(self) -> Iterator[Tuple[int, Any]]:
        """ Lazily walks the raw file records; call again to restart. Paths are not built; see `path_of`. """
        if not self.initialized:
            return
        for index, record in enumerate(self._tables.file_info):
            yield index, record

    def path_of(self, record_index: int) -> str:
        if not self.initialized:
            return ""
        return self._paths.paths[record_index]

    def entries(self, region: Region = 0) -> Iterator[FileEntry]:
        """ Lazily resolves every file, then every stream. """
        if not self.initialized:
            return
        region = config.region_index(region)
        for index, record in self.iter_records():
            location = self._resolver.resolve(index, region)
            yield FileEntry(self._paths.paths[index], location.offset, location.comp_size, location.decomp_size, record.is_regional, record.is_redirect)
        for index, path in enumerate(self._paths.stream_paths):
            location, regional = self._resolver.resolve_stream(index, region)
            yield FileEntry(path, location.offset, location.comp_size, location.decomp_size, regional, False, stream=True)

    def get_file_information(self, path: str, region: Region = 0) -> FileInformation:
        if not self.initialized:
            return NOT_FOUND
        region = config.region_index(region)
        record_index = self._paths.lookup(path)
        if record_index is None:
            stream_index = self._paths.lookup_stream(path)
            if stream_index is None:
                return NOT_FOUND
            location, regional = self._resolver.resolve_stream(stream_index, region)
            return FileInformation(location.offset, location.comp_size, location.decomp_size, regional)
        location = self._resolver.resolve(record_index, region)
        regional = self._tables.file_info[record_index].is_regional
        return FileInformation(location.offset, location.comp_size, location.decomp_size, regional)

    def get_file(self, path: str, region: Region = 0) -> bytes:
        info = self.get_file_information(path, region)
        data = self._read_section(info.offset, info.comp_size)
        if info.is_compressed:
            return codec.decompress_payload(data, info.decomp_size)
        return data

    def get_file_compressed(self, path: str, region: Region = 0) -> bytes:
        info = self.get_file_information(path, region)
        return self._read_section(info.offset, info.comp_size)

    def is_redirected(self, path: str) -> bool:
        record = self._record_of(path)
        return record is not None and record.is_redirect

    def is_regional(self, path: str) -> bool:
        record = self._record_of(path)
        return record is not None and record.is_regional

    def get_shared_files(self, path: str, region: Region = 0) -> List[str]:
        if not self.initialized:
            return []
        return self._shared.shared_paths_of(path, config.region_index(region))

    def shared_groups(self) -> Iterator[List[str]]:
        """ Every payload owned by more than one path, as sorted path lists. """
        if not self.initialized:
            return
        for _, members in self._shared.groups():
            yield sorted({self._paths.paths[member] for member in members})

    def rebuild_table_bytes(self, level: int = config.REBUILD_COMPRESSION_LEVEL) -> bytes:
        if not self.initialized:
            return b""
        return writer.rebuild_table_bytes(self._tables, level)

    def max_offset(self) -> int:
        """ Largest absolute payload offset of any (default region) file record. """
        if not self.initialized:
            return 0
        return max((self._resolver.resolve(index).offset for index in range(len(self._tables.file_info))), default=0)

    def directory_info(self, directory: str) -> Optional[DirectoryInfo]:
        """ None when the directory is unknown; 1.0 tables carry no directory hash table, so they never match. """
        if not self.initialized or self._tables.kind is not SchemaKind.Modern:
            return None
        key = path_hash(directory)
        for group in self._tables.directory_hash_group:
            if group.hash != key:
                continue
            entry = self._tables.directory_list[group.index]
            children = [self._tables.directory_child_hash_group[_] for _ in entry.child_directory_range]
            directories = [self.registry.resolve(child.hash, child.length) for child in children]
            files = [self._paths.paths[_] for _ in entry.file_info_range]
            return DirectoryInfo(directory, directories, files)
        return None

    def _record_of(self, path: str):
        if not self.initialized:
            return None
        record_index = self._paths.lookup(path)
        return self._tables.file_info[record_index] if record_index is not None else None

    def _read_section(self, offset: int, size: int) -> bytes:
        if not self.initialized or size == 0:
            return b""
        with open(self.path, "rb") as handle:
            handle.seek(offset)
            data = handle.read(size)
        if len(data) != size:
            raise TruncatedSectionError(f"Data @ 0x{offset:X}", size, len(data))
        return data

    def __contains__(self, path: str) -> bool:
        if not self.initialized:
            return False
        return path in self._paths or self._paths.lookup_stream(path) is not None

    def __len__(self) -> int:
        return len(self._paths) if self.initialized else 0

    def __repr__(self) -> str:
        if not self._loaded:
            return f"Arc({self.path!r}, not loaded)"
        if not self._initialized:
            return f"Arc({self.path!r}, uninitialized)"
        return f"Arc({self.path!r}, {self._tables.version}, {len(self._paths)} file(s))"


def open_arc(path: Union[str, PathLike], registry: Optional[HashResolver] = None, options: Optional[config.ReadOptions] = None) -> Arc:
    return Arc.open(path, registry, options)
