from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from arcfs._apis import Tables
from arcfs._core import SchemaKind
from arcfs.hashes import path_hash, is_unresolved
from arcfs.protocols import HashResolver

logger = logging.getLogger(__name__)


def compose_path(registry: HashResolver, parent_hash: int, parent_meta: int, name_hash: int, name_meta: int, extension_hash: int) -> str:
    parent = registry.resolve(parent_hash, parent_meta & 0xFF)
    name = registry.resolve(name_hash, name_meta & 0xFF)
    if is_unresolved(name):
        # keep the extension readable even when the name itself is unknown; extensions match on hash alone
        name += registry.resolve(extension_hash)
    return parent + name


class PathIndex:
    """
    Path strings for every file and stream record, plus the reverse lookups.

    Duplicate paths resolve to the record seen last. Streams are keyed by the hash of their path, so they can be
    found even when the registry cannot name them.
    """

    def __init__(self, tables: Tables, registry: HashResolver):
        self.tables = tables
        self.registry = registry
        self._paths: Tuple[str, ...] = ()
        self._lookup: Dict[str, int] = {}
        self._stream_paths: Tuple[str, ...] = ()
        self._stream_lookup: Dict[int, int] = {}
        self.rebuild()

    def rebuild(self) -> None:
        paths = tuple(self.path_of(index) for index in range(len(self.tables.file_info)))
        lookup = {path: index for index, path in enumerate(paths)}
        streams = self.tables.streams.name_to_hash
        stream_paths = tuple(self.registry.resolve(entry.hash, entry.length) for entry in streams)
        stream_lookup = {entry.hash: index for index, entry in enumerate(streams)}
        self._paths, self._lookup = paths, lookup
        self._stream_paths, self._stream_lookup = stream_paths, stream_lookup
        logger.info("Indexed %d file path(s) (%d unique) and %d stream(s)", len(paths), len(lookup), len(stream_paths))

    @property
    def paths(self) -> Tuple[str, ...]:
        return self._paths

    @property
    def stream_paths(self) -> Tuple[str, ...]:
        return self._stream_paths

    def path_of(self, record_index: int) -> str:
        record = self.tables.file_info[record_index]
        if self.tables.kind is SchemaKind.Modern:
            path = self.tables.file_info_path[record.path_index]
            return compose_path(self.registry, path.parent_hash, path.parent_meta, path.filename_hash, path.filename_meta, path.extension_hash)
        else:
            return compose_path(self.registry, record.parent_hash, record.parent_meta, record.name_hash, record.name_meta, record.extension_hash)

    def lookup(self, path: str) -> Optional[int]:
        return self._lookup.get(path)

    def lookup_stream(self, path: str) -> Optional[int]:
        return self._stream_lookup.get(path_hash(path))

    def __contains__(self, path: str) -> bool:
        return path in self._lookup

    def __len__(self) -> int:
        return len(self._paths)
