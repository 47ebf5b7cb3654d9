from __future__ import annotations

import logging
from typing import Dict, List, Set, Hashable, Iterable, Tuple

from arcfs._apis import Tables
from arcfs.paths import PathIndex
from arcfs.resolver import OffsetResolver

logger = logging.getLogger(__name__)


class SharedFileIndex:
    """ Groups records by the sub file their (default region) payload resolves to. """

    def __init__(self, tables: Tables, resolver: OffsetResolver, paths: PathIndex):
        self.resolver = resolver
        self.paths = paths
        self._groups: Dict[int, List[int]] = {}
        seen: Dict[int, Set[Hashable]] = {}
        for index, record in enumerate(tables.file_info):
            key = resolver.sub_file_key(index)
            group = self._groups.setdefault(key, [])
            group_keys = seen.setdefault(key, set())
            # the same path listed twice is one file, not a share
            if record.path_key in group_keys:
                continue
            group_keys.add(record.path_key)
            group.append(index)
        logger.info("Grouped %d record(s) into %d payload(s)", len(tables.file_info), len(self._groups))

    def group_of(self, sub_file_index: int) -> List[int]:
        return list(self._groups.get(sub_file_index, []))

    def groups(self) -> Iterable[Tuple[int, List[int]]]:
        """ Only payloads owned by more than one path. """
        for key, members in self._groups.items():
            if len(members) > 1:
                yield key, list(members)

    def shared_paths_of(self, path: str, region: int = 0) -> List[str]:
        record_index = self.paths.lookup(path)
        if record_index is None:
            return []
        key = self.resolver.sub_file_key(record_index, region)
        shared = {self.paths.paths[member] for member in self._groups.get(key, [])}
        shared.add(path)
        return sorted(shared)

    def __len__(self) -> int:
        return len(self._groups)
