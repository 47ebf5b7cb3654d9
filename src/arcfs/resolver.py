"""
Turns file records into byte ranges inside the container.

    record --(redirect?)--> target record --> sub index (+1+region when regional) --> sub file + directory offset
    absolute offset = file data offset + directory offset + (sub file offset << 2)

Stream records skip all of that; their offset table already stores absolute offsets and sizes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple, List

from arcfs import config
from arcfs._abc import SubFileInfo, DirectoryOffset
from arcfs._apis import Tables
from arcfs._core import ArchiveHeader, SchemaKind
from arcfs.errors import RedirectCycleError
from arcfs.v1.core import REDIRECT_TARGET_MASK

logger = logging.getLogger(__name__)

# Streams flagged `2` only carry variants for the first few regions
_STREAM_FLAG2_MAX_REGION = 5


@dataclass(frozen=True)
class ResolvedOffset:
    offset: int
    comp_size: int
    decomp_size: int

    @property
    def is_compressed(self) -> bool:
        return self.decomp_size > 0 and self.decomp_size != self.comp_size


class OffsetResolver:
    def __init__(self, header: ArchiveHeader, tables: Tables, max_redirect_depth: int = config.MAX_REDIRECT_DEPTH):
        self.data_offset = header.file_data_offset
        self.tables = tables
        self.max_redirect_depth = max_redirect_depth
        if tables.kind is SchemaKind.Modern:
            self._redirect_target = self._redirect_target_v2
            self._locate_record = self._locate_v2
        else:
            self._redirect_target = self._redirect_target_v1
            self._locate_record = self._locate_v1

    def resolve(self, record_index: int, region: int = 0) -> ResolvedOffset:
        sub_file, directory_offset = self.sub_info(record_index, region)
        offset = self.data_offset + directory_offset.offset + (sub_file.offset << 2)
        return ResolvedOffset(offset, sub_file.comp_size, sub_file.decomp_size)

    def sub_info(self, record_index: int, region: int = 0) -> Tuple[SubFileInfo, DirectoryOffset]:
        sub_file_index, directory_offset_index = self._locate(record_index, region)
        return self.tables.sub_files[sub_file_index], self.tables.directory_offsets[directory_offset_index]

    def sub_file_key(self, record_index: int, region: int = 0) -> int:
        """ The sub file a record's payload lives in; records sharing a key share bytes. """
        return self._locate(record_index, region)[0]

    def follow_redirects(self, record_index: int) -> int:
        chain: List[int] = [record_index]
        record = self.tables.file_info[record_index]
        while record.is_redirect:
            target = self._redirect_target(record)
            if target in chain or len(chain) > self.max_redirect_depth:
                raise RedirectCycleError(chain + [target])
            chain.append(target)
            record = self.tables.file_info[target]
        if len(chain) > 1:
            logger.debug("Record %d redirects to %d", record_index, chain[-1])
        return chain[-1]

    def resolve_stream(self, stream_index: int, region: int = 0) -> Tuple[ResolvedOffset, bool]:
        _check_region(region)
        streams = self.tables.streams
        entry = streams.name_to_hash[stream_index]
        slot = entry.index
        if entry.is_regional:
            if entry.flags == 2 and region > _STREAM_FLAG2_MAX_REGION:
                region = 0
            slot += region
        file_index = streams.index_to_offset[slot].file_index
        location = streams.offsets[file_index]
        return ResolvedOffset(location.offset, location.size, location.size), entry.is_regional

    def _locate(self, record_index: int, region: int) -> Tuple[int, int]:
        _check_region(region)
        target = self.follow_redirects(record_index)
        return self._locate_record(self.tables.file_info[target], region)

    def _redirect_target_v2(self, record) -> int:
        return self.tables.file_info_index[record.index_index].file_info_index

    def _redirect_target_v1(self, record) -> int:
        return self.tables.sub_files[record.sub_file_index].flags & REDIRECT_TARGET_MASK

    def _locate_v2(self, record, region: int) -> Tuple[int, int]:
        sub_index_index = record.sub_index_index
        if record.is_regional:
            # slot 0 is the default variant; region N lives at 1+N
            sub_index_index += 1 + region
        sub_index = self.tables.file_info_sub_index[sub_index_index]
        return sub_index.sub_file_index, sub_index.directory_offset_index

    def _locate_v1(self, record, region: int) -> Tuple[int, int]:
        sub_file_index = record.sub_file_index
        directory_offset_index = self.tables.directory_list[record.directory_index >> 8].path_meta >> 8
        if record.is_regional:
            sub_file_index = record.regional_sub_file_index + region
            directory_offset_index += 1 + region
        return sub_file_index, directory_offset_index


def _check_region(region: int) -> None:
    if region < 0:
        raise ValueError(f"Region index must be positive; got `{region}`")
