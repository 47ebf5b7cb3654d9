from __future__ import annotations

import logging
from io import BytesIO
from typing import BinaryIO

from serialization_tools.structx import Struct

from arcfs import _abc, config, _serializers as _s
from arcfs._abc import StreamTables
from arcfs._serializers import RecordSerializer
from arcfs.v1 import core
from arcfs.v1.core import FileSystemHeader, FileInfo

logger = logging.getLogger(__name__)

header_layout = Struct("<11I")
header_serializer = RecordSerializer(header_layout, FileSystemHeader)

file_info_serializer = RecordSerializer(Struct("<12I"), FileInfo)


class APISerializers(_abc.APISerializer[core.Tables]):
    def read(self, buffer: bytes, subversion_table_size: int = config.SUBVERSION_TABLE_SIZE) -> core.Tables:
        # 1.0 tables have no sub versions; the size hint is ignored
        with BytesIO(buffer) as stream:
            _s._require(stream, core.TABLES_OFFSET, "File System Header")
            header = header_serializer.unpack(stream)
            stream.seek(core.TABLES_OFFSET)

            _s._skip(stream, core.LEGACY_HASH_SIZE * header.stream_hash_count, "Legacy Hash Table")
            stream_name_to_hash = _s._unpack_table(stream, header.stream_hash_count, _s.stream_name_to_hash_serializer, "Stream Name To Hash")
            stream_index_to_offset = _s._unpack_table(stream, header.stream_index_to_offset_count, _s.stream_index_to_offset_serializer, "Stream Index To Offset")
            stream_offsets = _s._unpack_table(stream, header.stream_offset_count, _s.stream_offset_serializer, "Stream Offsets")
            streams = StreamTables(stream_name_to_hash, stream_index_to_offset, stream_offsets)

            _s._skip(stream, config.REGION_BLOCK_SIZE, "Region Block")

            directory_list = _s._unpack_table(stream, header.folder_count, _s.directory_list_serializer, "Directory List")
            directory_offsets = _s._unpack_table(stream, header.file_count_1 + header.file_count_2, _s.directory_offset_serializer, "Directory Offsets")
            directory_child_hash_group = _s._unpack_table(stream, header.hash_folder_count, _s.hash_index_group_serializer, "Directory Child Hash Group")
            file_info = _s._unpack_table(stream, header.file_information_count, file_info_serializer, "File Info")
            sub_files = _s._unpack_table(stream, header.sub_file_count + header.sub_file_count_2, _s.sub_file_serializer, "Sub Files")
            logger.debug("File system table ends at 0x%X", stream.tell())

        return core.Tables(self.version, header, streams, directory_list, directory_offsets, directory_child_hash_group, file_info, sub_files)

    def write(self, stream: BinaryIO, tables: core.Tables) -> int:
        raise NotImplementedError

    def __init__(self):
        self.version = core.version
