from __future__ import annotations

import logging
from io import BytesIO
from typing import BinaryIO

from serialization_tools.structx import Struct

from arcfs import _abc, config, _serializers as _s
from arcfs._abc import StreamTables
from arcfs._core import Version
from arcfs._serializers import RecordSerializer
from arcfs.v2 import core
from arcfs.v2.core import FileSystemHeader, ExtendedHeader, StreamHeader, StreamUnk, StreamHashToName, FileInfoUnknownTable, FileInfoPath, FileInfoIndex, FileInfo, FileInfoSubIndex

logger = logging.getLogger(__name__)

header_layout = Struct("<14I 2B H")
header_serializer = RecordSerializer(header_layout, FileSystemHeader)

extended_header_layout = Struct("<i 2I 8s 2I")
extended_header_serializer = RecordSerializer(extended_header_layout, ExtendedHeader)

stream_header_layout = Struct("<4I")
stream_header_serializer = RecordSerializer(stream_header_layout, StreamHeader)

stream_unk_serializer = RecordSerializer(Struct("<3I"), StreamUnk)
stream_hash_to_name_serializer = RecordSerializer(Struct("<2I"), StreamHashToName)
file_info_unknown_serializer = RecordSerializer(Struct("<2I"), FileInfoUnknownTable)
file_info_path_serializer = RecordSerializer(Struct("<8I"), FileInfoPath)
file_info_index_serializer = RecordSerializer(Struct("<2I"), FileInfoIndex)
file_info_serializer = RecordSerializer(Struct("<4I"), FileInfo)
file_info_sub_index_serializer = RecordSerializer(Struct("<3I"), FileInfoSubIndex)

unknown_counts_layout = Struct("<2I")


class APISerializers(_abc.APISerializer[core.Tables]):
    def read(self, buffer: bytes, subversion_table_size: int = config.SUBVERSION_TABLE_SIZE) -> core.Tables:
        with BytesIO(buffer) as stream:
            _s._require(stream, header_layout.size, "File System Header")
            header = header_serializer.unpack(stream)

            extended = None
            extra_folder = extra_count = extra_count_2 = extra_sub_count = 0
            if len(buffer) >= subversion_table_size:
                _s._require(stream, extended_header_layout.size, "Extended File System Header")
                extended = extended_header_serializer.unpack(stream)
                version = Version.from_int(extended.version)
                extra_folder, extra_count = extended.extra_folder, extended.extra_count
                extra_count_2, extra_sub_count = extended.extra_count_2, extended.extra_sub_count
            else:
                version = self.version
                stream.seek(header_layout.size)
            logger.debug("File system table %s (%d bytes)", version, len(buffer))

            regional_bytes = _s._read_exact(stream, config.REGION_BLOCK_SIZE, "Region Block")

            _s._require(stream, stream_header_layout.size, "Stream Header")
            stream_header = stream_header_serializer.unpack(stream)
            stream_unk = _s._unpack_table(stream, stream_header.quick_dir_count, stream_unk_serializer, "Stream Unknown")
            stream_hash_to_name = _s._unpack_table(stream, stream_header.stream_hash_count, stream_hash_to_name_serializer, "Stream Hash To Name")
            stream_name_to_hash = _s._unpack_table(stream, stream_header.stream_hash_count, _s.stream_name_to_hash_serializer, "Stream Name To Hash")
            stream_index_to_offset = _s._unpack_table(stream, stream_header.stream_index_to_offset_count, _s.stream_index_to_offset_serializer, "Stream Index To Offset")
            stream_offsets = _s._unpack_table(stream, stream_header.stream_offset_count, _s.stream_offset_serializer, "Stream Offsets")
            streams = StreamTables(stream_name_to_hash, stream_index_to_offset, stream_offsets)

            hash_group_count, unknown_count = _s._unpack_struct(stream, unknown_counts_layout, "Unknown Table Counts")
            file_info_unknown = _s._unpack_table(stream, unknown_count, file_info_unknown_serializer, "File Info Unknown")
            file_path_hash_group = _s._unpack_table(stream, hash_group_count, _s.hash_index_group_serializer, "File Path Hash Group")

            file_info_path = _s._unpack_table(stream, header.file_info_path_count, file_info_path_serializer, "File Info Path")
            file_info_index = _s._unpack_table(stream, header.file_info_index_count, file_info_index_serializer, "File Info Index")

            directory_hash_group = _s._unpack_table(stream, header.directory_count, _s.hash_index_group_serializer, "Directory Hash Group")
            directory_list = _s._unpack_table(stream, header.directory_count, _s.directory_list_serializer, "Directory List")
            directory_offset_count = header.directory_offset_count_1 + header.directory_offset_count_2 + extra_folder
            directory_offsets = _s._unpack_table(stream, directory_offset_count, _s.directory_offset_serializer, "Directory Offsets")
            directory_child_hash_group = _s._unpack_table(stream, header.directory_hash_search_count, _s.hash_index_group_serializer, "Directory Child Hash Group")

            file_info_count = header.file_info_count + header.sub_file_count_2 + extra_count
            file_info = _s._unpack_table(stream, file_info_count, file_info_serializer, "File Info")
            sub_index_count = header.file_info_sub_index_count + header.sub_file_count_2 + extra_count_2
            file_info_sub_index = _s._unpack_table(stream, sub_index_count, file_info_sub_index_serializer, "File Info Sub Index")
            sub_file_count = header.sub_file_count + header.sub_file_count_2 + extra_sub_count
            sub_files = _s._unpack_table(stream, sub_file_count, _s.sub_file_serializer, "Sub Files")
            logger.debug("File system table ends at 0x%X", stream.tell())

        return core.Tables(version, header, extended, regional_bytes, stream_header, stream_unk, stream_hash_to_name, streams, file_info_unknown, file_path_hash_group,
                           file_info_path, file_info_index, directory_hash_group, directory_list, directory_offsets, directory_child_hash_group,
                           file_info, file_info_sub_index, sub_files)

    def write(self, stream: BinaryIO, tables: core.Tables) -> int:
        written = header_serializer.pack(stream, tables.header)
        if tables.extended is not None:
            written += extended_header_serializer.pack(stream, tables.extended)
        written += stream.write(tables.regional_bytes)

        written += stream_header_serializer.pack(stream, tables.stream_header)
        written += _s._pack_table(stream, tables.stream_unk, stream_unk_serializer)
        written += _s._pack_table(stream, tables.stream_hash_to_name, stream_hash_to_name_serializer)
        written += _s._pack_table(stream, tables.streams.name_to_hash, _s.stream_name_to_hash_serializer)
        written += _s._pack_table(stream, tables.streams.index_to_offset, _s.stream_index_to_offset_serializer)
        written += _s._pack_table(stream, tables.streams.offsets, _s.stream_offset_serializer)

        written += unknown_counts_layout.pack_stream(stream, len(tables.file_path_hash_group), len(tables.file_info_unknown))
        written += _s._pack_table(stream, tables.file_info_unknown, file_info_unknown_serializer)
        written += _s._pack_table(stream, tables.file_path_hash_group, _s.hash_index_group_serializer)

        written += _s._pack_table(stream, tables.file_info_path, file_info_path_serializer)
        written += _s._pack_table(stream, tables.file_info_index, file_info_index_serializer)

        written += _s._pack_table(stream, tables.directory_hash_group, _s.hash_index_group_serializer)
        written += _s._pack_table(stream, tables.directory_list, _s.directory_list_serializer)
        written += _s._pack_table(stream, tables.directory_offsets, _s.directory_offset_serializer)
        written += _s._pack_table(stream, tables.directory_child_hash_group, _s.hash_index_group_serializer)

        written += _s._pack_table(stream, tables.file_info, file_info_serializer)
        written += _s._pack_table(stream, tables.file_info_sub_index, file_info_sub_index_serializer)
        written += _s._pack_table(stream, tables.sub_files, _s.sub_file_serializer)
        return written

    def __init__(self):
        self.version = core.version
