import logging
from typing import List, Dict, BinaryIO, Optional, Tuple, Union

from arcfs import v1, v2, protocols, codec, config
from arcfs._core import ArchiveHeader, SchemaKind
from arcfs._serializers import _remaining
from arcfs.errors import MagicMismatchError

logger = logging.getLogger(__name__)

Tables = Union[v1.Tables, v2.Tables]

_APIS: List[protocols.API] = [v1.API, v2.API]
apis: Dict[SchemaKind, protocols.API] = {api.kind: api for api in _APIS}


def read_header(stream: BinaryIO) -> Optional[ArchiveHeader]:
    """ Returns None when the stream is too small to hold a header at all. """
    if _remaining(stream) < config.ARCHIVE_HEADER_SIZE:
        return None
    header = ArchiveHeader.unpack(stream)
    if not header.magic_matches:
        raise MagicMismatchError(header.magic, config.ARC_MAGIC)
    return header


def read_tables(stream: BinaryIO, header: ArchiveHeader, options: config.ReadOptions = config.DEFAULT_OPTIONS, api_lookup: Dict[SchemaKind, protocols.API] = None) -> Tables:
    api_lookup = api_lookup if api_lookup is not None else apis
    schema = header.schema(options.legacy_threshold)
    api = api_lookup[schema]
    stream.seek(header.file_system_offset)
    buffer = codec.decode_table(stream)
    logger.debug("Parsing %d byte %s file system table", len(buffer), schema.name)
    return api.read(buffer, options.subversion_table_size)


def read(stream: BinaryIO, options: config.ReadOptions = config.DEFAULT_OPTIONS, api_lookup: Dict[SchemaKind, protocols.API] = None) -> Optional[Tuple[ArchiveHeader, Tables]]:
    header = read_header(stream)
    if header is None:
        return None
    return header, read_tables(stream, header, options, api_lookup)
