"""
Best-effort serialisation of a parsed table set back into a compressed table section.

Nothing here has been verified against the game; a rebuilt table is byte-compatible with what the readers in
this package accept, which is not the same as being accepted by the game.
"""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Dict

from arcfs import codec, config, protocols
from arcfs._apis import Tables, apis
from arcfs._core import SchemaKind

logger = logging.getLogger(__name__)


def write_tables(tables: Tables, api_lookup: Dict[SchemaKind, protocols.API] = None) -> bytes:
    api_lookup = api_lookup if api_lookup is not None else apis
    api = api_lookup[tables.kind]
    with BytesIO() as stream:
        api.write(stream, tables)
        return stream.getvalue()


def rebuild_table_bytes(tables: Tables, level: int = config.REBUILD_COMPRESSION_LEVEL, api_lookup: Dict[SchemaKind, protocols.API] = None) -> bytes:
    body = write_tables(tables, api_lookup)
    section = codec.encode_table(body, level)
    logger.info("Rebuilt %s table: %d bytes, %d compressed", tables.version, len(body), len(section))
    return section
