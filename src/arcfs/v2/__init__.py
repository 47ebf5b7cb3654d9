from arcfs import _abc, protocols
from arcfs._core import SchemaKind
from arcfs.v2._serializers import APISerializers
from arcfs.v2.core import Tables, FileInfo, FileInfoPath, FileInfoIndex, FileInfoSubIndex, version, REDIRECT_FLAG, REGIONAL_FLAG


def _create_api():
    serializer = APISerializers()
    api = _abc.API(SchemaKind.Modern, version, serializer)
    return api


API: protocols.API[Tables] = _create_api()

__all__ = [
    "Tables",
    "FileInfo",
    "FileInfoPath",
    "FileInfoIndex",
    "FileInfoSubIndex",
    "API",
    "version",
    "REDIRECT_FLAG",
    "REGIONAL_FLAG",
]
