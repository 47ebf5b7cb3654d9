from arcfs import _abc, protocols
from arcfs._core import SchemaKind
from arcfs.v1._serializers import APISerializers
from arcfs.v1.core import Tables, FileInfo, version, REDIRECT_MASK


def _create_api():
    serializer = APISerializers()
    api = _abc.API(SchemaKind.Legacy, version, serializer)
    return api


API: protocols.API[Tables] = _create_api()

__all__ = [
    "Tables",
    "FileInfo",
    "API",
    "version",
    "REDIRECT_MASK",
]
