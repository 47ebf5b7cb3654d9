from __future__ import annotations

from typing import TypeVar, Protocol, BinaryIO, Optional, runtime_checkable

from arcfs._core import Version, SchemaKind

T = TypeVar("T")
TTables = TypeVar("TTables")


@runtime_checkable
class StreamSerializer(Protocol[T]):
    def unpack(self, stream: BinaryIO) -> T:
        raise NotImplementedError

    def pack(self, stream: BinaryIO, value: T) -> int:
        raise NotImplementedError


@runtime_checkable
class HashResolver(Protocol):
    """ Reverse lookup from a path hash (plus the stored length hint) to its original string. """

    def resolve(self, hash: int, length: Optional[int] = None) -> str:
        raise NotImplementedError


class API(Protocol[TTables]):
    kind: SchemaKind
    version: Version

    def read(self, buffer: bytes, subversion_table_size: int) -> TTables:
        raise NotImplementedError

    def write(self, stream: BinaryIO, tables: TTables) -> int:
        raise NotImplementedError


# Hard coded-ish but better then nothing
_required_api_attrs = API.__annotations__.keys()
_required_api_callables = ["read", "write"]


def is_api(obj: object) -> bool:
    has_attr = all(hasattr(obj, attr) for attr in _required_api_attrs)
    has_callables = all(callable(getattr(obj, func, None)) for func in _required_api_callables)
    return has_attr and has_callables
