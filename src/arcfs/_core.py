from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, BinaryIO

from serialization_tools.magic import MagicWordIO
from serialization_tools.structx import Struct

from arcfs import config

MagicWord = MagicWordIO(Struct("< 8s"), config.ARC_MAGIC.to_bytes(8, "little"))


@dataclass
class Version:
    """ Stored as a single u32; the major version lives in the high half """
    major: int
    minor: int = 0

    def __str__(self) -> str:
        return f"Version {self.major}.{self.minor}"

    def __int__(self) -> int:
        return (self.major << 16) | self.minor

    def __eq__(self, other):
        if isinstance(other, Version):
            return self.major == other.major and self.minor == other.minor
        else:
            return super().__eq__(other)

    def __hash__(self):
        return hash((self.major, self.minor))

    @classmethod
    def from_int(cls, value: int) -> Version:
        return cls(value >> 16, value & 0xFFFF)


class SchemaKind(int, Enum):
    Legacy = 1
    Modern = 2


@dataclass
class ArchiveHeader:
    magic: int
    stream_data_offset: int
    file_data_offset: int
    shared_file_data_offset: int
    file_system_offset: int
    file_system_search_offset: int
    padding: int = 0

    LAYOUT: ClassVar[Struct] = Struct("<7Q")

    @classmethod
    def unpack(cls, stream: BinaryIO) -> ArchiveHeader:
        """ Does not validate the magic word; see `magic_matches`. """
        args = cls.LAYOUT.unpack_stream(stream)
        return cls(*args)

    @property
    def magic_matches(self) -> bool:
        return self.magic == config.ARC_MAGIC

    def schema(self, legacy_threshold: int = config.LEGACY_DATA_OFFSET_THRESHOLD) -> SchemaKind:
        return SchemaKind.Legacy if self.file_data_offset < legacy_threshold else SchemaKind.Modern


def is_arc(stream: BinaryIO) -> bool:
    """ Peeks at the magic word without moving the stream. """
    start = stream.tell()
    try:
        return MagicWord.check_magic_word(stream, False)
    finally:
        stream.seek(start)
