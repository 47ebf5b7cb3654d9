from __future__ import annotations

import logging
import threading
from os import PathLike
from os.path import exists
from typing import Dict, Tuple, Optional, Iterable, Union

import crc32c

from arcfs import config

logger = logging.getLogger(__name__)

UNRESOLVED_PREFIX = "0x"

LabelSource = Union[str, PathLike]


def path_hash(text: str) -> int:
    """ CRC-32C (Castagnoli) of the UTF-8 encoded path. """
    return crc32c.crc32c(text.encode("utf-8"))


def label_length(text: str) -> int:
    # Only the low byte of a label's length is stored next to its hash
    return len(text.encode("utf-8")) & 0xFF


def unresolved(hash: int, length: Optional[int] = None) -> str:
    if length is None:
        return f"{UNRESOLVED_PREFIX}{hash:08x}"
    return f"{UNRESOLVED_PREFIX}{length & 0xFF:02x}{hash:08x}"


def is_unresolved(text: str) -> bool:
    return text.startswith(UNRESOLVED_PREFIX)


class HashRegistry:
    """
    Reverse lookup from path hashes to the strings they were made from.

    Labels are loaded lazily from `source` (a text file, one label per line) the first time they are needed;
    concurrent first use blocks until a single load finishes.
    """

    def __init__(self, source: Optional[LabelSource] = None, required: bool = True):
        self._source = source
        self._required = required
        self._lock = threading.Lock()
        self._initialized = False
        self._by_hash_length: Dict[Tuple[int, int], str] = {}
        self._by_hash: Dict[int, str] = {}

    @classmethod
    def from_strings(cls, labels: Iterable[str]) -> HashRegistry:
        registry = cls()
        registry._swap(*cls._build(labels))
        registry._initialized = True
        return registry

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def source(self) -> Optional[LabelSource]:
        return self._source

    def init(self) -> None:
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            self._swap(*self._build(self._read_labels(self._source)))
            self._initialized = True

    def reload(self, source: Optional[LabelSource] = None) -> None:
        """ Re-reads the labels; already parsed archives keep their tables and only need their path strings refreshed. """
        with self._lock:
            if source is not None:
                self._source = source
            self._swap(*self._build(self._read_labels(self._source)))
            self._initialized = True

    def add(self, label: str) -> None:
        self.init()
        with self._lock:
            key = path_hash(label), label_length(label)
            self._by_hash_length[key] = label
            self._by_hash.setdefault(key[0], label)

    def resolve(self, hash: int, length: Optional[int] = None) -> str:
        self.init()
        if length is None:
            label = self._by_hash.get(hash)
        else:
            label = self._by_hash_length.get((hash, length & 0xFF))
        return label if label is not None else unresolved(hash, length)

    def __contains__(self, hash: int) -> bool:
        self.init()
        return hash in self._by_hash

    def __len__(self) -> int:
        self.init()
        return len(self._by_hash_length)

    def _swap(self, by_hash_length: Dict[Tuple[int, int], str], by_hash: Dict[int, str]) -> None:
        # Readers never see a half-built table; the references are replaced, not mutated
        self._by_hash_length = by_hash_length
        self._by_hash = by_hash

    @staticmethod
    def _build(labels: Iterable[str]) -> Tuple[Dict[Tuple[int, int], str], Dict[int, str]]:
        by_hash_length: Dict[Tuple[int, int], str] = {}
        by_hash: Dict[int, str] = {}
        for label in labels:
            hash = path_hash(label)
            by_hash_length[(hash, label_length(label))] = label
            by_hash.setdefault(hash, label)
        return by_hash_length, by_hash

    def _read_labels(self, source: Optional[LabelSource]) -> Iterable[str]:
        if source is None:
            return []
        if not exists(source):
            if self._required:
                raise FileNotFoundError(f"Hash label file `{source}` does not exist!")
            logger.warning("Hash label file `%s` not found; paths will be shown as raw hashes", source)
            return []
        with open(source, "r", encoding="utf-8") as handle:
            labels = [line.strip() for line in handle]
        labels = [_ for _ in labels if _]
        logger.info("Loaded %d hash label(s) from `%s`", len(labels), source)
        return labels


_default_registry: Optional[HashRegistry] = None
_default_lock = threading.Lock()


def get_default_registry() -> HashRegistry:
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = HashRegistry(config.HASH_LABELS_PATH, required=False)
    return _default_registry
