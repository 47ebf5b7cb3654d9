from arcfs._apis import apis as APIs, read
from arcfs._core import Version, MagicWord, SchemaKind, ArchiveHeader, is_arc
from arcfs.archive import Arc, FileInformation, FileEntry, DirectoryInfo, open_arc as open
from arcfs.config import ReadOptions, REGIONS, region_index
from arcfs.hashes import HashRegistry, get_default_registry, path_hash
from arcfs.errors import ArcError, MismatchError, CorruptArchiveError, MagicMismatchError, TruncatedSectionError, TableBoundsError, RedirectCycleError, DecompressionError

__all__ = [
    "read",
    "APIs",
    "Version",
    "MagicWord",
    "SchemaKind",
    "ArchiveHeader",
    "is_arc",
    "Arc",
    "open",
    "FileInformation",
    "FileEntry",
    "DirectoryInfo",
    "ReadOptions",
    "REGIONS",
    "region_index",
    "HashRegistry",
    "get_default_registry",
    "path_hash",
    "ArcError",
    "MismatchError",
    "CorruptArchiveError",
    "MagicMismatchError",
    "TruncatedSectionError",
    "TableBoundsError",
    "RedirectCycleError",
    "DecompressionError",
]
