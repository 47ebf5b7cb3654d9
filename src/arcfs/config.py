from dataclasses import dataclass
from os.path import join, abspath, dirname
from typing import Union, Tuple

ARC_MAGIC = 0xABCDEF9876543210
ARCHIVE_HEADER_SIZE = 0x38

# Containers whose first data offset sits below this use the 1.0 table layout
LEGACY_DATA_OFFSET_THRESHOLD = 0x8824AF68
# Decompressed table buffers at least this large carry the extended (3.0+) header
SUBVERSION_TABLE_SIZE = 0x2992DD4

LEGACY_VERSION = 0x00010000
BASELINE_VERSION = 0x00020000

MAX_REDIRECT_DEPTH = 8
REBUILD_COMPRESSION_LEVEL = 20

# Order matters; the position is the region index stored in the tables
REGIONS: Tuple[str, ...] = (
    "jp_ja",
    "us_en",
    "us_fr",
    "us_es",
    "eu_en",
    "eu_fr",
    "eu_es",
    "eu_de",
    "eu_nl",
    "eu_it",
    "eu_ru",
    "kr_ko",
    "zh_cn",
    "zh_tw",
)
REGION_BLOCK_SIZE = len(REGIONS) * 12

HASH_LABELS_PATH = abspath(join(dirname(__file__), "Hashes.txt"))


@dataclass(frozen=True)
class ReadOptions:
    legacy_threshold: int = LEGACY_DATA_OFFSET_THRESHOLD
    subversion_table_size: int = SUBVERSION_TABLE_SIZE
    max_redirect_depth: int = MAX_REDIRECT_DEPTH


DEFAULT_OPTIONS = ReadOptions()


def region_index(region: Union[int, str]) -> int:
    """Accepts either a region code (`us_en`) or its numeric index."""
    if isinstance(region, int):
        index = region
    elif region.isdigit():
        index = int(region)
    else:
        try:
            return REGIONS.index(region.lower())
        except ValueError:
            raise ValueError(f"Unknown region `{region}`; expected one of `{list(REGIONS)}`") from None
    if index < 0:
        raise ValueError(f"Region index must be positive; got `{index}`")
    return index
