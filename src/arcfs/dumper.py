from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from arcfs.archive import Arc, Region
from arcfs.errors import ArcError

logger = logging.getLogger(__name__)


def output_path_for(out_directory: Union[str, Path], path: str, offset: Optional[int] = None) -> Path:
    # archive paths may carry drive-like prefixes; never let them escape the output directory
    relative = path.replace(":", "").lstrip("/\\")
    result = Path(out_directory) / relative
    if offset is not None:
        result = result.with_name(f"{result.name}.0x{offset:X}")
    return result


def write_file(arc: Arc, path: str, out_directory: Union[str, Path], compressed: bool = False, with_offset: bool = False, region: Region = 0) -> Optional[Path]:
    """
    Writes one file (or stream) of the archive below `out_directory`.

    :returns: The written path, or None when the archive does not know `path`.
    """
    info = arc.get_file_information(path, region)
    if not info.found:
        logger.warning("`%s` is not in `%s`; skipping", path, arc.path)
        return None
    data = arc.get_file_compressed(path, region) if compressed else arc.get_file(path, region)
    out_path = output_path_for(out_directory, path, info.offset if with_offset else None)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "wb") as handle:
        handle.write(data)
    logger.debug("Wrote `%s` (%d bytes)", out_path, len(data))
    return out_path


def extract_files(arc: Arc, paths: Optional[Iterable[str]], out_directory: Union[str, Path], compressed: bool = False, with_offset: bool = False, region: Region = 0, error_fail: bool = True) -> List[Path]:
    """ Extracts `paths` (every file when None); errors are logged and skipped unless `error_fail`. """
    if paths is None:
        paths = arc.list_files()
    written = []
    for path in paths:
        try:
            out_path = write_file(arc, path, out_directory, compressed, with_offset, region)
        except (ArcError, OSError) as e:
            if error_fail:
                raise
            logger.error("Failed to extract `%s`: %s", path, e)
            continue
        if out_path is not None:
            written.append(out_path)
    logger.info("Extracted %d file(s) from `%s`", len(written), arc.path)
    return written
