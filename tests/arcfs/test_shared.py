from io import BytesIO

import pytest

from arcfs import _apis, HashRegistry, ReadOptions
from arcfs.paths import PathIndex
from arcfs.resolver import OffsetResolver
from arcfs.shared import SharedFileIndex
from tests.arcfs.datagen import gen_v2_sample, LABELS, BODY, ALIAS, RAW, TWIN


@pytest.fixture
def index() -> SharedFileIndex:
    with BytesIO(gen_v2_sample().buffer) as stream:
        header, tables = _apis.read(stream, ReadOptions(legacy_threshold=0))
    resolver = OffsetResolver(header, tables)
    return SharedFileIndex(tables, resolver, PathIndex(tables, HashRegistry.from_strings(LABELS)))


def test_every_record_has_one_group(index):
    # sub files 0 (body, alias), 1 (raw, twin, raw again) and 2 (voice)
    assert len(index) == 3
    members = [member for key in (0, 1, 2) for member in index.group_of(key)]
    assert sorted(members) == [0, 1, 2, 3, 4]


def test_duplicate_path_is_counted_once(index):
    assert index.group_of(1) == [3, 4]


def test_groups(index):
    assert dict(index.groups()) == {0: [0, 1], 1: [3, 4]}


def test_shared_paths(index):
    assert index.shared_paths_of(ALIAS) == [ALIAS, BODY]
    assert index.shared_paths_of(TWIN) == [RAW, TWIN]
    assert index.group_of(99) == []
