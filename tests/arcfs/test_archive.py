from concurrent.futures import ThreadPoolExecutor

import pytest

from arcfs import Arc, HashRegistry, ReadOptions, SchemaKind, Version, FileInformation
from arcfs.errors import MagicMismatchError
from arcfs.hashes import unresolved
from tests.arcfs.datagen import (
    gen_v2_sample, gen_v1_sample, write_sample, crc, ulong, LABELS,
    MARIO, BODY, ALIAS, VOICE, RAW, TWIN, BGM, INTRO, CREDITS, V2_PATHS,
    L_BODY, L_ALIAS, L_VOICE, L_BGM,
    BODY_DATA, RAW_DATA, VOICE_DATA, BGM_DATA, INTRO_DATA, CREDITS_DATA,
)

V2_OPTIONS = ReadOptions(legacy_threshold=0)


@pytest.fixture
def registry() -> HashRegistry:
    return HashRegistry.from_strings(LABELS)


@pytest.fixture
def v2_sample():
    return gen_v2_sample()


@pytest.fixture
def v2_arc(tmp_path, registry, v2_sample) -> Arc:
    return Arc.open(write_sample(tmp_path, v2_sample), registry, V2_OPTIONS)


@pytest.fixture
def v1_arc(tmp_path, registry) -> Arc:
    return Arc.open(write_sample(tmp_path, gen_v1_sample()), registry)


class TestListing:
    def test_files(self, v2_arc):
        files = v2_arc.list_files()
        assert files == [BODY, ALIAS, VOICE, RAW, TWIN, RAW]
        assert files is not v2_arc.list_files()

    def test_streams(self, v2_arc):
        assert v2_arc.list_stream_files() == [BGM, INTRO, CREDITS]

    def test_every_file_is_located(self, v2_arc, v2_sample):
        for path in v2_arc.list_files() + v2_arc.list_stream_files():
            info = v2_arc.get_file_information(path)
            assert info.comp_size > 0
            assert info.offset >= v2_sample.file_data_offset

    def test_contains(self, v2_arc):
        assert BODY in v2_arc
        assert INTRO in v2_arc
        assert "fighter/mario/nope.bin" not in v2_arc
        assert len(v2_arc) == 6

    def test_entries(self, v2_arc, v2_sample):
        entries = list(v2_arc.entries())
        assert len(entries) == 6 + 3
        assert [_.path for _ in entries if _.stream] == [BGM, INTRO, CREDITS]
        by_path = {_.path: _ for _ in entries}
        assert by_path[ALIAS].redirected
        assert by_path[VOICE].regional
        assert by_path[BODY].offset == v2_sample.offsets[BODY]

    def test_iter_records(self, v2_arc):
        records = list(v2_arc.iter_records())
        assert [index for index, _ in records] == list(range(6))
        assert v2_arc.path_of(2) == VOICE

    def test_metadata(self, v2_arc, v2_sample):
        assert v2_arc.schema is SchemaKind.Modern
        assert v2_arc.version == Version(2)
        assert v2_arc.header.file_data_offset == v2_sample.file_data_offset
        assert v2_arc.max_offset() == v2_sample.offsets[VOICE]


class TestReading:
    def test_compressed(self, v2_arc):
        assert v2_arc.get_file(BODY) == BODY_DATA
        stored = v2_arc.get_file_compressed(BODY)
        assert stored != BODY_DATA
        assert len(stored) == v2_arc.get_file_information(BODY).comp_size

    def test_uncompressed(self, v2_arc):
        info = v2_arc.get_file_information(RAW)
        assert info.comp_size == info.decomp_size
        assert v2_arc.get_file(RAW) == v2_arc.get_file_compressed(RAW) == RAW_DATA

    def test_redirect(self, v2_arc):
        assert v2_arc.is_redirected(ALIAS)
        assert not v2_arc.is_redirected(BODY)
        assert v2_arc.get_file_information(ALIAS) == v2_arc.get_file_information(BODY)
        assert v2_arc.get_file(ALIAS) == BODY_DATA

    @pytest.mark.parametrize("region", [0, 1, 2])
    def test_regional(self, v2_arc, region: int):
        assert v2_arc.is_regional(VOICE)
        assert v2_arc.get_file_information(VOICE, region).regional
        assert v2_arc.get_file(VOICE, region) == VOICE_DATA[region]

    @pytest.mark.parametrize("region", [0, 1, 2])
    def test_redirect_to_regional(self, tmp_path, registry, region: int):
        arc = Arc.open(write_sample(tmp_path, gen_v2_sample(alias_target=2)), registry, V2_OPTIONS)
        assert arc.get_file(ALIAS, region) == VOICE_DATA[region]
        by_path = {_.path: _ for _ in arc.entries(region)}
        assert by_path[ALIAS].offset == arc.get_file_information(ALIAS, region).offset
        assert by_path[ALIAS].offset == arc.get_file_information(VOICE, region).offset

    def test_region_names(self, v2_arc):
        assert v2_arc.get_file(VOICE, "us_en") == VOICE_DATA[1]

    def test_unknown(self, v2_arc):
        assert v2_arc.get_file_information("fighter/mario/nope.bin") == FileInformation(0, 0, 0, False)
        assert v2_arc.get_file("fighter/mario/nope.bin") == b""
        assert not v2_arc.is_redirected("fighter/mario/nope.bin")
        assert not v2_arc.is_regional("fighter/mario/nope.bin")

    def test_streams(self, v2_arc):
        assert v2_arc.get_file(BGM) == BGM_DATA
        assert v2_arc.get_file(INTRO, 0) == INTRO_DATA[0]
        assert v2_arc.get_file(INTRO, 9) == INTRO_DATA[1]
        assert v2_arc.get_file(CREDITS, 4) == CREDITS_DATA[1]
        assert v2_arc.get_file(CREDITS, 9) == CREDITS_DATA[0]
        assert v2_arc.get_file_information(INTRO).regional
        assert not v2_arc.get_file_information(BGM).regional

    def test_concurrent_reads(self, v2_arc):
        paths = [BODY, ALIAS, RAW, TWIN, BGM] * 8
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(v2_arc.get_file, paths))
        expected = {BODY: BODY_DATA, ALIAS: BODY_DATA, RAW: RAW_DATA, TWIN: RAW_DATA, BGM: BGM_DATA}
        assert results == [expected[_] for _ in paths]


class TestShared:
    def test_redirect_shares(self, v2_arc):
        assert v2_arc.get_shared_files(BODY) == sorted([ALIAS, BODY])
        assert v2_arc.get_shared_files(ALIAS) == sorted([ALIAS, BODY])

    def test_duplicate_paths_collapse(self, v2_arc):
        assert v2_arc.get_shared_files(RAW) == sorted([RAW, TWIN])

    def test_alone(self, v2_arc):
        assert v2_arc.get_shared_files(VOICE) == [VOICE]

    def test_unknown(self, v2_arc):
        assert v2_arc.get_shared_files("fighter/mario/nope.bin") == []

    def test_groups(self, v2_arc):
        groups = sorted(v2_arc.shared_groups())
        assert groups == sorted([sorted([ALIAS, BODY]), sorted([RAW, TWIN])])


class TestDirectories:
    def test_directory_info(self, v2_arc):
        info = v2_arc.directory_info("fighter/mario")
        assert info.directories == ["c00"]
        assert info.files == v2_arc.list_files()

    def test_unknown(self, v2_arc):
        assert v2_arc.directory_info("fighter/peach") is None

    def test_legacy(self, v1_arc):
        assert v1_arc.directory_info("fighter/luigi") is None


class TestPaths:
    def test_unresolved(self, tmp_path, v2_sample):
        arc = Arc.open(write_sample(tmp_path, v2_sample), HashRegistry.from_strings([]), V2_OPTIONS)
        expected = unresolved(crc(MARIO), len(MARIO)) + unresolved(crc("body.nutexb"), 11) + unresolved(crc("nutexb"))
        assert arc.list_files()[0] == expected
        assert arc.list_stream_files()[0] == unresolved(crc(BGM), len(BGM))
        # streams are found by hash even when unnamed
        assert arc.get_file(BGM) == BGM_DATA

    def test_extension_ignores_length_word(self, tmp_path):
        # the stored length word of an extension need not match the label
        sample = gen_v2_sample(extension_meta=0x1234500)
        registry = HashRegistry.from_strings([MARIO, "nutexb"])
        arc = Arc.open(write_sample(tmp_path, sample), registry, V2_OPTIONS)
        assert arc.list_files()[0] == MARIO + unresolved(crc("body.nutexb"), 11) + "nutexb"
        full = Arc.open(write_sample(tmp_path, sample, "full.arc"), HashRegistry.from_strings(LABELS), V2_OPTIONS)
        assert full.list_files()[0] == BODY

    def test_refresh(self, tmp_path, v2_sample):
        registry = HashRegistry.from_strings([])
        arc = Arc.open(write_sample(tmp_path, v2_sample), registry, V2_OPTIONS)
        assert BODY not in arc
        for label in LABELS:
            registry.add(label)
        arc.refresh_paths()
        assert arc.list_files()[:5] == [_[0] for _ in V2_PATHS]
        assert arc.get_file(BODY) == BODY_DATA


class TestOpening:
    def test_too_small(self, tmp_path, registry):
        path = tmp_path / "small.arc"
        path.write_bytes(b"\0" * 10)
        arc = Arc.open(path, registry)
        assert not arc.initialized
        assert arc.list_files() == []
        assert arc.get_file(BODY) == b""
        assert arc.get_file_information(BODY) == FileInformation()
        assert arc.get_shared_files(BODY) == []
        assert arc.path_of(0) == ""
        assert arc.directory_info("fighter/mario") is None
        assert len(arc) == 0

    def test_modern_at_lowered_threshold(self, tmp_path, registry, v2_sample):
        buffer = bytearray(v2_sample.buffer)
        buffer[16:24] = ulong(0x10000000)
        path = tmp_path / "moved.arc"
        path.write_bytes(bytes(buffer))
        arc = Arc.open(path, registry, ReadOptions(legacy_threshold=0x10000000))
        assert arc.schema is SchemaKind.Modern
        assert arc.list_files()[:5] == [_[0] for _ in V2_PATHS]
        expected = 0x10000000 + v2_sample.offsets[BODY] - v2_sample.file_data_offset
        assert arc.get_file_information(BODY).offset == expected

    def test_bad_magic(self, tmp_path, registry):
        path = tmp_path / "bad.arc"
        path.write_bytes(b"\x01" * 0x100)
        with pytest.raises(MagicMismatchError):
            Arc.open(path, registry)

    def test_lazy(self, tmp_path, registry, v2_sample):
        arc = Arc(write_sample(tmp_path, v2_sample), registry, V2_OPTIONS, lazy=True)
        assert "not loaded" in repr(arc)
        with ThreadPoolExecutor(max_workers=8) as pool:
            listings = list(pool.map(lambda _: arc.list_files(), range(16)))
        assert all(_ == listings[0] for _ in listings)
        assert arc.initialized

    def test_extended(self, tmp_path, registry):
        options = ReadOptions(legacy_threshold=0, subversion_table_size=1)
        arc = Arc.open(write_sample(tmp_path, gen_v2_sample(extended=True)), registry, options)
        assert arc.version == Version(3)
        assert arc.get_file(ALIAS) == BODY_DATA


class TestLegacy:
    def test_listing(self, v1_arc):
        assert v1_arc.schema is SchemaKind.Legacy
        assert v1_arc.list_files() == [L_BODY, L_ALIAS, L_VOICE]
        assert v1_arc.list_stream_files() == [L_BGM]

    def test_reading(self, v1_arc):
        assert v1_arc.get_file(L_BODY) == BODY_DATA
        assert v1_arc.is_redirected(L_ALIAS)
        assert v1_arc.get_file(L_ALIAS) == BODY_DATA
        assert v1_arc.get_file(L_BGM) == BGM_DATA

    @pytest.mark.parametrize("region", [0, 1, 2])
    def test_regional(self, v1_arc, region: int):
        assert v1_arc.is_regional(L_VOICE)
        assert v1_arc.get_file(L_VOICE, region) == VOICE_DATA[region]

    def test_shared(self, v1_arc):
        assert v1_arc.get_shared_files(L_BODY) == sorted([L_ALIAS, L_BODY])

    def test_rebuild_is_not_supported(self, v1_arc):
        with pytest.raises(NotImplementedError):
            v1_arc.rebuild_table_bytes()
