import pytest

from arcfs.config import region_index, REGIONS, REGION_BLOCK_SIZE


@pytest.mark.parametrize(["region", "expected"], [(0, 0), (5, 5), ("3", 3), ("jp_ja", 0), ("us_en", 1), ("ZH_TW", 13)])
def test_region_index(region, expected: int):
    assert region_index(region) == expected


@pytest.mark.parametrize("region", [-1, "xx_yy", "-2"])
def test_bad_region(region):
    with pytest.raises(ValueError):
        region_index(region)


def test_region_block():
    assert len(REGIONS) == 14
    assert REGION_BLOCK_SIZE == 0xE * 12
