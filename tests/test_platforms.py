import dataclasses

import pytest

from utils.errors import InvalidPlatform
from utils.platforms import PLATFORMS, PlatformId, describe, list_platforms, parse_platform


def test_every_platform_has_descriptor():
    assert set(PLATFORMS) == set(PlatformId)
    for platform in PlatformId:
        d = describe(platform)
        assert d.platform is platform
        assert d.glyph_path.startswith("M")
        assert d.brand_color.startswith("#") and len(d.brand_color) == 7


def test_describe_accepts_string_value():
    assert describe("facebook") is describe(PlatformId.FACEBOOK)
    assert describe("facebook").input_label == "Page ID"
    assert describe(" Instagram ").brand_color == "#E4405F"


def test_list_platforms_order():
    assert [p.value for p in list_platforms()] == ["instagram", "facebook", "tiktok", "x"]


def test_unknown_platform():
    with pytest.raises(InvalidPlatform):
        describe("snapchat")
    with pytest.raises(ValueError):
        parse_platform("")


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        PLATFORMS[PlatformId.X] = PLATFORMS[PlatformId.TIKTOK]  # type: ignore[index]
    with pytest.raises(dataclasses.FrozenInstanceError):
        describe(PlatformId.X).brand_color = "#FFFFFF"  # type: ignore[misc]
