from __future__ import annotations

import pytest

from frame_fitter.color import BLACK, PRESET_COLORS, Color
from frame_fitter.errors import InvalidColorError


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("#000000", Color(0, 0, 0)),
        ("#FFFFFF", Color(255, 255, 255)),
        ("f43f5e", Color(244, 63, 94)),
        ("#abc", Color(0xAA, 0xBB, 0xCC)),
        ("#abcd", Color(0xAA, 0xBB, 0xCC, 0xDD)),
        ("#10B98180", Color(16, 185, 129, 128)),
        ("0x3B82F6", Color(59, 130, 246)),
        ("  #3b82f6 ", Color(59, 130, 246)),
    ],
)
def test_parse_accepts_hex_forms(text: str, expected: Color) -> None:
    assert Color.parse(text) == expected


@pytest.mark.parametrize("text", ["", "#12", "#12345", "red", "#gggggg", "0x12345", "0xFFFFFF@2"])
def test_parse_rejects_garbage(text: str) -> None:
    with pytest.raises(InvalidColorError):
        Color.parse(text)


def test_invalid_color_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        Color.parse(None)  # type: ignore[arg-type]


def test_channel_range_is_checked() -> None:
    with pytest.raises(InvalidColorError):
        Color(256, 0, 0)


def test_ffmpeg_representation() -> None:
    assert Color.parse("#f59e0b").to_ffmpeg() == "0xF59E0B"
    assert Color(0, 0, 0, 0).to_ffmpeg() == "0x000000@0.000"
    assert Color.parse("0x8B5CF6@0.5").a == 128


def test_hex_and_vips_representations() -> None:
    c = Color.parse("#8B5CF6")
    assert c.to_hex() == "#8b5cf6"
    assert str(c) == "#8b5cf6"
    assert c.to_vips() == [139, 92, 246]
    translucent = Color(1, 2, 3, 4)
    assert translucent.to_hex() == "#01020304"
    assert translucent.to_vips() == [1, 2, 3, 4]


def test_parse_passes_color_through_and_presets() -> None:
    assert Color.parse(BLACK) is BLACK
    assert PRESET_COLORS["white"] == Color(255, 255, 255)
    assert len(PRESET_COLORS) == 7
