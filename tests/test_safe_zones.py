from __future__ import annotations

import pytest

from frame_fitter.ops.transform import TARGET_FRAMES, NormRect, TargetFrame, find_frame, safe_zones


def _inside_unit(z: NormRect) -> bool:
    eps = 1e-9
    return z.x >= -eps and z.y >= -eps and z.x + z.w <= 1 + eps and z.y + z.h <= 1 + eps


def test_portrait_zones() -> None:
    zones = safe_zones(find_frame("portrait"))
    assert len(zones) == 5
    bottom, top, right_rail, left_rail, action_column = zones

    assert (bottom.y, bottom.h) == pytest.approx((0.70, 0.30))
    assert (top.y, top.h, top.w) == pytest.approx((0.0, 0.11, 1.0))
    assert (right_rail.x, right_rail.w, right_rail.h) == pytest.approx((0.94, 0.06, 0.70))
    assert (left_rail.x, left_rail.w, left_rail.h) == pytest.approx((0.0, 0.06, 0.70))
    # right of center, stops at the right rail and at the caption area
    assert action_column.x + action_column.w == pytest.approx(right_rail.x)
    assert action_column.y + action_column.h == pytest.approx(bottom.y)
    assert action_column.x > 0.5


@pytest.mark.parametrize("name", ["square", "landscape"])
def test_margin_zones(name: str) -> None:
    top, bottom, left, right = safe_zones(find_frame(name))
    assert top.h == pytest.approx(0.05)
    assert bottom.h == pytest.approx(0.08)
    assert bottom.y + bottom.h == pytest.approx(1.0)
    # side strips sit between the top and bottom bands
    for side in (left, right):
        assert side.w == pytest.approx(0.05)
        assert side.y == pytest.approx(top.h)
        assert side.y + side.h == pytest.approx(bottom.y)
    assert right.x + right.w == pytest.approx(1.0)


@pytest.mark.parametrize("frame", TARGET_FRAMES, ids=lambda f: f.suffix)
def test_zones_stay_inside_frame(frame: TargetFrame) -> None:
    zones = safe_zones(frame)
    assert zones
    assert all(_inside_unit(z) for z in zones)


def test_other_aspects_have_no_zones() -> None:
    assert safe_zones(TargetFrame(1080, 1350, "Feed (4:5)")) == ()
    # near-aspect sizes still match
    assert safe_zones(TargetFrame(1081, 1920, "Portrait")) == safe_zones(find_frame("portrait"))


def test_zone_to_pixels() -> None:
    rect = NormRect(0.0, 0.70, 1.0, 0.30).to_pixels(1080, 1920)
    assert (rect.left, rect.width) == (0.0, 1080.0)
    assert rect.top == pytest.approx(1344)
    assert rect.bottom == pytest.approx(1920)
