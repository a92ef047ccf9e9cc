"""Composition planning: transform + sizes -> scale/pad/crop geometry.

The same plan drives both export paths:
- raster: one draw of the scaled media at `draw_rect` on a pad_w x pad_h canvas
- video: the filter chain scale -> pad -> crop

In both, the scaled media's top-left lands at (x_pos, y_pos) in the output.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from frame_fitter.color import BLACK, Color
from frame_fitter.logger import get_logger

from .transform import MediaDimensions, TargetFrame, TransformModel

_logger = get_logger("planner")

MIN_DIMENSION = 2


def _even_down(v: int) -> int:
    return v - 1 if v % 2 else v


def _round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


@dataclass(frozen=True, slots=True)
class ScaleStage:
    width: int
    height: int

    def to_ffmpeg(self) -> str:
        return f"scale={self.width}:{self.height}"


@dataclass(frozen=True, slots=True)
class PadStage:
    width: int
    height: int
    x: int
    y: int
    color: Color

    def to_ffmpeg(self) -> str:
        return f"pad={self.width}:{self.height}:{self.x}:{self.y}:color={self.color.to_ffmpeg()}"


@dataclass(frozen=True, slots=True)
class CropStage:
    width: int
    height: int
    x: int
    y: int

    def to_ffmpeg(self) -> str:
        # exact=1 keeps odd offsets instead of rounding to chroma alignment
        return f"crop={self.width}:{self.height}:{self.x}:{self.y}:exact=1"


Stage = ScaleStage | PadStage | CropStage


@dataclass(frozen=True, slots=True)
class DrawRect:
    """Where the scaled media is drawn on the output canvas (may be negative)."""

    x: int
    y: int
    w: int
    h: int


@dataclass(frozen=True, slots=True)
class CompositionPlan:
    scale: ScaleStage
    pad: PadStage
    crop: CropStage

    @property
    def stages(self) -> tuple[Stage, ...]:
        return (self.scale, self.pad, self.crop)

    @property
    def output_size(self) -> tuple[int, int]:
        return self.crop.width, self.crop.height

    @property
    def background(self) -> Color:
        return self.pad.color

    @property
    def draw_rect(self) -> DrawRect:
        return DrawRect(
            x=self.pad.x - self.crop.x,
            y=self.pad.y - self.crop.y,
            w=self.scale.width,
            h=self.scale.height,
        )

    def to_ffmpeg_filter(self) -> str:
        return ",".join(stage.to_ffmpeg() for stage in self.stages)


def even_target(frame: TargetFrame) -> tuple[int, int]:
    """Target size with each side forced even (block-based encoders need it)."""
    return _even_down(int(frame.width)), _even_down(int(frame.height))


def _axis(pad: int, media: int, final_scale: float, pan: float) -> tuple[int, int, int, int]:
    """Solve one axis. Returns (new_size, canvas_size, pad_offset, crop_offset)."""
    new = _even_down(_round_half_up(media * final_scale))
    new = max(MIN_DIMENSION, new)

    pos = _round_half_up((pad - new) / 2 + pad * pan)
    pad_off = max(0, pos)
    crop_off = max(0, -pos)
    # Canvas must hold both the placed media and the crop window.
    canvas = max(pad + crop_off, pad_off + new)
    return new, canvas, pad_off, crop_off


def plan_composition(
    media: MediaDimensions,
    frame: TargetFrame,
    transform: TransformModel,
    background: Color = BLACK,
) -> CompositionPlan:
    """Compute scale/pad/crop geometry for one export target."""
    pad_w, pad_h = even_target(frame)
    base_scale = min(pad_w / media.width, pad_h / media.height)
    final_scale = base_scale * transform.scale

    new_w, super_w, pad_x, crop_x = _axis(pad_w, media.width, final_scale, transform.x)
    new_h, super_h, pad_y, crop_y = _axis(pad_h, media.height, final_scale, transform.y)

    plan = CompositionPlan(
        scale=ScaleStage(new_w, new_h),
        pad=PadStage(super_w, super_h, pad_x, pad_y, Color.parse(background)),
        crop=CropStage(pad_w, pad_h, crop_x, crop_y),
    )
    _logger.debug(
        "plan: media=%sx%s frame=%s transform=%s base_scale=%.4f -> %s",
        media.width,
        media.height,
        frame.label,
        transform,
        base_scale,
        plan.to_ffmpeg_filter(),
    )
    return plan
