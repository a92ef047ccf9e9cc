from __future__ import annotations

import math
import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from frame_fitter.errors import NotReadyError

MIN_SCALE = 0.1


@dataclass(frozen=True, slots=True)
class TransformModel:
    """Placement of the media relative to one target frame.

    - scale: multiplier over the contain-fitted size (1.0 = exactly fitted).
    - x, y: pan offsets as fractions of the target frame's width/height.

    Scales below MIN_SCALE (including zero and negatives) are clamped up to it.
    """

    scale: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def __post_init__(self) -> None:
        s, x, y = float(self.scale), float(self.x), float(self.y)
        if not (math.isfinite(s) and math.isfinite(x) and math.isfinite(y)):
            raise ValueError(f"transform values must be finite: scale={s} x={x} y={y}")
        object.__setattr__(self, "scale", max(MIN_SCALE, s))
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    def moved(self, x: float, y: float) -> TransformModel:
        return TransformModel(self.scale, x, y)

    def as_dict(self) -> dict[str, float]:
        return {"scale": self.scale, "x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TransformModel:
        return cls(
            float(data.get("scale", 1.0)),
            float(data.get("x", 0.0)),
            float(data.get("y", 0.0)),
        )


IDENTITY = TransformModel()


@dataclass(frozen=True, slots=True)
class MediaDimensions:
    """Natural pixel size of the source media."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if int(self.width) <= 0 or int(self.height) <= 0:
            raise NotReadyError(f"media dimensions not available: {self.width}x{self.height}")
        object.__setattr__(self, "width", int(self.width))
        object.__setattr__(self, "height", int(self.height))

    @property
    def aspect(self) -> float:
        return self.width / self.height


@dataclass(frozen=True, slots=True)
class TargetFrame:
    width: int
    height: int
    label: str

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"target frame {self.label!r} must have a positive size")

    @property
    def aspect(self) -> float:
        return self.width / self.height

    @property
    def suffix(self) -> str:
        """Short name used in output filenames: "Square (1:1)" -> "square"."""
        return self.label.split(" ")[0].lower()


TARGET_FRAMES: tuple[TargetFrame, ...] = (
    TargetFrame(1000, 1000, "Square (1:1)"),
    TargetFrame(1920, 1080, "Landscape (16:9)"),
    TargetFrame(1080, 1920, "Portrait (9:16)"),
)


def find_frame(name: str, frames: tuple[TargetFrame, ...] = TARGET_FRAMES) -> TargetFrame:
    """Look up a frame by its full label or its filename suffix."""
    key = name.strip().lower()
    for frame in frames:
        if frame.label.lower() == key or frame.suffix == key:
            return frame
    raise KeyError(name)


@dataclass(frozen=True, slots=True)
class NormRect:
    """Rect in frame fractions (0..1 on both axes, origin top-left)."""

    x: float
    y: float
    w: float
    h: float

    def to_pixels(self, width: float, height: float) -> PixelRect:
        return PixelRect(self.x * width, self.y * height, self.w * width, self.h * height)

    def as_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


_ASPECT_TOLERANCE = 0.01

# Vertical feeds: bottom caption area, top bar, side rails and the action
# column right of center. Top-right stays usable.
_PORTRAIT_ZONES = (
    NormRect(0.0, 0.70, 1.0, 0.30),
    NormRect(0.0, 0.0, 1.0, 0.11),
    NormRect(0.94, 0.0, 0.06, 0.70),
    NormRect(0.0, 0.0, 0.06, 0.70),
    NormRect(0.79, 0.50, 0.15, 0.20),
)

# Square and landscape: plain margins, side strips sit between top and bottom.
_MARGIN_ZONES = (
    NormRect(0.0, 0.0, 1.0, 0.05),
    NormRect(0.0, 0.92, 1.0, 0.08),
    NormRect(0.0, 0.05, 0.05, 0.87),
    NormRect(0.95, 0.05, 0.05, 0.87),
)


def safe_zones(frame: TargetFrame) -> tuple[NormRect, ...]:
    """Regions of `frame` likely to be covered by platform UI overlays.

    Empty for aspects other than 9:16, 1:1 and 16:9.
    """
    aspect = frame.aspect
    if abs(aspect - 9 / 16) < _ASPECT_TOLERANCE:
        return _PORTRAIT_ZONES
    if abs(aspect - 16 / 9) < _ASPECT_TOLERANCE or abs(aspect - 1.0) < _ASPECT_TOLERANCE:
        return _MARGIN_ZONES
    return ()


@dataclass(frozen=True, slots=True)
class FittedRect:
    """Contain placement of the media inside a container, in container pixels."""

    width: float
    height: float
    left: float
    top: float


@dataclass(frozen=True, slots=True)
class PixelRect:
    """Box in container pixels, edited by the resize handles."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center(self) -> tuple[float, float]:
        return self.left + self.width / 2, self.top + self.height / 2


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"

    @property
    def extension(self) -> str:
        return "mp4" if self is MediaKind.VIDEO else "png"


def media_kind_for(path: str | Path) -> MediaKind:
    mime, _ = mimetypes.guess_type(str(path))
    if mime and mime.startswith("video/"):
        return MediaKind.VIDEO
    return MediaKind.IMAGE


def output_filename(basename: str | None, frame: TargetFrame, kind: MediaKind) -> str:
    base = (basename or "").strip() or "output"
    return f"{base}.{frame.suffix}.{kind.extension}"
