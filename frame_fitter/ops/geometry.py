"""Contain-fit and pixel box <-> transform conversions.

Pure functions, no Qt dependencies. Container coordinates are in pixels of
the preview surface; transforms are normalized to that surface's size.
"""

from __future__ import annotations

from dataclasses import dataclass

from frame_fitter.errors import NotReadyError

from .transform import MIN_SCALE, FittedRect, PixelRect, TransformModel


@dataclass(frozen=True, slots=True)
class ContainerSize:
    width: float = 0.0
    height: float = 0.0

    @property
    def is_measured(self) -> bool:
        return self.width > 0 and self.height > 0


def fit_contain(media_aspect: float, container_w: float, container_h: float) -> FittedRect:
    """Largest rect of `media_aspect` that fits inside the container, centered."""
    if container_w <= 0 or container_h <= 0:
        raise NotReadyError(f"container not measured: {container_w}x{container_h}")
    if media_aspect <= 0:
        raise NotReadyError(f"media aspect not available: {media_aspect}")

    if media_aspect > container_w / container_h:
        # Media relatively wider: bound by width
        width = float(container_w)
        height = width / media_aspect
    else:
        height = float(container_h)
        width = height * media_aspect

    return FittedRect(
        width=width,
        height=height,
        left=(container_w - width) / 2,
        top=(container_h - height) / 2,
    )


def rect_for_transform(transform: TransformModel, fitted: FittedRect, container: ContainerSize) -> PixelRect:
    """Pixel box the media occupies in the container for `transform`."""
    w = fitted.width * transform.scale
    h = fitted.height * transform.scale
    cx = container.width / 2 + transform.x * container.width
    cy = container.height / 2 + transform.y * container.height
    return PixelRect(left=cx - w / 2, top=cy - h / 2, width=w, height=h)


def pixel_rect_to_transform(rect: PixelRect, fitted: FittedRect, container: ContainerSize) -> TransformModel:
    """Inverse of `rect_for_transform`. Only the box width drives the scale."""
    if not container.is_measured or fitted.width <= 0:
        raise NotReadyError("container not measured")
    scale = max(MIN_SCALE, rect.width / fitted.width)
    cx, cy = rect.center
    x = (cx - container.width / 2) / container.width
    y = (cy - container.height / 2) / container.height
    return TransformModel(scale, x, y)
