"""Geometry core: transform model, contain-fit solver, gesture state machine
and composition planner.

Everything here is pure Python and UI-agnostic. Qt adapters live under
`frame_fitter.app`, export backends under `frame_fitter.export`.
"""

from .composition import CompositionPlan, CropStage, DrawRect, PadStage, ScaleStage, plan_composition
from .geometry import ContainerSize, fit_contain, pixel_rect_to_transform, rect_for_transform
from .gesture_controller import SNAP_THRESHOLD, DragSession, GestureController, resize_box
from .transform import (
    IDENTITY,
    MIN_SCALE,
    TARGET_FRAMES,
    FittedRect,
    MediaDimensions,
    MediaKind,
    NormRect,
    PixelRect,
    TargetFrame,
    TransformModel,
    find_frame,
    media_kind_for,
    output_filename,
    safe_zones,
)

__all__ = [
    "IDENTITY",
    "MIN_SCALE",
    "SNAP_THRESHOLD",
    "TARGET_FRAMES",
    "CompositionPlan",
    "ContainerSize",
    "CropStage",
    "DragSession",
    "DrawRect",
    "FittedRect",
    "GestureController",
    "MediaDimensions",
    "MediaKind",
    "NormRect",
    "PadStage",
    "PixelRect",
    "ScaleStage",
    "TargetFrame",
    "TransformModel",
    "find_frame",
    "fit_contain",
    "media_kind_for",
    "output_filename",
    "pixel_rect_to_transform",
    "plan_composition",
    "rect_for_transform",
    "resize_box",
    "safe_zones",
]
