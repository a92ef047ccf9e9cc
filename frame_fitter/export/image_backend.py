"""Raster compositor using pyvips.

Draws the scaled media once onto a background-filled canvas at the plan's
draw rect. Pure functions, no Qt dependencies.
"""

from __future__ import annotations

import contextlib
from pathlib import Path
from typing import Any

import numpy as np

from frame_fitter.errors import EncodeError
from frame_fitter.logger import get_logger
from frame_fitter.ops.composition import CompositionPlan

from .probe import _get_pyvips_module, open_image

_logger = get_logger("image")

_RGB_BANDS = 3


def _to_srgb_uchar(image: Any, background: list[int]) -> Any:
    pyvips = _get_pyvips_module()
    with contextlib.suppress(Exception):
        image = image.colourspace("srgb")
    if image.hasalpha():
        image = image.flatten(background=background[:_RGB_BANDS])
    if image.bands > _RGB_BANDS:
        image = image.extract_band(0, n=_RGB_BANDS)
    elif image.bands < _RGB_BANDS:
        image = pyvips.Image.bandjoin([image] * _RGB_BANDS)
    if image.format != "uchar":
        image = image.cast("uchar")
    return image


def render_plan(image: Any, plan: CompositionPlan) -> Any:
    """Composite an already-loaded pyvips image according to `plan`."""
    pyvips = _get_pyvips_module()
    background = plan.background.to_vips()
    out_w, out_h = plan.output_size
    rect = plan.draw_rect

    image = _to_srgb_uchar(image, background)
    scaled = image.thumbnail_image(rect.w, height=rect.h, size=pyvips.Size.FORCE)

    canvas = (pyvips.Image.black(out_w, out_h, bands=len(background)) + background).cast("uchar")
    if canvas.bands > scaled.bands:
        scaled = scaled.bandjoin(255)

    # insert() clips the media to the canvas, so negative offsets crop it.
    return canvas.insert(scaled, rect.x, rect.y)


def render_array(source: str | Path, plan: CompositionPlan) -> np.ndarray:
    """Render `source` through `plan` into an (h, w, bands) uint8 array."""
    out = render_plan(open_image(source), plan)
    mem = out.write_to_memory()
    return np.frombuffer(mem, dtype=np.uint8).reshape(out.height, out.width, out.bands).copy()


def compose_image(source: str | Path, plan: CompositionPlan, fmt: str = ".png") -> bytes:
    """Render `source` through `plan` and return encoded image bytes."""
    try:
        image = open_image(source)
    except ImportError:
        raise
    except Exception as e:
        _logger.error("Failed to open source image %s: %s", source, e, exc_info=True)
        raise EncodeError(f"could not read {source}") from e

    _logger.debug("Compositing %s: draw=%s canvas=%s", source, plan.draw_rect, plan.output_size)
    try:
        data = render_plan(image, plan).write_to_buffer(fmt)
    except Exception as e:
        _logger.error("Error compositing %s: %s", source, e, exc_info=True)
        raise EncodeError(f"image composition failed for {source}", diagnostics=str(e)) from e
    if not data:
        raise EncodeError(f"image encoder produced no output for {source}")
    return bytes(data)
