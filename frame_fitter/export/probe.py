"""Media probing: natural pixel size (and duration for video)."""

from __future__ import annotations

import contextlib
import json
import subprocess
from pathlib import Path
from typing import Any

from frame_fitter.errors import NotReadyError, ProbeError
from frame_fitter.logger import get_logger
from frame_fitter.ops.transform import MediaDimensions, MediaKind, media_kind_for

from .engine import VideoEngine, shared_engine

_logger = get_logger("probe")

_PROBE_TIMEOUT_S = 30.0
_AUTOROTATE_EXTS = {".jpg", ".jpeg", ".heic", ".heif"}

_pyvips: Any | None = None


def _get_pyvips_module() -> Any:
    global _pyvips
    if _pyvips is None:
        import pyvips  # type: ignore

        _pyvips = pyvips
    return _pyvips


def open_image(path: str | Path) -> Any:
    """Open an image with pyvips, applying EXIF orientation for JPEG/HEIF."""
    pyvips = _get_pyvips_module()
    # Configure pyvips caches to avoid memory growth
    with contextlib.suppress(Exception):
        pyvips.cache_set_max(0)
        pyvips.cache_set_max_mem(0)
        pyvips.cache_set_max_files(0)

    p = Path(path)
    if p.suffix.lower() in _AUTOROTATE_EXTS:
        return pyvips.Image.new_from_file(str(p), access="sequential", autorotate=True)
    return pyvips.Image.new_from_file(str(p), access="sequential")


def probe_image(path: str | Path) -> MediaDimensions:
    try:
        image = open_image(path)
        return MediaDimensions(image.width, image.height)
    except ImportError:
        raise
    except NotReadyError as e:
        raise ProbeError(f"image has no usable size: {path}") from e
    except Exception as e:
        _logger.debug("image probe failed for %s: %s", path, e)
        raise ProbeError(f"unreadable or corrupt image: {path}") from e


def _run_ffprobe(engine: VideoEngine, path: str | Path, *query: str) -> dict[str, Any]:
    binaries = engine.acquire()
    cmd = [binaries.ffprobe, "-v", "error", "-select_streams", "v:0", *query, "-of", "json", str(path)]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=_PROBE_TIMEOUT_S)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ProbeError(f"ffprobe failed for {path}: {e}") from e
    if result.returncode != 0:
        tail = (result.stderr or "").strip()[-500:]
        raise ProbeError(f"unreadable or corrupt video: {path}: {tail}")
    try:
        data = json.loads(result.stdout or "{}")
    except json.JSONDecodeError as e:
        raise ProbeError(f"unexpected ffprobe output for {path}") from e
    return data if isinstance(data, dict) else {}


def _rotation(stream: dict[str, Any]) -> int:
    rotate = (stream.get("tags") or {}).get("rotate")
    if rotate is None:
        for side in stream.get("side_data_list") or []:
            if "rotation" in side:
                rotate = side["rotation"]
                break
    try:
        return int(float(rotate or 0)) % 360
    except (TypeError, ValueError):
        return 0


def probe_video(path: str | Path, engine: VideoEngine | None = None) -> MediaDimensions:
    data = _run_ffprobe(engine or shared_engine(), path, "-show_streams")
    streams = data.get("streams") or []
    if not streams:
        raise ProbeError(f"no video stream in {path}")
    stream = streams[0]
    try:
        w, h = int(stream["width"]), int(stream["height"])
    except (KeyError, TypeError, ValueError) as e:
        raise ProbeError(f"video stream has no size: {path}") from e

    # ffmpeg autorotates on decode, so report display orientation
    if _rotation(stream) in (90, 270):
        w, h = h, w
    try:
        return MediaDimensions(w, h)
    except NotReadyError as e:
        raise ProbeError(f"video stream has no usable size: {path}") from e


def probe_duration(path: str | Path, engine: VideoEngine | None = None) -> float | None:
    """Duration in seconds, or None when the container does not report one."""
    data = _run_ffprobe(engine or shared_engine(), path, "-show_entries", "format=duration")
    raw = (data.get("format") or {}).get("duration")
    try:
        duration = float(raw)
    except (TypeError, ValueError):
        return None
    return duration if duration > 0 else None


def probe_media(
    path: str | Path,
    kind: MediaKind | None = None,
    engine: VideoEngine | None = None,
) -> MediaDimensions:
    if not Path(path).is_file():
        raise ProbeError(f"file not found: {path}")
    kind = kind or media_kind_for(path)
    dims = probe_video(path, engine) if kind is MediaKind.VIDEO else probe_image(path)
    _logger.debug("probed %s (%s): %sx%s", path, kind.value, dims.width, dims.height)
    return dims
