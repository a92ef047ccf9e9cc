"""Video encode backend: runs the plan's filter chain through ffmpeg."""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from frame_fitter.errors import EncodeError, ProbeError
from frame_fitter.logger import get_logger
from frame_fitter.ops.composition import CompositionPlan

from .engine import VideoEngine
from .probe import probe_duration

_logger = get_logger("video")

_OUTPUT_NAME = "output.mp4"
_LOG_NAME = "ffmpeg.log"
_DIAG_TAIL_CHARS = 2000

ProgressFn = Callable[[float], None]


@dataclass(frozen=True)
class EncodeOptions:
    codec: str = "libx264"
    preset: str = "ultrafast"
    threads: int = 0  # 0 lets ffmpeg decide
    audio: str = "copy"  # "copy" or "none"

    @classmethod
    def from_settings(cls, settings) -> EncodeOptions:  # noqa: ANN001
        return cls(
            codec=str(settings.get("video_codec")),
            preset=str(settings.get("video_preset")),
            threads=int(settings.get("video_threads", 0) or 0),
            audio=str(settings.get("audio_mode")),
        )


def build_command(
    ffmpeg: str,
    source: str | Path,
    output: str | Path,
    plan: CompositionPlan,
    options: EncodeOptions,
) -> list[str]:
    cmd = [
        ffmpeg,
        "-hide_banner",
        "-y",
        "-i",
        str(source),
        "-vf",
        plan.to_ffmpeg_filter(),
        "-c:v",
        options.codec,
        "-preset",
        options.preset,
        "-pix_fmt",
        "yuv420p",
        "-threads",
        str(int(options.threads)),
    ]
    if options.audio == "none":
        cmd.append("-an")
    else:
        cmd += ["-c:a", options.audio]
    cmd += ["-progress", "pipe:1", "-nostats", str(output)]
    return cmd


def parse_progress_line(line: str, duration: float | None) -> float | None:
    """Map one `-progress` key=value line to a fraction in [0, 1]."""
    key, sep, value = line.strip().partition("=")
    if not sep:
        return None
    if key == "progress" and value == "end":
        return 1.0
    if key not in ("out_time_us", "out_time_ms") or not duration:
        return None
    try:
        # Both keys are microseconds in ffmpeg's progress output.
        seconds = int(value) / 1_000_000
    except ValueError:
        return None
    return max(0.0, min(1.0, seconds / duration))


def _tail(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")[-_DIAG_TAIL_CHARS:]
    except OSError:
        return ""


def encode_video(
    engine: VideoEngine,
    source: str | Path,
    plan: CompositionPlan,
    options: EncodeOptions | None = None,
    progress: ProgressFn | None = None,
    duration: float | None = None,
) -> bytes:
    """Encode `source` through `plan` and return the MP4 bytes.

    Holds the engine's job lock for the whole encode, and writes only inside a
    scratch directory that is removed afterwards whatever the outcome.
    """
    options = options or EncodeOptions()
    if duration is None:
        try:
            duration = probe_duration(source, engine)
        except ProbeError as e:
            _logger.debug("duration unavailable for %s: %s", source, e)

    with engine.job() as binaries, engine.scratch() as work:
        output = work / _OUTPUT_NAME
        log_path = work / _LOG_NAME
        cmd = build_command(binaries.ffmpeg, source, output, plan, options)
        _logger.info("encoding %s with filter %s", source, plan.to_ffmpeg_filter())
        _logger.debug("ffmpeg command: %s", cmd)

        with open(log_path, "w", encoding="utf-8") as log_file:
            try:
                proc = subprocess.Popen(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=log_file,
                    text=True,
                )
            except OSError as e:
                raise EncodeError(f"could not start ffmpeg: {e}") from e

            assert proc.stdout is not None
            for line in proc.stdout:
                fraction = parse_progress_line(line, duration)
                if fraction is not None and progress is not None:
                    progress(fraction)
            returncode = proc.wait()

        if returncode != 0:
            diagnostics = _tail(log_path)
            _logger.error("ffmpeg exited with code %s for %s", returncode, source)
            raise EncodeError(f"video encoding failed (exit code {returncode})", diagnostics=diagnostics)

        try:
            data = output.read_bytes()
        except OSError as e:
            raise EncodeError("failed to read encoded video", diagnostics=_tail(log_path)) from e
        if not data:
            raise EncodeError("video encoder produced no output", diagnostics=_tail(log_path))

    _logger.info("encoded %s: %d bytes", source, len(data))
    return data
