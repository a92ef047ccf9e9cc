"""Process-wide handle on the ffmpeg/ffprobe video engine.

- Initialization is lazy and memoized: the first `acquire()` locates and
  checks the binaries, concurrent callers wait on the same Future.
- A failed initialization is reported to every waiter and then forgotten, so
  the next `acquire()` tries again.
- `job()` serializes encodes (one concurrent job per engine).
- `scratch()` hands out a per-job working directory that is always removed.
"""

from __future__ import annotations

import contextlib
import shutil
import subprocess
import tempfile
import threading
from collections.abc import Iterator
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path

from frame_fitter.errors import EngineUnavailableError
from frame_fitter.logger import get_logger

_logger = get_logger("engine")

_VERSION_TIMEOUT_S = 10.0


@dataclass(frozen=True)
class EngineBinaries:
    ffmpeg: str
    ffprobe: str
    version: str


def _resolve_binary(name_or_path: str) -> str:
    resolved = shutil.which(name_or_path)
    if resolved is None:
        raise EngineUnavailableError(f"{name_or_path} not found on PATH")
    return resolved


def _check_version(binary: str) -> str:
    try:
        result = subprocess.run(
            [binary, "-hide_banner", "-version"],
            capture_output=True,
            text=True,
            timeout=_VERSION_TIMEOUT_S,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise EngineUnavailableError(f"{binary} could not be started: {e}") from e
    if result.returncode != 0:
        tail = (result.stderr or "").strip()[-500:]
        raise EngineUnavailableError(f"{binary} -version exited with code {result.returncode}: {tail}")
    first_line = (result.stdout or "").strip().splitlines()
    return first_line[0] if first_line else ""


class VideoEngine:
    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        ffprobe_path: str = "ffprobe",
        scratch_root: str | Path | None = None,
    ) -> None:
        self._ffmpeg_path = ffmpeg_path
        self._ffprobe_path = ffprobe_path
        self._scratch_root = Path(scratch_root) if scratch_root else None
        self._init_lock = threading.Lock()
        self._init_future: Future | None = None
        self._job_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings) -> VideoEngine:  # noqa: ANN001
        return cls(
            ffmpeg_path=str(settings.get("ffmpeg_path")),
            ffprobe_path=str(settings.get("ffprobe_path")),
        )

    @property
    def is_initialized(self) -> bool:
        fut = self._init_future
        return fut is not None and fut.done() and fut.exception() is None

    def _initialize(self) -> EngineBinaries:
        ffmpeg = _resolve_binary(self._ffmpeg_path)
        ffprobe = _resolve_binary(self._ffprobe_path)
        version = _check_version(ffmpeg)
        _check_version(ffprobe)
        _logger.info("video engine ready: %s (%s)", ffmpeg, version)
        return EngineBinaries(ffmpeg=ffmpeg, ffprobe=ffprobe, version=version)

    def acquire(self) -> EngineBinaries:
        """Return the initialized binaries, initializing on first use."""
        with self._init_lock:
            fut = self._init_future
            owner = fut is None
            if owner:
                fut = Future()
                self._init_future = fut
        assert fut is not None

        if owner:
            try:
                binaries = self._initialize()
            except Exception as exc:
                _logger.error("video engine initialization failed: %s", exc)
                with self._init_lock:
                    if self._init_future is fut:
                        self._init_future = None
                fut.set_exception(exc)
                raise
            fut.set_result(binaries)
            return binaries

        return fut.result()

    @contextlib.contextmanager
    def job(self) -> Iterator[EngineBinaries]:
        """Hold the engine for one encode. Blocks while another job runs."""
        binaries = self.acquire()
        with self._job_lock:
            yield binaries

    @contextlib.contextmanager
    def scratch(self, prefix: str = "frame_fitter_") -> Iterator[Path]:
        root = str(self._scratch_root) if self._scratch_root else None
        with tempfile.TemporaryDirectory(prefix=prefix, dir=root, ignore_cleanup_errors=True) as tmp:
            _logger.debug("scratch dir: %s", tmp)
            yield Path(tmp)

    def dispose(self) -> None:
        with self._init_lock:
            self._init_future = None
        _logger.debug("video engine disposed")


_shared_engine: VideoEngine | None = None
_shared_lock = threading.Lock()


def shared_engine() -> VideoEngine:
    """Default process-wide engine handle (PATH lookup of ffmpeg/ffprobe)."""
    global _shared_engine
    with _shared_lock:
        if _shared_engine is None:
            _shared_engine = VideoEngine()
        return _shared_engine
