"""Per-target export sequencing.

- Plans are built synchronously on the caller's thread.
- Video jobs run one at a time (single worker, plus the engine's job lock).
- Image jobs run concurrently on a small thread pool.
- Backend failures are captured per target in ExportResult; they never
  abort sibling targets.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from frame_fitter.color import BLACK, Color
from frame_fitter.errors import EncodeError
from frame_fitter.logger import get_logger
from frame_fitter.ops.composition import CompositionPlan, plan_composition
from frame_fitter.ops.transform import (
    IDENTITY,
    MediaDimensions,
    MediaKind,
    TargetFrame,
    TransformModel,
    output_filename,
)

from .engine import VideoEngine, shared_engine
from .image_backend import compose_image
from .video_backend import EncodeOptions, encode_video

_logger = get_logger("orchestrator")

ProgressCallback = Callable[[str, float], None]  # frame label, 0.0 - 1.0
ImageBackend = Callable[[Path, CompositionPlan], bytes]
VideoBackend = Callable[..., bytes]


@dataclass(frozen=True)
class ExportJob:
    source: Path
    kind: MediaKind
    media: MediaDimensions
    frame: TargetFrame
    transform: TransformModel = IDENTITY
    background: Color = BLACK
    basename: str | None = None

    @property
    def filename(self) -> str:
        return output_filename(self.basename, self.frame, self.kind)


@dataclass
class ExportResult:
    frame: TargetFrame
    filename: str
    data: bytes | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.data)

    def save(self, directory: str | Path) -> Path:
        if not self.ok or self.data is None:
            raise EncodeError(f"nothing to save for {self.frame.label}: {self.error}")
        out_dir = Path(directory)
        out_dir.mkdir(parents=True, exist_ok=True)
        path = out_dir / self.filename
        path.write_bytes(self.data)
        _logger.info("export saved: %s", path)
        return path


class ExportOrchestrator:
    def __init__(
        self,
        engine: VideoEngine | None = None,
        options: EncodeOptions | None = None,
        image_workers: int = 4,
        image_backend: ImageBackend = compose_image,
        video_backend: VideoBackend = encode_video,
    ) -> None:
        self._engine = engine
        self._options = options or EncodeOptions()
        self._image_backend = image_backend
        self._video_backend = video_backend
        self._video_pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="export-video")
        self._image_pool = ThreadPoolExecutor(max_workers=max(1, int(image_workers)), thread_name_prefix="export-image")
        _logger.debug("Orchestrator init: image_workers=%s options=%s", image_workers, self._options)

    @classmethod
    def from_settings(cls, settings) -> ExportOrchestrator:  # noqa: ANN001
        return cls(
            engine=VideoEngine.from_settings(settings),
            options=EncodeOptions.from_settings(settings),
            image_workers=settings.image_workers,
        )

    @property
    def engine(self) -> VideoEngine:
        if self._engine is None:
            self._engine = shared_engine()
        return self._engine

    def plan_for(self, job: ExportJob) -> CompositionPlan:
        return plan_composition(job.media, job.frame, job.transform, job.background)

    def export(self, job: ExportJob, progress: ProgressCallback | None = None) -> Future:
        """Schedule one target. The future always resolves to an ExportResult."""
        plan = self.plan_for(job)
        _logger.info("export queued: %s -> %s (%s)", job.source, job.filename, job.kind.value)
        if job.kind is MediaKind.VIDEO:
            return self._video_pool.submit(self._run, job, plan, progress)
        return self._image_pool.submit(self._run, job, plan, progress)

    def export_all(self, jobs: list[ExportJob], progress: ProgressCallback | None = None) -> list[ExportResult]:
        """Run targets one after another; a failed target does not stop the batch."""
        results: list[ExportResult] = []
        for job in jobs:
            try:
                fut = self.export(job, progress)
            except Exception as e:
                _logger.error("export setup failed for %s: %s", job.frame.label, e, exc_info=True)
                results.append(self.failed_result(job, e))
                continue
            results.append(fut.result())
        ok = sum(1 for r in results if r.ok)
        _logger.info("export batch finished: %d/%d succeeded", ok, len(results))
        return results

    def _relay(self, job: ExportJob, progress: ProgressCallback | None) -> Callable[[float], None]:
        label = job.frame.label

        def _report(fraction: float) -> None:
            if progress is None:
                return
            try:
                progress(label, max(0.0, min(1.0, float(fraction))))
            except Exception:
                _logger.debug("progress callback failed for %s", label, exc_info=True)

        return _report

    def failed_result(self, job: ExportJob, exc: BaseException) -> ExportResult:
        """Result recorded for a target whose export raised `exc`."""
        return ExportResult(frame=job.frame, filename=job.filename, error=f"Processing failed for {job.frame.label}: {exc}")

    def _run(self, job: ExportJob, plan: CompositionPlan, progress: ProgressCallback | None) -> ExportResult:
        report = self._relay(job, progress)
        report(0.0)
        try:
            if job.kind is MediaKind.VIDEO:
                data = self._video_backend(self.engine, job.source, plan, self._options, progress=report)
            else:
                data = self._image_backend(job.source, plan)
                # Raster output is not incrementally measurable
                report(1.0)
        except Exception as e:
            diagnostics = getattr(e, "diagnostics", "")
            _logger.error("export failed for %s: %s", job.frame.label, e, exc_info=True)
            if diagnostics:
                _logger.debug("backend diagnostics for %s:\n%s", job.frame.label, diagnostics)
            return self.failed_result(job, e)

        if not data:
            return self.failed_result(job, EncodeError("empty output"))
        _logger.info("export done: %s (%d bytes)", job.filename, len(data))
        return ExportResult(frame=job.frame, filename=job.filename, data=data)

    def shutdown(self, wait: bool = True) -> None:
        self._video_pool.shutdown(wait=wait, cancel_futures=not wait)
        self._image_pool.shutdown(wait=wait, cancel_futures=not wait)

    def __enter__(self) -> ExportOrchestrator:
        return self

    def __exit__(self, *exc_info) -> None:  # noqa: ANN002
        self.shutdown()
