from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future
from pathlib import Path

from frame_fitter.color import BLACK, Color
from frame_fitter.errors import NotReadyError
from frame_fitter.export.orchestrator import ExportJob, ExportOrchestrator, ExportResult, ProgressCallback
from frame_fitter.export.probe import probe_media
from frame_fitter.logger import get_logger
from frame_fitter.ops.gesture_controller import GestureController
from frame_fitter.ops.transform import (
    IDENTITY,
    TARGET_FRAMES,
    MediaDimensions,
    MediaKind,
    TargetFrame,
    TransformModel,
    media_kind_for,
)

_logger = get_logger("session")

Prober = Callable[[Path, MediaKind], MediaDimensions]


def _default_prober(path: Path, kind: MediaKind) -> MediaDimensions:
    return probe_media(path, kind)


class EditSession:
    """One source file and its per-frame transforms.

    Each target frame gets its own GestureController, which owns that frame's
    committed TransformModel. Selecting a new file cancels drags and resets
    every frame to identity.
    """

    def __init__(
        self,
        orchestrator: ExportOrchestrator | None = None,
        frames: tuple[TargetFrame, ...] = TARGET_FRAMES,
        background: Color | str = BLACK,
        prober: Prober = _default_prober,
    ) -> None:
        self._orchestrator = orchestrator
        self._frames = tuple(frames)
        self._background = Color.parse(background)
        self._prober = prober
        self._controllers = {f.label: GestureController() for f in self._frames}
        self._source: Path | None = None
        self._kind: MediaKind | None = None
        self._media: MediaDimensions | None = None
        self._basename = ""

    # ---- file ----
    @property
    def source(self) -> Path | None:
        return self._source

    @property
    def kind(self) -> MediaKind | None:
        return self._kind

    @property
    def media(self) -> MediaDimensions | None:
        return self._media

    @property
    def has_file(self) -> bool:
        return self._source is not None and self._media is not None

    def select_file(self, path: str | Path) -> MediaDimensions:
        """Probe `path` and make it the current source. Raises ProbeError."""
        p = Path(path)
        kind = media_kind_for(p)
        media = self._prober(p, kind)

        self._source, self._kind, self._media = p, kind, media
        self._basename = p.stem
        for ctl in self._controllers.values():
            ctl.load_media(media)
        _logger.info("file selected: %s (%s %sx%s)", p, kind.value, media.width, media.height)
        return media

    def clear(self) -> None:
        self._source = self._kind = self._media = None
        self._basename = ""
        for ctl in self._controllers.values():
            ctl.load_media(None)

    # ---- global options ----
    @property
    def background(self) -> Color:
        return self._background

    @background.setter
    def background(self, value: Color | str) -> None:
        self._background = Color.parse(value)

    @property
    def basename(self) -> str:
        return self._basename

    @basename.setter
    def basename(self, value: str) -> None:
        self._basename = str(value or "").strip()

    # ---- per-frame transforms ----
    @property
    def frames(self) -> tuple[TargetFrame, ...]:
        return self._frames

    def frame(self, label: str) -> TargetFrame:
        for f in self._frames:
            if f.label == label:
                return f
        raise KeyError(label)

    def controller(self, label: str) -> GestureController:
        return self._controllers[label]

    def transform_for(self, label: str) -> TransformModel:
        return self._controllers[label].transform

    def set_transform(self, label: str, transform: TransformModel) -> None:
        self._controllers[label].reset(transform)

    def reset_frame(self, label: str) -> None:
        self._controllers[label].reset(IDENTITY)

    # ---- export ----
    @property
    def orchestrator(self) -> ExportOrchestrator:
        if self._orchestrator is None:
            self._orchestrator = ExportOrchestrator()
        return self._orchestrator

    def job_for(self, label: str) -> ExportJob:
        if self._source is None or self._media is None or self._kind is None:
            raise NotReadyError("no media file selected")
        return ExportJob(
            source=self._source,
            kind=self._kind,
            media=self._media,
            frame=self.frame(label),
            transform=self.transform_for(label),
            background=self._background,
            basename=self._basename,
        )

    def jobs(self) -> list[ExportJob]:
        return [self.job_for(f.label) for f in self._frames]

    def export(self, label: str, progress: ProgressCallback | None = None) -> Future:
        return self.orchestrator.export(self.job_for(label), progress)

    def export_all(self, progress: ProgressCallback | None = None) -> list[ExportResult]:
        return self.orchestrator.export_all(self.jobs(), progress)
