"""Background "export all" for Qt hosts.

ExportAllWorker exports a list of jobs on a QThread so the UI stays
responsive; ExportController owns at most one worker and relays its signals.
"""

from __future__ import annotations

from PySide6.QtCore import QObject, QThread, Signal

from frame_fitter.logger import get_logger

from .orchestrator import ExportJob, ExportOrchestrator, ExportResult

_logger = get_logger("export_worker")


class ExportAllWorker(QThread):
    """Worker thread exporting jobs one after another.

    `progress` is emitted from the orchestrator's pool threads, so receivers
    living on the UI thread get it through a queued connection.
    """

    progress = Signal(str, float)  # frame label, fraction
    result = Signal(object)  # ExportResult
    completed = Signal(int, int)  # ok_count, total_count
    canceled = Signal()
    error = Signal(str)

    def __init__(self, orchestrator: ExportOrchestrator, jobs: list[ExportJob]):
        super().__init__()
        self.orchestrator = orchestrator
        self.jobs = list(jobs)
        self._cancel_requested = False

    def _export_one(self, job: ExportJob) -> ExportResult:
        try:
            return self.orchestrator.export(job, self.progress.emit).result()
        except Exception as ex:
            _logger.error("export setup failed for %s: %s", job.frame.label, ex, exc_info=True)
            return self.orchestrator.failed_result(job, ex)

    def run(self) -> None:
        total = len(self.jobs)
        ok = 0
        try:
            for job in self.jobs:
                # A running encode is never interrupted; cancel applies between targets.
                if self._cancel_requested:
                    self.canceled.emit()
                    return
                res = self._export_one(job)
                if res.ok:
                    ok += 1
                self.result.emit(res)
        except Exception as ex:
            _logger.error("export worker failed: %s", ex, exc_info=True)
            self.error.emit(f"Export failed: {ex}")
            return
        self.completed.emit(ok, total)

    def cancel(self) -> None:
        self._cancel_requested = True


class ExportController(QObject):
    """Controller for managing background exports."""

    progress = Signal(str, float)
    result = Signal(object)
    completed = Signal(int, int)
    canceled = Signal()
    error = Signal(str)

    def __init__(self, orchestrator: ExportOrchestrator):
        super().__init__()
        self._orchestrator = orchestrator
        self._worker: ExportAllWorker | None = None

    @property
    def is_running(self) -> bool:
        return self._worker is not None and self._worker.isRunning()

    def start(self, jobs: list[ExportJob]) -> bool:
        """Start exporting `jobs` in the background.

        Returns False, without starting anything, while a previous batch is
        still running.
        """
        if self.is_running:
            _logger.warning("export already running; %d jobs not started", len(jobs))
            return False

        worker = ExportAllWorker(self._orchestrator, jobs)
        worker.progress.connect(self.progress.emit)
        worker.result.connect(self.result.emit)
        worker.completed.connect(self.completed.emit)
        worker.canceled.connect(self.canceled.emit)
        worker.error.connect(self.error.emit)
        worker.finished.connect(self._on_worker_finished)

        self._worker = worker
        _logger.debug("export worker started: %d jobs", len(jobs))
        worker.start()
        return True

    def cancel(self) -> None:
        """Ask the worker to stop after the current target. Does not block."""
        if self._worker is not None and self._worker.isRunning():
            self._worker.cancel()

    def wait(self, msecs: int = 1000) -> bool:
        """Block up to `msecs` for the current worker; True once it has stopped."""
        worker = self._worker
        if worker is None:
            return True
        return bool(worker.wait(msecs))

    def _on_worker_finished(self) -> None:
        worker = self.sender()
        if worker is None or worker is not self._worker:
            return
        self._worker = None
        worker.wait()
