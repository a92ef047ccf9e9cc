from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

pytest.importorskip("PySide6")

from frame_fitter.errors import EncodeError  # noqa: E402
from frame_fitter.export.export_worker import ExportAllWorker, ExportController  # noqa: E402
from frame_fitter.export.orchestrator import ExportJob, ExportOrchestrator  # noqa: E402
from frame_fitter.ops.transform import TARGET_FRAMES, MediaDimensions, MediaKind  # noqa: E402


def _jobs() -> list[ExportJob]:
    return [
        ExportJob(source=Path("a.png"), kind=MediaKind.IMAGE, media=MediaDimensions(800, 600), frame=f, basename="a")
        for f in TARGET_FRAMES
    ]


def test_controller_reports_results_and_completion(qtbot) -> None:
    def _image(src, plan):  # noqa: ANN001
        if plan.output_size == (1080, 1920):
            raise EncodeError("boom")
        return b"png"

    with ExportOrchestrator(image_backend=_image) as orch:
        ctl = ExportController(orch)
        results = []
        ctl.result.connect(results.append)
        with qtbot.waitSignal(ctl.completed, timeout=5000) as blocker:
            assert ctl.start(_jobs())
        qtbot.waitUntil(lambda: not ctl.is_running, timeout=2000)

    assert blocker.args == [2, 3]
    assert [r.filename for r in results] == ["a.square.png", "a.landscape.png", "a.portrait.png"]
    assert not results[2].ok


def test_worker_emits_progress_per_target(qtbot) -> None:
    with ExportOrchestrator(image_backend=lambda src, plan: b"png") as orch:
        worker = ExportAllWorker(orch, _jobs()[:1])
        events = []
        done = []
        worker.progress.connect(lambda label, f: events.append((label, f)))
        worker.completed.connect(lambda ok, total: done.append((ok, total)))
        worker.run()
        # progress comes from the image pool thread and is delivered queued
        qtbot.waitUntil(lambda: len(events) == 2 and bool(done), timeout=2000)

    assert events == [("Square (1:1)", 0.0), ("Square (1:1)", 1.0)]
    assert done == [(1, 1)]


def test_setup_failure_is_isolated_per_target(qtbot) -> None:
    orch = ExportOrchestrator(image_backend=lambda src, plan: b"png")
    # submitting to a shut down pool raises for every target
    orch.shutdown()
    worker = ExportAllWorker(orch, _jobs())
    results = []
    done = []
    errors = []
    worker.result.connect(results.append)
    worker.completed.connect(lambda ok, total: done.append((ok, total)))
    worker.error.connect(errors.append)

    worker.run()
    qtbot.waitUntil(lambda: bool(done), timeout=2000)

    assert done == [(0, 3)]
    assert errors == []
    assert [r.ok for r in results] == [False, False, False]
    assert results[1].error.startswith("Processing failed for Landscape (16:9):")


def test_cancel_returns_without_waiting_for_current_target(qtbot) -> None:
    started = threading.Event()
    release = threading.Event()

    def _image(src, plan):  # noqa: ANN001
        started.set()
        release.wait(timeout=5)
        return b"png"

    with ExportOrchestrator(image_backend=_image) as orch:
        ctl = ExportController(orch)
        results = []
        canceled = []
        ctl.result.connect(results.append)
        ctl.canceled.connect(lambda: canceled.append(True))
        assert ctl.start(_jobs())
        assert started.wait(timeout=5)

        t0 = time.monotonic()
        ctl.cancel()
        assert time.monotonic() - t0 < 0.5
        # the first target is still encoding
        assert ctl.is_running

        release.set()
        qtbot.waitUntil(lambda: bool(canceled) and not ctl.is_running, timeout=5000)

    assert len(results) == 1


def test_start_is_refused_while_running(qtbot) -> None:
    release = threading.Event()

    def _image(src, plan):  # noqa: ANN001
        release.wait(timeout=5)
        return b"png"

    with ExportOrchestrator(image_backend=_image) as orch:
        ctl = ExportController(orch)
        completed = []
        ctl.completed.connect(lambda ok, total: completed.append((ok, total)))
        assert ctl.start(_jobs()[:1])

        t0 = time.monotonic()
        assert ctl.start(_jobs()) is False
        assert time.monotonic() - t0 < 0.5

        release.set()
        qtbot.waitUntil(lambda: bool(completed) and not ctl.is_running, timeout=5000)
        assert ctl.wait(1000)

    assert completed == [(1, 1)]
