"""Pytest configuration.

The preview state and the export worker are Qt objects. Create a single
`QApplication` for the whole session as early as possible (before collection
imports Qt modules) and shut it down cleanly at the end.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest

# Run Qt headless unless a platform is chosen explicitly.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

_APP: Any | None = None


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a QApplication exists before collecting/running tests."""

    # Import lazily so non-Qt environments can still import this conftest.
    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    global _APP

    app = QApplication.instance()
    if app is None:
        # Keep a strong ref so it isn't GC'd mid-session.
        _APP = QApplication([])
    else:
        _APP = app


def pytest_sessionfinish(session, exitstatus) -> None:  # noqa: ARG001
    """Pump events once so queued cross-thread signals settle before exit."""

    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    app = QApplication.instance()
    if app is None:
        return

    app.quit()
    app.processEvents()


@pytest.fixture
def make_image(tmp_path: Path):
    """Write a solid-color test image with Pillow and return its path."""
    Image = pytest.importorskip("PIL.Image")

    def _make(name: str, size: tuple[int, int], color=(255, 0, 0), mode: str = "RGB") -> Path:
        path = tmp_path / name
        Image.new(mode, size, color=color).save(path)
        return path

    return _make
