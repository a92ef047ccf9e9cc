"""Exception types shared by the geometry core and the export pipeline."""

from __future__ import annotations


class FrameFitterError(Exception):
    """Base class for all project errors."""


class NotReadyError(FrameFitterError):
    """A precondition is missing (media not probed, container not measured)."""


class InvalidColorError(FrameFitterError, ValueError):
    """A color string could not be parsed."""


class ProbeError(FrameFitterError):
    """The source media is unreadable or corrupt."""


class EngineUnavailableError(FrameFitterError):
    """The video engine (ffmpeg) could not be initialized."""


class EncodeError(FrameFitterError):
    """An encode backend failed or produced no usable output."""

    def __init__(self, message: str, diagnostics: str = "") -> None:
        super().__init__(message)
        self.diagnostics = diagnostics
