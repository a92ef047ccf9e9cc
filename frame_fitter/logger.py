import logging
import os
import sys

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


class _CategoryFilter(logging.Filter):
    """Pass records whose logger suffix (`frame_fitter.<cat>`) is allowed."""

    def __init__(self, allowed: set[str]) -> None:
        super().__init__()
        self.allowed = allowed

    def filter(self, record: logging.LogRecord) -> bool:
        return (record.name or "").rsplit(".", 1)[-1] in self.allowed


def setup_logger(level: int = logging.INFO, name: str = "frame_fitter") -> logging.Logger:
    """Configure the `frame_fitter` logger and return it.

    FRAME_FITTER_LOG_LEVEL and FRAME_FITTER_LOG_CATS are read on every call,
    so the CLI can set them after modules have already created loggers.
    Categories are child logger names, e.g. `planner,video,engine`.
    """
    logger = logging.getLogger(name)

    env_level = (os.getenv("FRAME_FITTER_LOG_LEVEL") or "").strip().lower()
    logger.setLevel(_LEVELS.get(env_level, level))

    handler: logging.StreamHandler | None = None
    for h in logger.handlers:
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr:
            handler = h
    if handler is None:
        handler = logging.StreamHandler(stream=sys.stderr)
        logger.addHandler(handler)

    handler.setFormatter(logging.Formatter(fmt="[%(asctime)s] %(levelname)s: %(message)s", datefmt="%H:%M:%S"))

    handler.filters.clear()
    cats = (os.getenv("FRAME_FITTER_LOG_CATS") or "").strip()
    if cats:
        handler.addFilter(_CategoryFilter({c.strip() for c in cats.split(",") if c.strip()}))

    # Exports print their own summary; keep library logs out of the root logger.
    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = setup_logger()
    return base if not name else base.getChild(name)
