"""Fit photos and videos into fixed-aspect output frames."""

__version__ = "0.1.0"
