from __future__ import annotations

import json
import os
from typing import Any

from .color import BLACK, Color
from .errors import InvalidColorError
from .logger import get_logger

_logger = get_logger("settings")


class SettingsManager:
    def __init__(self, settings_path: str):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "background_color": "#000000",
        "ffmpeg_path": "ffmpeg",
        "ffprobe_path": "ffprobe",
        "video_codec": "libx264",
        "video_preset": "ultrafast",
        "video_threads": 0,
        "audio_mode": "copy",
        "image_workers": 4,
        "output_dir": ".",
    }

    def load(self) -> None:
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
        except Exception as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        try:
            parent = os.path.dirname(self.settings_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except Exception as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def has(self, key: str) -> bool:
        return key in self._settings

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    @property
    def image_workers(self) -> int:
        try:
            return max(1, int(self.get("image_workers")))
        except (TypeError, ValueError):
            _logger.warning("invalid image_workers: %r", self.get("image_workers"))
            return int(self.DEFAULTS["image_workers"])

    def determine_background(self) -> Color:
        hexcol = self.get("background_color")
        try:
            return Color.parse(hexcol)
        except InvalidColorError as e:
            _logger.warning("saved background_color invalid: %s", e)
        return BLACK
