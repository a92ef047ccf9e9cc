from __future__ import annotations

import json
from pathlib import Path

from frame_fitter.color import BLACK, Color
from frame_fitter.settings_manager import SettingsManager


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    sm = SettingsManager(str(tmp_path / "settings.json"))
    assert sm.data == {}
    assert sm.get("ffmpeg_path") == "ffmpeg"
    assert sm.get("video_preset") == "ultrafast"
    assert sm.image_workers == 4
    assert sm.determine_background() == BLACK


def test_set_persists_to_disk(tmp_path: Path) -> None:
    settings_path = tmp_path / "nested" / "settings.json"
    sm = SettingsManager(str(settings_path))
    sm.set("background_color", "#3B82F6")

    assert json.loads(settings_path.read_text(encoding="utf-8")) == {"background_color": "#3B82F6"}
    assert SettingsManager(str(settings_path)).determine_background() == Color(0x3B, 0x82, 0xF6)


def test_corrupt_file_falls_back_to_defaults(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text("{ not json", encoding="utf-8")
    sm = SettingsManager(str(settings_path))
    assert sm.data == {}
    assert sm.get("audio_mode") == "copy"


def test_invalid_values_fall_back(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(json.dumps({"background_color": "teal-ish", "image_workers": "many"}), encoding="utf-8")
    sm = SettingsManager(str(settings_path))
    assert sm.determine_background() == BLACK
    assert sm.image_workers == 4
    assert sm.has("image_workers")
    assert not sm.has("ffmpeg_path")


def test_image_workers_at_least_one(tmp_path: Path) -> None:
    sm = SettingsManager(str(tmp_path / "settings.json"))
    sm.set("image_workers", 0)
    assert sm.image_workers == 1
