from __future__ import annotations

from pathlib import Path

import pytest

from frame_fitter import main


def _settings(tmp_path: Path) -> str:
    return str(tmp_path / "settings.json")


def test_missing_source_is_not_ready(tmp_path: Path, capsys) -> None:
    code = main.run([str(tmp_path / "nope.png"), "--out", str(tmp_path), "--settings", _settings(tmp_path)])
    assert code == main.EXIT_NOT_READY
    assert "file not found" in capsys.readouterr().err


def test_bad_transform_is_a_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main.run(["x.png", "--transform", "square=1.0,oops,0", "--settings", _settings(tmp_path)])
    assert excinfo.value.code == 2


def test_unknown_frame_in_transform(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        main.run(["x.png", "--transform", "panorama=1,0,0", "--settings", _settings(tmp_path)])


def test_bad_background_is_a_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        main.run(["x.png", "--background", "#12345", "--settings", _settings(tmp_path)])


def test_unknown_frame_filter(tmp_path: Path, make_image) -> None:
    src = make_image("photo.png", (64, 32))
    code = main.run([str(src), "--frame", "panorama", "--settings", _settings(tmp_path)])
    assert code == main.EXIT_NOT_READY


def test_parse_transform_accepts_label_or_suffix() -> None:
    label, t = main._parse_transform("Portrait (9:16)=1.5, -0.2, 0.1")
    assert label == "Portrait (9:16)"
    assert (t.scale, t.x, t.y) == (1.5, -0.2, 0.1)
    assert main._parse_transform("square=2,0,0")[0] == "Square (1:1)"


def test_exports_every_frame(tmp_path: Path, make_image, capsys) -> None:
    pytest.importorskip("pyvips")
    Image = pytest.importorskip("PIL.Image")
    src = make_image("photo.png", (320, 180))
    out = tmp_path / "out"

    code = main.run(
        [
            str(src),
            "--out",
            str(out),
            "--background",
            "#ffffff",
            "--transform",
            "square=1.2,0.1,0",
            "--settings",
            _settings(tmp_path),
        ]
    )

    assert code == main.EXIT_OK
    names = sorted(p.name for p in out.iterdir())
    assert names == ["photo.landscape.png", "photo.portrait.png", "photo.square.png"]
    with Image.open(out / "photo.portrait.png") as im:
        assert im.size == (1080, 1920)
    printed = capsys.readouterr().out
    assert printed.count("[OK]") == 3
    # plain ASCII so legacy console encodings can print it
    assert printed.replace(str(out), "").isascii()


def test_single_frame_with_custom_name(tmp_path: Path, make_image) -> None:
    pytest.importorskip("pyvips")
    src = make_image("photo.png", (320, 180))
    out = tmp_path / "out"

    code = main.run([str(src), "--out", str(out), "--name", "promo", "--frame", "square", "--settings", _settings(tmp_path)])

    assert code == main.EXIT_OK
    assert [p.name for p in out.iterdir()] == ["promo.square.png"]


def test_output_dir_comes_from_settings(tmp_path: Path, make_image) -> None:
    pytest.importorskip("pyvips")
    from frame_fitter.settings_manager import SettingsManager

    src = make_image("photo.png", (40, 40))
    out = tmp_path / "from_settings"
    SettingsManager(_settings(tmp_path)).set("output_dir", str(out))

    assert main.run([str(src), "--frame", "landscape", "--settings", _settings(tmp_path)]) == main.EXIT_OK
    assert (out / "photo.landscape.png").is_file()


def test_non_finite_transform_is_a_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        main.run(["x.png", "--transform", "square=1,nan,0", "--settings", _settings(tmp_path)])


def test_parse_transform_floors_scale() -> None:
    _, t = main._parse_transform("landscape=0,0.25,0")
    assert t.as_dict() == {"scale": 0.1, "x": 0.25, "y": 0.0}
