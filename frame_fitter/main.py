import argparse
import os
import sys
from pathlib import Path

from frame_fitter.app.session import EditSession
from frame_fitter.color import Color
from frame_fitter.errors import FrameFitterError
from frame_fitter.export.orchestrator import ExportOrchestrator
from frame_fitter.logger import get_logger
from frame_fitter.ops.transform import TARGET_FRAMES, TransformModel, find_frame
from frame_fitter.settings_manager import SettingsManager

_DEFAULT_SETTINGS = Path.home() / ".frame_fitter" / "settings.json"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NOT_READY = 2


def _parse_transform(value: str) -> tuple[str, TransformModel]:
    """Parse `SUFFIX=SCALE,X,Y` (e.g. `square=1.2,0.1,0`)."""
    name, sep, rest = value.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected NAME=SCALE,X,Y, got {value!r}")
    try:
        frame = find_frame(name)
    except KeyError:
        raise argparse.ArgumentTypeError(f"unknown frame: {name!r}") from None
    parts = [p.strip() for p in rest.split(",")]
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected three numbers after '=', got {rest!r}")
    try:
        return frame.label, TransformModel.from_dict(dict(zip(("scale", "x", "y"), parts)))
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _parse_color(value: str) -> Color:
    try:
        return Color.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    frames = ", ".join(f.suffix for f in TARGET_FRAMES)
    parser = argparse.ArgumentParser(
        prog="frame-fitter",
        description="Fit a photo or video into fixed-aspect output frames.",
    )
    parser.add_argument("source", help="Image or video file")
    parser.add_argument("--out", help="Output directory (default: settings output_dir)")
    parser.add_argument("--name", help="Output basename (default: source file stem)")
    parser.add_argument("--background", type=_parse_color, help="Background color, e.g. #000000")
    parser.add_argument(
        "--frame",
        action="append",
        dest="frames",
        metavar="NAME",
        help=f"Export only this frame (repeatable; one of: {frames})",
    )
    parser.add_argument(
        "--transform",
        action="append",
        type=_parse_transform,
        default=[],
        metavar="NAME=SCALE,X,Y",
        help="Per-frame scale and pan, e.g. square=1.2,0.1,0",
    )
    parser.add_argument("--settings", default=str(_DEFAULT_SETTINGS), help="Settings JSON path")
    parser.add_argument("--log-level", help="Set log level")
    parser.add_argument("--log-cats", help="Set log categories")
    return parser


def run(argv: list[str] | None = None) -> int:
    """Command line entrypoint."""
    args = build_parser().parse_args(argv)

    # Reflect logging options in env so every get_logger() call picks them up.
    if args.log_level:
        os.environ["FRAME_FITTER_LOG_LEVEL"] = args.log_level
    if args.log_cats:
        os.environ["FRAME_FITTER_LOG_CATS"] = args.log_cats
    logger = get_logger("main")

    settings = SettingsManager(args.settings)
    background = args.background or settings.determine_background()
    out_dir = Path(args.out or settings.get("output_dir"))

    try:
        labels = [find_frame(name).label for name in args.frames] if args.frames else None
    except KeyError as e:
        print(f"unknown frame: {e.args[0]}", file=sys.stderr)
        return EXIT_NOT_READY

    with ExportOrchestrator.from_settings(settings) as orchestrator:
        session = EditSession(orchestrator=orchestrator, background=background)
        try:
            session.select_file(args.source)
        except FrameFitterError as e:
            logger.error("cannot open %s: %s", args.source, e)
            print(f"error: {e}", file=sys.stderr)
            return EXIT_NOT_READY

        if args.name:
            session.basename = args.name
        for label, transform in args.transform:
            session.set_transform(label, transform)

        jobs = [session.job_for(label) for label in labels] if labels else session.jobs()

        def _progress(label: str, fraction: float) -> None:
            logger.debug("%s: %.0f%%", label, fraction * 100)

        failed = 0
        for res in orchestrator.export_all(jobs, _progress):
            if res.ok:
                try:
                    path = res.save(out_dir)
                except OSError as e:
                    logger.error("could not write %s: %s", res.filename, e)
                    failed += 1
                    print(f"[X] {res.frame.label}: {e}")
                    continue
                print(f"[OK] {res.frame.label} -> {path}")
            else:
                failed += 1
                print(f"[X] {res.frame.label}: {res.error}")

    return EXIT_FAILED if failed else EXIT_OK


if __name__ == "__main__":
    sys.exit(run())
