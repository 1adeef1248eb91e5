"""Command line entry point.

Usage:
    longshot stitch captures/manifest.yaml -o page.png
    longshot plan --scroll-height 5200 --viewport-height 900

Commands:
    - stitch : stitch the captures listed in a manifest into one PNG
    - plan   : print the scroll offsets a capture run should visit
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from longshot.capture.manifest import load_manifest
from longshot.capture.planner import plan_captures
from longshot.config import load_config
from longshot.errors import StitchError
from longshot.pipeline.controller import StitchController

LOGGER = logging.getLogger(__name__)
LOG_LEVELS = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def _configure_logging(level: str) -> None:
    numeric = LOG_LEVELS.get(level.lower())
    if numeric is None:
        raise ValueError(f"Unknown log level '{level}'. Choose from {list(LOG_LEVELS)}")

    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=numeric, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    logging.getLogger().setLevel(numeric)
    LOGGER.debug("Logging configured at %s", level.upper())


def run_stitch(manifest_path: Path, output: Path, config_path: Path | None = None) -> Path:
    config = load_config(config_path)
    manifest = load_manifest(manifest_path)
    if manifest.overlap_height is None:
        manifest.overlap_height = config.overlap_height

    controller = StitchController(config=config)
    png = manifest.run(controller)

    output.parent.mkdir(parents=True, exist_ok=True)
    if not controller.save(png, output):
        raise OSError(f"Failed to write output image to {output}")
    return output


def run_plan(
    scroll_height: float,
    viewport_height: float,
    overlap: float | None = None,
    max_captures: int | None = None,
    config_path: Path | None = None,
) -> None:
    config = load_config(config_path)
    if overlap is None:
        overlap = config.overlap_height
    if max_captures is None:
        max_captures = config.max_captures

    slots = plan_captures(scroll_height, viewport_height, overlap, max_captures)
    for slot in slots:
        marker = " (last)" if slot.is_last else ""
        print(f"{slot.index + 1:3d}  scroll_y={slot.scroll_y}{marker}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="longshot", description="Stitch scrolled screenshots into one image")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS.keys(),
        default="info",
        help="Logging verbosity",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    stitch = sub.add_parser("stitch", help="Stitch the captures listed in a manifest")
    stitch.add_argument("manifest", type=Path, help="YAML or JSON capture manifest")
    stitch.add_argument("-o", "--output", type=Path, default=Path("stitched.png"), help="Output PNG path")
    stitch.add_argument("--config", type=Path, default=None, help="YAML file overriding stitch settings")

    plan = sub.add_parser("plan", help="Print the scroll offsets for a capture run")
    plan.add_argument("--scroll-height", type=float, required=True)
    plan.add_argument("--viewport-height", type=float, required=True)
    plan.add_argument("--overlap", type=float, default=None, help="Overlap band, defaults to the config value")
    plan.add_argument("--max-captures", type=int, default=None, help="Capture cap, defaults to the config value")
    plan.add_argument("--config", type=Path, default=None, help="YAML file overriding stitch settings")

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)

    try:
        if args.command == "stitch":
            out_path = run_stitch(args.manifest, args.output, args.config)
            print(f"Saved stitched output to {out_path}")
        else:
            run_plan(args.scroll_height, args.viewport_height, args.overlap, args.max_captures, args.config)
    except (StitchError, ValueError, OSError) as exc:
        LOGGER.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
