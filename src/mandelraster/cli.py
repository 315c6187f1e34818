"""Command line entry point: ``mandelraster FILE PIXELS UPPERLEFT LOWERRIGHT``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import SCHEDULES, default_render_config, load_render_configs, parse_complex, parse_image_size
from .execution import run_configs, run_single_render

USAGE_EXAMPLE = "Example: mandelraster mandel.png 1000x750 -1.20,0.35 -1,0.20"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mandelraster",
        usage="%(prog)s [options] FILE PIXELS UPPERLEFT LOWERRIGHT\n       %(prog)s [options] --config FILE.yaml",
        description="Render the Mandelbrot set to a grayscale PNG.",
        epilog=USAGE_EXAMPLE,
    )
    parser.add_argument("--config", type=str, help="Path to a YAML file listing renders")
    parser.add_argument("--schedule", choices=SCHEDULES, default="serial", help="Render backend")
    parser.add_argument("--workers", type=int, default=4, help="Worker threads for static/dynamic")
    parser.add_argument("--chunk-size", type=int, default=16, help="Rows per work chunk")
    parser.add_argument("--report", type=str, help="Write per-chunk timings to this CSV file")
    parser.add_argument("--quiet", action="store_true", help="Only print errors")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    # Corner points such as -1.20,0.35 look like options to argparse, so the
    # positionals are collected from the leftovers.
    args, positionals = parser.parse_known_args(argv)
    unknown = [arg for arg in positionals if arg.startswith("--")]
    if unknown:
        parser.error(f"unrecognized arguments: {' '.join(unknown)}")
    verbose = not args.quiet

    if args.config:
        if positionals:
            sys.exit("ERROR: --config cannot be combined with positional arguments")
        config_path = Path(args.config)
        try:
            configs = load_render_configs(config_path)
        except (OSError, ValueError) as exc:
            sys.exit(f"ERROR: {exc}")
        return run_configs(configs, str(config_path), verbose=verbose)

    if len(positionals) != 4:
        parser.print_usage(sys.stderr)
        sys.exit(f"ERROR: FILE PIXELS UPPERLEFT LOWERRIGHT are required\n{USAGE_EXAMPLE}")
    file, pixels, upper_left_arg, lower_right_arg = positionals

    try:
        width, height = parse_image_size(pixels)
        upper_left = parse_complex(upper_left_arg)
        if upper_left is None:
            raise ValueError(f"error parsing upper left corner point {upper_left_arg!r}")
        lower_right = parse_complex(lower_right_arg)
        if lower_right is None:
            raise ValueError(f"error parsing lower right corner point {lower_right_arg!r}")
        config = default_render_config(
            output=file,
            width=width,
            height=height,
            upper_left=upper_left,
            lower_right=lower_right,
            workers=args.workers,
            chunk_size=args.chunk_size,
            schedule=args.schedule,
        ).validate()
    except ValueError as exc:
        sys.exit(f"ERROR: {exc}")

    try:
        run_single_render(config, args.report, verbose=verbose)
    except OSError as exc:
        sys.exit(f"ERROR: error writing png file: {exc}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
