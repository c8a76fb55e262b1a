#!/usr/bin/env python3
"""
Allocate standard spans and an inner band for one scaffold line.

Usage:
    python scripts/allocate_line.py --start 0 0 --end 3600 0
    python scripts/allocate_line.py --start 0 1200 --end 0 0 --width 355 --orientation left
    python scripts/allocate_line.py --start 0 0 --end 9300 0 --output line.json -v
"""
import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from scaffold_spans.allocation import allocate_line
from scaffold_spans.catalog import DEFAULT_BLOCK_WIDTH, SUPPORTED_BLOCK_WIDTHS
from scaffold_spans.contracts import (
    LINE_COLORS,
    AllocationFailure,
    BandOrientation,
    BandSettings,
    ScaffoldLine,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Split a scaffold line into standard spans and build its inner band."
    )
    parser.add_argument(
        "--start", type=float, nargs=2, required=True, metavar=("X", "Y"),
        help="Start point in mm",
    )
    parser.add_argument(
        "--end", type=float, nargs=2, required=True, metavar=("X", "Y"),
        help="End point in mm",
    )
    parser.add_argument("--line-id", default="line-1", help="Line id (default: line-1)")
    parser.add_argument(
        "--width", type=int, default=DEFAULT_BLOCK_WIDTH,
        choices=SUPPORTED_BLOCK_WIDTHS,
        help=f"Block width in mm (default: {DEFAULT_BLOCK_WIDTH})",
    )
    parser.add_argument(
        "--orientation", default=None,
        choices=[o.value for o in BandOrientation],
        help="Named band side (overrides --polarity)",
    )
    parser.add_argument(
        "--polarity", type=int, default=None, choices=[1, -1],
        help="Band side relative to the inward normal",
    )
    parser.add_argument(
        "--color", default="black", choices=list(LINE_COLORS),
        help="Line color carried onto markers",
    )
    parser.add_argument("--output", default=None, help="Write the result as JSON to this path")
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )
    return parser


def main() -> int:
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = None
    if args.orientation is not None or args.polarity is not None:
        settings = BandSettings(
            polarity=args.polarity,
            orientation=BandOrientation(args.orientation) if args.orientation else None,
        )

    line = ScaffoldLine(
        id=args.line_id,
        start=(args.start[0], args.start[1]),
        end=(args.end[0], args.end[1]),
        block_width=args.width,
        color=args.color,
        band_settings=settings,
    )
    result = allocate_line(line)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2)
        print(f"Result saved to {output_path}")

    if isinstance(result, AllocationFailure):
        print(f"Allocation failed: {result.reason.value} ({result.message})")
        return 1

    print(f"Measured length: {result.measured_length:.3f} mm")
    print(f"Spans: {result.summary}")
    print(f"Checksum: {result.checksum}")
    geometry = result.geometry
    side = geometry.orientation.value if geometry.orientation else "standard"
    print(f"Band: offset={geometry.offset_vector} polarity={geometry.polarity:+d} side={side}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
