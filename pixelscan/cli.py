"""Command-line entry point: count exact occurrences of a template in an image.

Usage:
    pixelscan crewmate.png canvas.png --color "#000000" --extract-tolerance 1
    python -m pixelscan.cli template.png target.png --show-matches -v
"""

import argparse
import sys
import time
from dataclasses import replace

from .color import parse_color
from .image_io import load_image
from .scanner import ImageScanner, ScanConfig


def _color_arg(text):
    try:
        return parse_color(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixelscan",
        description="Find exact occurrences of a pixel-art template in an image")
    parser.add_argument("template", help="Tightly cropped template image")
    parser.add_argument("target", help="Image to search")
    parser.add_argument("--color", type=_color_arg, default=None,
                        help="Marker color as #RRGGBB[AA] or R,G,B[,A] (default: 0,0,0,0)")
    parser.add_argument("--extract-tolerance", type=int, default=None,
                        help="Per-channel tolerance when extracting the template (default: 1)")
    parser.add_argument("--search-tolerance", type=int, default=None,
                        help="Per-channel tolerance when scanning (default: 0)")
    parser.add_argument("--workers", type=int, default=None,
                        help="Scan threads (default: CPU count)")
    parser.add_argument("--config", type=str, default=None,
                        help="JSON file with ScanConfig fields; flags override it")
    parser.add_argument("--show-matches", action="store_true",
                        help="Print the top-left corner of every match")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Print scan diagnostics to stderr")
    return parser


def _resolve_config(args) -> ScanConfig:
    config = ScanConfig.from_json(args.config) if args.config else ScanConfig()
    overrides = {}
    if args.color is not None:
        overrides["marker_color"] = args.color
    if args.extract_tolerance is not None:
        overrides["extraction_tolerance"] = args.extract_tolerance
    if args.search_tolerance is not None:
        overrides["search_tolerance"] = args.search_tolerance
    if args.workers is not None:
        overrides["workers"] = args.workers
    return replace(config, **overrides)


def main(argv=None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    t0 = time.perf_counter()
    try:
        config = _resolve_config(args)
    except (OSError, ValueError) as e:
        parser.error(str(e))

    try:
        template = load_image(args.template)
        target = load_image(args.target)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    scanner = ImageScanner(config, verbose=args.verbose)
    pattern = scanner.create_pattern(template)
    matches = scanner.scan_image_for_patterns(pattern, target)

    print(len(matches))
    if args.show_matches:
        for match in matches:
            origin = match.origin
            print(f"{origin.x},{origin.y}")
    print(f"Elapsed time: {time.perf_counter() - t0:.2f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
