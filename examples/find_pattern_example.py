#!/usr/bin/env python3
"""Pattern search example — count pixel-art crewmates on a synthetic canvas.

Paints a few copies of a small template onto a noisy canvas, including one
copy that is glued to an extra pixel (and so must not be reported), then
scans for exact occurrences. Optionally writes the canvas to a PNG so it
can be re-scanned with the ``pixelscan`` command-line tool.

Requirements: numpy (Pillow only for --save)
"""

import argparse
import time

import numpy as np

from pixelscan import ImageScanner, Pattern, ScanConfig

TEMPLATE = (
    ".###",
    "##..",
    "####",
    ".#.#",
)


def parse_args():
    parser = argparse.ArgumentParser(
        description="pixelscan — exact-silhouette template search demo")
    parser.add_argument("--width", type=int, default=640,
                        help="Canvas width (default: 640)")
    parser.add_argument("--height", type=int, default=480,
                        help="Canvas height (default: 480)")
    parser.add_argument("--copies", type=int, default=25,
                        help="Number of clean copies to paint (default: 25)")
    parser.add_argument("--seed", type=int, default=0,
                        help="Random seed (default: 0)")
    parser.add_argument("--workers", type=int, default=None,
                        help="Scan threads (default: CPU count)")
    parser.add_argument("--save", type=str, default=None,
                        help="Write the canvas to this PNG path")
    return parser.parse_args()


def make_template():
    """RGBA template: black shape on white."""
    img = np.full((len(TEMPLATE), len(TEMPLATE[0]), 4), 255, dtype=np.uint8)
    for y, row in enumerate(TEMPLATE):
        for x, ch in enumerate(row):
            if ch == "#":
                img[y, x, :3] = 0
    return img


def make_canvas(width, height, pattern, copies, rng):
    """Pastel noise background with ``copies`` clean shapes plus one decoy.

    Copies sit on a coarse grid so they never touch each other.
    """
    canvas = np.empty((height, width, 4), dtype=np.uint8)
    canvas[..., :3] = rng.integers(128, 256, size=(height, width, 3))
    canvas[..., 3] = 255

    cells = [(x, y) for y in range(2, height - 8, 10) for x in range(2, width - 8, 10)]
    picks = rng.choice(len(cells), size=copies + 1, replace=False)
    colors = rng.integers(0, 100, size=(copies + 1, 3))

    placed = []
    for n, idx in enumerate(picks):
        ox, oy = cells[idx]
        for c in pattern:
            canvas[oy + c.y, ox + c.x, :3] = colors[n]
        placed.append((ox, oy))

    # Decoy: last copy grows one extra pixel and must not match.
    ox, oy = placed.pop()
    canvas[oy + 1, ox + 2, :3] = colors[-1]
    return canvas, placed


def main():
    args = parse_args()
    rng = np.random.default_rng(args.seed)

    scanner = ImageScanner(ScanConfig(marker_color=(0, 0, 0), extraction_tolerance=0,
                                      search_tolerance=0, workers=args.workers))
    pattern = scanner.create_pattern(make_template())
    w, h = pattern.window_size()
    print(f"Template: {len(pattern)} pixels, window {w}x{h}, "
          f"{len(pattern.adjacent_coordinates())} ring pixels")

    canvas, placed = make_canvas(args.width, args.height, pattern, args.copies, rng)

    t0 = time.perf_counter()
    matches = scanner.scan_image_for_patterns(pattern, canvas)
    elapsed_ms = (time.perf_counter() - t0) * 1000

    found = {(m.origin.x, m.origin.y) for m in matches}
    print(f"Painted {len(placed)} copies + 1 decoy, found {len(matches)} "
          f"in {elapsed_ms:.1f} ms")
    print(f"All painted copies found: {found == set(placed)}")

    if args.save:
        from PIL import Image
        Image.fromarray(canvas).save(args.save)
        print(f"Canvas written to {args.save}")


if __name__ == "__main__":
    main()
