"""Scan engine — exact-silhouette sliding-window search.

Finds every anchor (top-left offset) in a target image where a Pattern's
shape is reproduced exactly:

    1. The pixel under the pattern's first coordinate sets the reference
       color for that anchor, so a shape rendered in any single uniform
       color is recognised.
    2. Every pattern pixel must be within the search tolerance of that
       reference color.
    3. No pixel on the pattern's exclusion ring may be within tolerance of
       the reference color; ring pixels outside the image are ignored.

The anchor grid is cut into bands of rows. Each band is evaluated with
vectorised numpy comparisons over all of its anchors at once, and bands
run concurrently on a thread pool (numpy releases the GIL for the heavy
element-wise work). Inputs are shared read-only; each band returns its
own list and the lists are concatenated in submission order, so results
come out row-major and are identical for any worker count.

``find_pattern_at`` runs the same decision for a single anchor, reading
pixels one at a time through a bordered window view.

Usage:
    scanner = ImageScanner(ScanConfig(marker_color=(0, 0, 0), search_tolerance=0))
    pattern = scanner.create_pattern(template)
    matches = scanner.scan_image_for_patterns(pattern, target)
"""

import json
import math
import os
import sys
import time
import warnings
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, fields
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ._constants import (
    COMPARED_CHANNELS,
    DEFAULT_EXTRACTION_TOLERANCE,
    DEFAULT_MARKER_COLOR,
    DEFAULT_SEARCH_TOLERANCE,
)
from .color import equal_with_tolerance, validate_color, validate_tolerance
from .image_utils import as_image_array, get_pixel_safe, view_with_border
from .pattern import Pattern

__all__ = ["scan_image", "find_pattern_at", "ScanConfig", "ImageScanner"]

# Bands per worker; more bands than workers keeps the pool busy when some
# bands reject early.
_BANDS_PER_WORKER = 4


def _anchor_range(shift: int, delta: int, view_extent: int, count: int) -> Tuple[int, int]:
    """Anchor indices ``[lo, hi)`` whose probe ``index + shift + delta`` lands in the view.

    ``shift`` is the edge shift, ``delta`` the coordinate component and
    ``count`` the number of anchors along this axis.
    """
    base = shift + delta
    lo = max(0, -base)
    hi = min(count, view_extent - base)
    return lo, max(hi, lo)


def _scan_band(rgb: np.ndarray, pattern_xy: np.ndarray, ring_xy: np.ndarray,
               window: Tuple[int, int], y_start: int, y_stop: int,
               anchors_x: int, tolerance: int) -> List[Tuple[int, int]]:
    """Evaluate all anchors with ``y_start <= oy < y_stop``.

    Returns accepted anchors as ``(ox, oy)`` in row-major order.
    """
    _, window_height = window
    rows = y_stop - y_start
    width = rgb.shape[1]

    # One bordered view covers every probe of every anchor in the band.
    view, shift_x, shift_y = view_with_border(
        rgb, 0, y_start, width, rows + window_height - 1)
    view_h, view_w = view.shape[:2]

    accepted = np.ones((rows, anchors_x), dtype=bool)

    # Reference color per anchor, from the first pattern coordinate.
    fx, fy = int(pattern_xy[0, 0]), int(pattern_xy[0, 1])
    j0, j1 = _anchor_range(shift_y, fy, view_h, rows)
    i0, i1 = _anchor_range(shift_x, fx, view_w, anchors_x)
    first = np.zeros((rows, anchors_x, COMPARED_CHANNELS), dtype=np.int16)
    first[j0:j1, i0:i1] = view[shift_y + fy + j0:shift_y + fy + j1,
                               shift_x + fx + i0:shift_x + fx + i1]

    for dx, dy in pattern_xy.tolist():
        j0, j1 = _anchor_range(shift_y, dy, view_h, rows)
        i0, i1 = _anchor_range(shift_x, dx, view_w, anchors_x)
        if (j0, j1, i0, i1) != (0, rows, 0, anchors_x):
            # Out-of-bounds pattern pixels reject the anchor.
            inside = np.zeros_like(accepted)
            inside[j0:j1, i0:i1] = True
            accepted &= inside
        if j0 < j1 and i0 < i1:
            block = view[shift_y + dy + j0:shift_y + dy + j1,
                         shift_x + dx + i0:shift_x + dx + i1]
            same = (np.abs(block - first[j0:j1, i0:i1]) <= tolerance).all(axis=-1)
            accepted[j0:j1, i0:i1] &= same
        if not accepted.any():
            return []

    for dx, dy in ring_xy.tolist():
        j0, j1 = _anchor_range(shift_y, dy, view_h, rows)
        i0, i1 = _anchor_range(shift_x, dx, view_w, anchors_x)
        if j0 >= j1 or i0 >= i1:
            continue
        block = view[shift_y + dy + j0:shift_y + dy + j1,
                     shift_x + dx + i0:shift_x + dx + i1]
        same = (np.abs(block - first[j0:j1, i0:i1]) <= tolerance).all(axis=-1)
        accepted[j0:j1, i0:i1] &= ~same
        if not accepted.any():
            return []

    js, xs = np.nonzero(accepted)
    return [(int(x), int(y_start + j)) for j, x in zip(js, xs)]


def _check_scannable(pattern: Pattern) -> None:
    origin = pattern.origin
    if origin is not None and (origin.x < 0 or origin.y < 0):
        raise ValueError(
            f"Pattern coordinates must be non-negative, bounding box starts at "
            f"({origin.x}, {origin.y})")


def scan_image(image, pattern: Pattern, search_tolerance: int, *,
               workers: Optional[int] = None, band_rows: Optional[int] = None,
               verbose: bool = False) -> List[Pattern]:
    """Find every exact occurrence of ``pattern`` in ``image``.

    Args:
        image: Target image (see ``as_image_array`` for accepted forms).
        pattern: Shape to look for, in template coordinates.
        search_tolerance: Per-channel tolerance in [0, 255].
        workers: Thread count. None uses ``os.cpu_count()``; 1 scans inline.
        band_rows: Anchor rows per work item. None picks a size giving a few
            bands per worker.
        verbose: Print scan diagnostics to stderr.

    Returns:
        One Pattern per accepted anchor, translated into image coordinates,
        ordered by anchor row then column. Empty when the pattern is empty
        or larger than the image.

    Raises:
        ValueError: On an invalid image or tolerance, a non-positive
            ``workers``/``band_rows``, or a pattern with negative coordinates.
    """
    search_tolerance = validate_tolerance(search_tolerance)
    if workers is not None and workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    if band_rows is not None and band_rows < 1:
        raise ValueError(f"band_rows must be >= 1, got {band_rows}")
    _check_scannable(pattern)
    arr = as_image_array(image)

    if not pattern:
        warnings.warn("Pattern is empty; scan reports no matches",
                      UserWarning, stacklevel=2)
        return []

    height, width = arr.shape[:2]
    window = pattern.window_size()
    anchors_x = max(width - window[0] + 1, 0)
    anchors_y = max(height - window[1] + 1, 0)
    if anchors_x == 0 or anchors_y == 0:
        if verbose:
            print(f"[scan] window {window[0]}x{window[1]} exceeds image "
                  f"{width}x{height}; nothing to scan", file=sys.stderr)
        return []

    rgb = arr[..., :COMPARED_CHANNELS].astype(np.int16)
    pattern_xy = pattern.to_array()
    ring_xy = np.array([(c.x, c.y) for c in sorted(pattern.adjacent_coordinates())],
                       dtype=np.int64).reshape(-1, 2)

    if workers is None:
        workers = os.cpu_count() or 1
    if band_rows is None:
        band_rows = max(1, math.ceil(anchors_y / (workers * _BANDS_PER_WORKER)))
    bands = [(y, min(y + band_rows, anchors_y)) for y in range(0, anchors_y, band_rows)]

    if verbose:
        print(f"[scan] image {width}x{height}, window {window[0]}x{window[1]}, "
              f"{len(pattern)} pixels + {len(ring_xy)} ring, "
              f"{anchors_x * anchors_y} anchors in {len(bands)} bands, "
              f"{workers} workers", file=sys.stderr)
    t0 = time.perf_counter()

    def run(band):
        return _scan_band(rgb, pattern_xy, ring_xy, window, band[0], band[1],
                          anchors_x, search_tolerance)

    if workers == 1 or len(bands) == 1:
        band_results = [run(band) for band in bands]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            band_results = list(pool.map(run, bands))

    matches = [pattern.translated(ox, oy)
               for anchors in band_results for ox, oy in anchors]

    if verbose:
        print(f"[scan] {len(matches)} matches in "
              f"{(time.perf_counter() - t0) * 1000:.1f} ms", file=sys.stderr)
    return matches


def find_pattern_at(image, pattern: Pattern, offset_x: int, offset_y: int,
                    search_tolerance: int) -> Optional[Pattern]:
    """Test a single anchor; return the translated Pattern or None.

    Same decision as ``scan_image`` for one anchor, reading pixels one at
    a time. Ring pixels are read through ``view_with_border``, so probes
    past the image edge are skipped rather than rejected.
    """
    search_tolerance = validate_tolerance(search_tolerance)
    arr = as_image_array(image)
    if not pattern:
        return None

    first = pattern.coordinates[0]
    first_color = get_pixel_safe(arr, first.x + offset_x, first.y + offset_y)
    if first_color is None:
        return None

    for c in pattern:
        color = get_pixel_safe(arr, c.x + offset_x, c.y + offset_y)
        if color is None or not equal_with_tolerance(first_color, color, search_tolerance):
            return None

    window_width, window_height = pattern.window_size()
    view, shift_x, shift_y = view_with_border(
        arr, offset_x, offset_y, window_width, window_height)
    view_h, view_w = view.shape[:2]
    for c in pattern.adjacent_coordinates():
        vx, vy = c.x + shift_x, c.y + shift_y
        if vx < 0 or vy < 0 or vx >= view_w or vy >= view_h:
            continue
        if equal_with_tolerance(first_color, view[vy, vx], search_tolerance):
            return None

    return pattern.translated(offset_x, offset_y)


# ── Configuration + facade ──────────────────────────────────────────────

@dataclass
class ScanConfig:
    """Marker color, tolerances and scan parallelism.

    Defaults: transparent black marker, extraction tolerance 1, exact
    search, one worker per CPU.
    """
    marker_color: Tuple[int, ...] = DEFAULT_MARKER_COLOR
    extraction_tolerance: int = DEFAULT_EXTRACTION_TOLERANCE
    search_tolerance: int = DEFAULT_SEARCH_TOLERANCE
    workers: Optional[int] = None
    band_rows: Optional[int] = None

    def __post_init__(self):
        self.marker_color = validate_color(self.marker_color)
        self.extraction_tolerance = validate_tolerance(self.extraction_tolerance)
        self.search_tolerance = validate_tolerance(self.search_tolerance)
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.band_rows is not None and self.band_rows < 1:
            raise ValueError(f"band_rows must be >= 1, got {self.band_rows}")

    @classmethod
    def from_dict(cls, data: Dict) -> "ScanConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: str) -> "ScanConfig":
        """Load a config from a JSON file of ``ScanConfig`` field names."""
        with open(path, "r") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["marker_color"] = list(self.marker_color)
        return data


class ImageScanner:
    """Pattern extraction and scanning bound to one ``ScanConfig``."""

    def __init__(self, config: Optional[ScanConfig] = None, verbose: bool = False):
        if config is None:
            config = ScanConfig()
        self._config = config
        self._verbose = verbose

    @property
    def config(self) -> ScanConfig:
        return self._config

    def create_pattern(self, image) -> Pattern:
        """Extract a Pattern using the configured marker color and tolerance."""
        pattern = Pattern.from_template(
            image, self._config.marker_color, self._config.extraction_tolerance)
        if not pattern:
            warnings.warn(
                f"No pixel within tolerance {self._config.extraction_tolerance} "
                f"of marker color {self._config.marker_color} in template",
                UserWarning, stacklevel=2)
        elif self._verbose:
            w, h = pattern.window_size()
            print(f"[scan] extracted {len(pattern)} pixels, window {w}x{h}",
                  file=sys.stderr)
        return pattern

    def scan_image_for_patterns(self, pattern: Pattern, image) -> List[Pattern]:
        return scan_image(image, pattern, self._config.search_tolerance,
                          workers=self._config.workers,
                          band_rows=self._config.band_rows,
                          verbose=self._verbose)

    def scan_multiple_images_for_patterns(self, pattern: Pattern,
                                          images: Sequence) -> List[List[Pattern]]:
        """Scan each image in turn; one result list per image, same order."""
        return [self.scan_image_for_patterns(pattern, image) for image in images]
