"""Pattern — a template's silhouette as a set of pixel coordinates.

A Pattern is extracted once from a tightly cropped template image by
collecting every pixel whose color matches a marker color, and is then
used by the scanner as the shape to look for.

Besides the coordinates themselves, a Pattern derives:

    - its window size, ``(max_x + 1, max_y + 1)``, which sizes the sliding
      window during a scan;
    - its exclusion ring, the 8-connected neighbours of the shape that are
      not part of it. A same-colored pixel on the ring means the colored
      region in the target is larger than the template, so that location
      is not an exact match.

Usage:
    pattern = Pattern.from_template(template, marker_color=(0, 0, 0), extraction_tolerance=1)
    width, height = pattern.window_size()
    ring = pattern.adjacent_coordinates()
"""

from typing import FrozenSet, Iterable, Iterator, Optional, Sequence, Tuple

import numpy as np

from ._constants import NEIGHBOR_OFFSETS
from .color import color_mask, validate_color, validate_tolerance
from .coordinate import Coordinate
from .image_utils import as_image_array

__all__ = ["Pattern"]


class Pattern:
    """Immutable, duplicate-free set of coordinates.

    Insertion order is preserved (the first coordinate is the color
    reference when scanning) but equality and hashing use set semantics.
    """

    __slots__ = ("_coordinates", "_members", "_ring")

    def __init__(self, coordinates: Iterable = ()):
        """Build a pattern from Coordinates or ``(x, y)`` pairs.

        Duplicates are dropped, keeping the first occurrence.
        """
        unique = dict.fromkeys(
            c if isinstance(c, Coordinate) else Coordinate(int(c[0]), int(c[1]))
            for c in coordinates
        )
        self._coordinates: Tuple[Coordinate, ...] = tuple(unique)
        self._members: FrozenSet[Coordinate] = frozenset(unique)
        self._ring: Optional[FrozenSet[Coordinate]] = None

    @classmethod
    def from_template(cls, image, marker_color: Sequence[int],
                      extraction_tolerance: int) -> "Pattern":
        """Extract the pattern of ``marker_color`` pixels from a template.

        Pixels are visited in row-major order; a pixel is included when its
        R, G and B are each within ``extraction_tolerance`` of the marker.
        Coordinates are stored exactly as found: the template is expected
        to be cropped so the shape starts at (0, 0).

        Args:
            image: Template image (see ``as_image_array`` for accepted forms).
            marker_color: RGB or RGBA color outlining the shape.
            extraction_tolerance: Per-channel tolerance in [0, 255].

        Returns:
            The extracted Pattern; empty if no pixel matches.

        Raises:
            ValueError: On an invalid image, color or tolerance.
        """
        marker_color = validate_color(marker_color)
        extraction_tolerance = validate_tolerance(extraction_tolerance)
        arr = as_image_array(image)

        ys, xs = np.nonzero(color_mask(arr, marker_color, extraction_tolerance))
        return cls(Coordinate(int(x), int(y)) for y, x in zip(ys, xs))

    # ── Set behaviour ─────────────────────────────────────────────────

    @property
    def coordinates(self) -> Tuple[Coordinate, ...]:
        return self._coordinates

    def __len__(self) -> int:
        return len(self._coordinates)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self._coordinates)

    def __contains__(self, item) -> bool:
        return item in self._members

    def __bool__(self) -> bool:
        return bool(self._coordinates)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Pattern):
            return NotImplemented
        return self._members == other._members

    def __hash__(self) -> int:
        return hash(self._members)

    def __repr__(self) -> str:
        if len(self._coordinates) <= 4:
            inner = ", ".join(f"({c.x}, {c.y})" for c in self._coordinates)
        else:
            first = ", ".join(f"({c.x}, {c.y})" for c in self._coordinates[:3])
            inner = f"{first}, ... {len(self._coordinates) - 3} more"
        return f"Pattern([{inner}])"

    def contains_coordinate(self, coordinate: Coordinate) -> bool:
        """Structural membership test (no color involved)."""
        return coordinate in self._members

    # ── Geometry ──────────────────────────────────────────────────────

    def window_size(self) -> Tuple[int, int]:
        """Return ``(max_x + 1, max_y + 1)``, or ``(0, 0)`` when empty."""
        if not self._coordinates:
            return 0, 0
        return (max(c.x for c in self._coordinates) + 1,
                max(c.y for c in self._coordinates) + 1)

    @property
    def origin(self) -> Optional[Coordinate]:
        """Top-left corner of the bounding box, or None when empty."""
        if not self._coordinates:
            return None
        return Coordinate(min(c.x for c in self._coordinates),
                          min(c.y for c in self._coordinates))

    def adjacent_coordinates(self) -> FrozenSet[Coordinate]:
        """The exclusion ring: 8-neighbours of the shape not in the shape."""
        if self._ring is None:
            self._ring = frozenset(
                neighbor
                for c in self._coordinates
                for dx, dy in NEIGHBOR_OFFSETS
                for neighbor in (c.translated(dx, dy),)
                if neighbor not in self._members
            )
        return self._ring

    def translated(self, dx: int, dy: int) -> "Pattern":
        """Return a new Pattern shifted by ``(dx, dy)``."""
        return Pattern(c.translated(dx, dy) for c in self._coordinates)

    def to_array(self) -> np.ndarray:
        """Coordinates as an ``(N, 2)`` int64 array of ``(x, y)`` rows."""
        if not self._coordinates:
            return np.zeros((0, 2), dtype=np.int64)
        return np.array([(c.x, c.y) for c in self._coordinates], dtype=np.int64)
