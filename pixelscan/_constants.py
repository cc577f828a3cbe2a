"""Shared constants for the pixelscan package."""

# 8-connected neighbourhood as (dx, dy) deltas, row by row.
NEIGHBOR_OFFSETS = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0), (1, 0),
    (-1, 1), (0, 1), (1, 1),
)

# Channel values are 8-bit; tolerances share the same range.
MAX_CHANNEL_VALUE = 255

# Only R, G, B take part in color comparisons.
COMPARED_CHANNELS = 3

# ScanConfig defaults: fully transparent black marker, extraction tolerance 1,
# exact search.
DEFAULT_MARKER_COLOR = (0, 0, 0, 0)
DEFAULT_EXTRACTION_TOLERANCE = 1
DEFAULT_SEARCH_TOLERANCE = 0
