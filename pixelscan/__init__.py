"""pixelscan — exact-silhouette pixel pattern search in raster images."""

from .coordinate import Coordinate
from .color import equal_with_tolerance, parse_color
from .pattern import Pattern
from .image_utils import view_with_border
from .scanner import scan_image, find_pattern_at, ScanConfig, ImageScanner

__all__ = ["Coordinate", "equal_with_tolerance", "parse_color", "Pattern",
           "view_with_border", "scan_image", "find_pattern_at", "ScanConfig",
           "ImageScanner"]
