"""Raster helpers: input normalisation, bounds-checked reads, bordered views.

Images are numpy arrays indexed ``[y, x]`` with shape ``(H, W, C)``,
``C`` in (3, 4). Nothing here copies pixel data unless a conversion is
required, and nothing here writes to the caller's array.
"""

from typing import Optional, Tuple

import numpy as np

from ._constants import MAX_CHANNEL_VALUE

__all__ = ["as_image_array", "get_pixel_safe", "view_with_border"]

_PIL_DIRECT_MODES = ("L", "RGB", "RGBA")


def as_image_array(image) -> np.ndarray:
    """Normalise ``image`` to a ``(H, W, 3|4)`` uint8 array.

    Accepts:
        - numpy arrays of shape (H, W), (H, W, 1), (H, W, 3) or (H, W, 4),
          any real dtype with values in [0, 255]; grayscale is broadcast
          to three equal channels.
        - anything ``np.asarray`` understands, such as ``PIL.Image.Image``.
          Palette and other PIL modes are converted to RGBA first.

    Raises:
        ValueError: On an unsupported shape or out-of-range values.
    """
    mode = getattr(image, "mode", None)
    if isinstance(mode, str) and mode not in _PIL_DIRECT_MODES and hasattr(image, "convert"):
        image = image.convert("RGBA")

    arr = np.asarray(image)
    if arr.ndim == 2:
        arr = arr[:, :, np.newaxis]
    if arr.ndim != 3:
        raise ValueError(f"Expected a 2D image, got array of shape {arr.shape}")
    if arr.shape[2] == 1:
        arr = np.repeat(arr, 3, axis=2)
    if arr.shape[2] not in (3, 4):
        raise ValueError(
            f"Expected 1, 3 or 4 channels, got {arr.shape[2]} (shape {arr.shape})")

    if arr.dtype == np.uint8:
        return arr
    if arr.dtype.kind not in "biuf":
        raise ValueError(f"Unsupported image dtype: {arr.dtype}")
    if arr.size and (arr.min() < 0 or arr.max() > MAX_CHANNEL_VALUE):
        raise ValueError(
            f"Pixel values must be in [0, {MAX_CHANNEL_VALUE}], "
            f"got [{arr.min()}, {arr.max()}]")
    if arr.dtype.kind == "f":
        arr = np.round(arr)
    return arr.astype(np.uint8)


def get_pixel_safe(image: np.ndarray, x: int, y: int) -> Optional[np.ndarray]:
    """Return the pixel at ``(x, y)``, or None outside the image.

    Negative coordinates are out of bounds (they never wrap around).
    """
    height, width = image.shape[:2]
    if x < 0 or y < 0 or x >= width or y >= height:
        return None
    return image[y, x]


def view_with_border(image: np.ndarray, offset_x: int, offset_y: int,
                     window_width: int, window_height: int
                     ) -> Tuple[np.ndarray, int, int]:
    """Read-only view of a window plus up to one pixel of halo per side.

    The halo is clamped at the image edges: it shrinks rather than wraps,
    and no pixels are synthesised.

    Args:
        image: ``(H, W, ...)`` source array.
        offset_x, offset_y: Top-left corner of the window in ``image``.
        window_width, window_height: Window size in pixels.

    Returns:
        ``(view, edge_shift_x, edge_shift_y)``. The window-relative pixel
        ``(x, y)`` lives at ``view[y + edge_shift_y, x + edge_shift_x]``.
        A shift is 0 when the window touches the image's left/top edge and
        1 otherwise.
    """
    height, width = image.shape[:2]

    x_start = max(offset_x - 1, 0)
    y_start = max(offset_y - 1, 0)
    x_end = min(offset_x + window_width + 1, width)
    y_end = min(offset_y + window_height + 1, height)

    view = image[y_start:max(y_end, y_start), x_start:max(x_end, x_start)]
    view.flags.writeable = False
    return view, offset_x - x_start, offset_y - y_start
