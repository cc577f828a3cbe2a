"""Tolerance-based RGB color comparison.

Colors are sequences of 3 or 4 integer channels (R, G, B[, A]) in [0, 255].
Only R, G and B are compared; alpha is carried along but never looked at,
so a template saved with a transparent marker still matches an opaque
target.

Two colors are "equal" under a tolerance ``t`` when every compared channel
satisfies ``|a - b| <= t``. Differences are computed in ``int16`` to avoid
uint8 wraparound.
"""

from typing import Sequence, Tuple

import numpy as np

from ._constants import COMPARED_CHANNELS, MAX_CHANNEL_VALUE

__all__ = ["equal_with_tolerance", "color_mask", "parse_color",
           "validate_tolerance", "validate_color"]


def validate_tolerance(tolerance) -> int:
    """Return ``tolerance`` as a plain int, raising if it is not in [0, 255]."""
    if isinstance(tolerance, (bool, np.bool_)) or not isinstance(
            tolerance, (int, np.integer)):
        raise ValueError(f"Tolerance must be an integer, got {tolerance!r}")
    tolerance = int(tolerance)
    if not 0 <= tolerance <= MAX_CHANNEL_VALUE:
        raise ValueError(
            f"Tolerance {tolerance} out of range [0, {MAX_CHANNEL_VALUE}]")
    return tolerance


def validate_color(color: Sequence[int]) -> Tuple[int, ...]:
    """Return ``color`` as a tuple of 3 or 4 ints in [0, 255]."""
    values = tuple(int(c) for c in color)
    if len(values) not in (3, 4):
        raise ValueError(
            f"Color must have 3 or 4 channels, got {len(values)}: {color!r}")
    for v in values:
        if not 0 <= v <= MAX_CHANNEL_VALUE:
            raise ValueError(f"Color channel {v} out of range in {color!r}")
    return values


def equal_with_tolerance(a: Sequence[int], b: Sequence[int],
                         tolerance: int) -> bool:
    """True if R, G and B of ``a`` and ``b`` each differ by at most ``tolerance``."""
    for i in range(COMPARED_CHANNELS):
        if abs(int(a[i]) - int(b[i])) > tolerance:
            return False
    return True


def color_mask(image: np.ndarray, color: Sequence[int],
               tolerance: int) -> np.ndarray:
    """Vectorised ``equal_with_tolerance`` over an image.

    Args:
        image: ``(H, W, C)`` array with ``C >= 3``.
        color: Reference color (alpha, if present, is ignored).
        tolerance: Per-channel tolerance.

    Returns:
        ``(H, W)`` boolean mask of pixels within tolerance of ``color``.
    """
    if image.ndim != 3 or image.shape[2] < COMPARED_CHANNELS:
        raise ValueError(f"Expected (H, W, C>=3) image, got shape {image.shape}")
    rgb = image[..., :COMPARED_CHANNELS].astype(np.int16, copy=False)
    target = np.array(color[:COMPARED_CHANNELS], dtype=np.int16)
    return (np.abs(rgb - target) <= tolerance).all(axis=-1)


def parse_color(text: str) -> Tuple[int, ...]:
    """Parse a color from ``#RRGGBB``, ``#RRGGBBAA`` or ``R,G,B[,A]``.

    Hex colors without an alpha component are opaque (alpha 255).

    Raises:
        ValueError: If the text is not one of the accepted forms.
    """
    text = text.strip()
    if text.startswith("#"):
        digits = text[1:]
        if len(digits) not in (6, 8):
            raise ValueError(f"Invalid hex color format: {text!r}")
        try:
            channels = [int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)]
        except ValueError:
            raise ValueError(f"Invalid hex color digits: {text!r}") from None
        if len(channels) == 3:
            channels.append(MAX_CHANNEL_VALUE)
        return tuple(channels)

    parts = [p.strip() for p in text.split(",")]
    try:
        channels = [int(p) for p in parts]
    except ValueError:
        raise ValueError(f"Invalid color: {text!r}") from None
    return validate_color(channels)
