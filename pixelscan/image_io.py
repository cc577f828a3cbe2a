"""Image file loading via Pillow.

Images are decoded to ``(H, W, 4)`` RGBA uint8 arrays, the form the rest of
the package works with.
"""

import os
import warnings
from typing import List, Sequence

import numpy as np
from PIL import Image, UnidentifiedImageError

__all__ = ["load_image", "load_images", "is_path_valid", "are_paths_valid"]


def is_path_valid(path: str) -> bool:
    return os.path.exists(path)


def are_paths_valid(paths: Sequence[str]) -> bool:
    return all(is_path_valid(p) for p in paths)


def load_image(path: str) -> np.ndarray:
    """Decode an image file to an RGBA uint8 array.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file cannot be decoded as an image.
    """
    if not is_path_valid(path):
        raise FileNotFoundError(f"Cannot read image: {path}")
    try:
        with Image.open(path) as img:
            return np.array(img.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Cannot decode image {path}: {e}") from e


def load_images(paths: Sequence[str]) -> List[np.ndarray]:
    """Load every readable image in ``paths``, skipping the rest with a warning."""
    images = []
    for path in paths:
        try:
            images.append(load_image(path))
        except (FileNotFoundError, ValueError) as e:
            warnings.warn(f"Skipping {path}: {e}", UserWarning, stacklevel=2)
    return images
