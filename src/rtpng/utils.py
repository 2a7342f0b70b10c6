"""Utility functions for raster operations."""

import numpy as np
from numpy.typing import NDArray

from rtpng.constants import CHANNELS


def divide(a: NDArray[np.floating], b: NDArray[np.floating]) -> NDArray[np.floating]:
    """Safe division for color ops. Undefined results become 0."""
    with np.errstate(divide="ignore", invalid="ignore"):
        c = np.true_divide(a, b)
        c[~np.isfinite(c)] = 0.0
    return c


def intersect(
    a: tuple[int, int, int, int], b: tuple[int, int, int, int]
) -> tuple[int, int, int, int]:
    """Calculate intersection of two bounding boxes."""
    inter = (max(a[0], b[0]), max(a[1], b[1]), min(a[2], b[2]), min(a[3], b[3]))
    if inter[0] >= inter[2] or inter[1] >= inter[3]:
        return (0, 0, 0, 0)
    return inter


def clip(x: NDArray[np.floating]) -> NDArray[np.floating]:
    """Clip between [0, 1]."""
    return np.clip(x, 0.0, 1.0)


def new_buffer(width: int, height: int) -> np.ndarray:
    """Create a fully transparent RGBA buffer."""
    return np.zeros((height, width, CHANNELS), dtype=np.uint8)


def to_float(buffer: np.ndarray) -> np.ndarray:
    """Convert a uint8 buffer to float32 in [0, 1]."""
    return buffer.astype(np.float32) / 255.0


def to_uint8(values: np.ndarray) -> np.ndarray:
    """Convert float values in [0, 1] to a uint8 buffer."""
    return np.round(clip(values) * 255.0).astype(np.uint8)
