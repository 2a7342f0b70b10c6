"""
Composite module for layer rendering and merging.

Two compositing rules are used on purpose:

- :py:func:`render_layer` copies the pixels of one layer (REPLACE), so that
  each exported layer keeps its exact original pixels, transparency included.
- :py:func:`merge_preview` blends rendered layers with non-premultiplied
  source-over, so that the preview reads as a flattened image.

Buffers are canvas-sized ``(height, width, 4)`` uint8 arrays of
non-premultiplied RGBA.

Example usage::

    buffers = [render_layer(kept.layer, width, height, fetch) for kept in kept_layers]
    preview = merge_preview(buffers)
"""

import logging
from typing import Callable, Optional, Sequence

import numpy as np

from rtpng import utils
from rtpng.constants import CHANNELS, OPAQUE
from rtpng.errors import RasterizationError
from rtpng.layers import Layer

logger = logging.getLogger(__name__)

Fetch = Callable[[Layer], np.ndarray]


def as_rgba(content: Optional[np.ndarray], layer: Layer) -> np.ndarray:
    """Validate raster content and return it as a uint8 RGBA array."""
    if content is None:
        raise RasterizationError("%r has no pixels" % layer.name)
    content = np.asarray(content)
    if content.ndim != 3 or content.shape[2] not in (3, CHANNELS):
        raise RasterizationError(
            "Unexpected pixel shape of %r: %s" % (layer.name, content.shape)
        )
    if content.dtype != np.uint8:
        raise RasterizationError(
            "Unexpected pixel type of %r: %s" % (layer.name, content.dtype)
        )
    if content.shape[2] == 3:
        alpha = np.full(content.shape[:2] + (1,), OPAQUE, dtype=np.uint8)
        content = np.concatenate((content, alpha), axis=2)
    return content


def fetch_content(layer: Layer, fetch: Fetch) -> np.ndarray:
    """Obtain the pixels of a layer; failures become RasterizationError."""
    try:
        content = fetch(layer)
    except RasterizationError:
        raise
    except Exception as e:
        raise RasterizationError("Failed to get pixels of %r: %s" % (layer.name, e)) from e
    return as_rgba(content, layer)


def paste(canvas: np.ndarray, offset: tuple[int, int], content: np.ndarray) -> np.ndarray:
    """
    Copy content into the canvas at the given offset, replacing the
    destination pixels. Content outside of the canvas is dropped.

    :param canvas: Destination buffer, modified in place.
    :param offset: (left, top) of the content in canvas coordinates.
    :param content: Source RGBA pixels.
    :return: The canvas.
    """
    height, width = canvas.shape[:2]
    left, top = offset
    bbox = (left, top, left + content.shape[1], top + content.shape[0])
    inter = utils.intersect((0, 0, width, height), bbox)
    if inter == (0, 0, 0, 0):
        return canvas

    b = (inter[0] - left, inter[1] - top, inter[2] - left, inter[3] - top)
    canvas[inter[1] : inter[3], inter[0] : inter[2], :] = content[b[1] : b[3], b[0] : b[2], :]
    return canvas


def render_layer(layer: Layer, width: int, height: int, fetch: Fetch) -> np.ndarray:
    """
    Render a single layer on a transparent canvas.

    :param layer: :py:class:`~rtpng.layers.Layer`
    :param width: Canvas width.
    :param height: Canvas height.
    :param fetch: Callable returning the pixels of a layer.
    :return: `numpy.ndarray` of shape (height, width, 4).
    :raises RasterizationError: If the pixels cannot be obtained.
    """
    content = fetch_content(layer, fetch)
    # Pixels beyond the bounding box are not part of the layer.
    content = content[: layer.height, : layer.width, :]
    logger.debug("Rendering %r" % layer)
    return paste(utils.new_buffer(width, height), layer.offset, content)


def is_opaque(buffer: np.ndarray) -> bool:
    """Return True if every pixel of the buffer is fully opaque."""
    return bool(np.all(buffer[:, :, 3] == OPAQUE))


class Compositor(object):
    """Source-over composite context.

    Example::

        compositor = Compositor(width, height)
        for buffer in buffers:
            compositor.apply(buffer)
        preview = compositor.finish()
    """

    def __init__(self, width: int, height: int):
        self._width = width
        self._height = height
        self._color = np.zeros((height, width, 3), dtype=np.float32)
        self._alpha = np.zeros((height, width, 1), dtype=np.float32)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def apply(self, buffer: np.ndarray) -> None:
        if buffer.shape != (self._height, self._width, CHANNELS):
            raise ValueError(
                "Buffer shape %s does not match canvas %dx%d"
                % (buffer.shape, self._width, self._height)
            )
        source = utils.to_float(buffer)
        color_s, alpha_s = source[:, :, :3], source[:, :, 3:]
        alpha_b = self._alpha * (1.0 - alpha_s)
        alpha = alpha_s + alpha_b
        self._color = utils.clip(
            utils.divide(color_s * alpha_s + self._color * alpha_b, alpha)
        )
        self._alpha = alpha

    def finish(self) -> np.ndarray:
        return utils.to_uint8(np.concatenate((self._color, self._alpha), axis=2))


def merge_preview(
    buffers: Sequence[np.ndarray], size: Optional[tuple[int, int]] = None
) -> np.ndarray:
    """
    Flatten rendered layers into one preview with source-over blending.

    :param buffers: Canvas-sized RGBA buffers, bottom-to-top.
    :param size: (width, height) of the canvas. Required when `buffers` is
        empty, otherwise taken from the first buffer.
    :return: `numpy.ndarray` of shape (height, width, 4).
    """
    if size is None:
        if not buffers:
            raise ValueError("Canvas size is required to merge no buffers")
        size = (buffers[0].shape[1], buffers[0].shape[0])

    compositor = Compositor(*size)
    for buffer in buffers:
        compositor.apply(buffer)
    return compositor.finish()
