import logging
import shutil
from typing import Optional

import numpy as np
import pytest
from PIL import Image
from psd_tools import PSDImage
from psd_tools.api.layers import PixelLayer

from rtpng.constants import Kind
from rtpng.layers import Layer

logging.basicConfig(level=logging.DEBUG)

# Marker to skip tests that run the real pngquant
skip_without_pngquant = pytest.mark.skipif(
    shutil.which("pngquant") is None,
    reason="Requires the pngquant executable",
)


def solid(
    width: int, height: int, color: tuple[int, int, int, int] = (255, 0, 0, 255)
) -> np.ndarray:
    """Uniform RGBA pixels."""
    return np.full((height, width, 4), color, dtype=np.uint8)


def raster(
    name: str,
    bbox: tuple[int, int, int, int],
    color: tuple[int, int, int, int] = (255, 0, 0, 255),
    **kwargs,
) -> tuple[Layer, np.ndarray]:
    """A raster layer filled with a single color, and its pixels."""
    layer = Layer(name=name, bbox=bbox, **kwargs)
    return layer, solid(layer.width, layer.height, color)


def fill_layer(
    name: str = "color",
    rgb: Optional[dict] = None,
    opacity: int = 100,
    **kwargs,
) -> Layer:
    if rgb is None:
        rgb = {"Rd": 12.4, "Grn": 200.6, "Bl": 255.0}
    return Layer(
        name=name,
        kind=Kind.SOLID_FILL,
        bbox=(0, 0, 4, 4),
        opacity=opacity,
        fill={"Clr": rgb},
        **kwargs,
    )


class FakeDocument(object):
    """In-memory document with pixels keyed by layer."""

    def __init__(self, width, height, roots=(), contents=None, color_mode="RGB", name="fake.psd"):
        self.name = name
        self.width = width
        self.height = height
        self.color_mode = color_mode
        self.roots = list(roots)
        self.layers = [
            layer for root in self.roots for layer in [root] + list(root.descendants())
        ]
        self._contents = {id(layer): pixels for layer, pixels in (contents or {}).items()}
        self.fetched = []

    def get_raster_content(self, layer):
        self.fetched.append(layer.name)
        return self._contents[id(layer)]


def fetcher(*pairs):
    """Fetch callable serving the pixels of (layer, pixels) pairs."""
    contents = {id(layer): pixels for layer, pixels in pairs}

    def fetch(layer):
        return contents[id(layer)]

    return fetch


def save_psd(filename: str, inverted: bool = False) -> str:
    """
    Write an 8x6 PSD with a white background and a half transparent logo.

    With `inverted`, the background record gets a right edge left of its left
    edge, which psd-tools still reads back.
    """
    psd = PSDImage.new("RGBA", (8, 6))
    PixelLayer.frompil(Image.new("RGBA", (8, 6), (255, 255, 255, 255)), psd, "Background")
    PixelLayer.frompil(
        Image.new("RGBA", (4, 3), (255, 0, 0, 128)), psd, "Logo", top=1, left=2
    )
    psd.save(filename)
    if inverted:
        psd = PSDImage.open(filename)
        record = psd[0]._record
        record.left, record.right = record.right, record.left
        psd.save(filename)
    return filename
