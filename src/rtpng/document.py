"""
Document adapter.

The engine works on :py:class:`~rtpng.layers.Layer` trees and pulls pixels
through a `get_raster_content` callable. This module defines that interface
as a :py:class:`DocumentProtocol` and implements it on top of psd-tools::

    document = PSDDocument.open('banner.psd')
    for layer in document.layers:
        print(layer.name, layer.kind)

    pixels = document.get_raster_content(document.layers[0])
"""

import logging
import os
from enum import Enum
from typing import Any, BinaryIO, Optional, Protocol, Sequence, Union

import numpy as np
from psd_tools import PSDImage
from psd_tools.constants import ColorMode, Tag
from psd_tools.psd.base import (
    BooleanElement,
    DictElement,
    NumericElement,
    StringElement,
    ValueElement,
)

from rtpng.color import round_half_away
from rtpng.constants import Kind
from rtpng.errors import ParseError, RasterizationError
from rtpng.layers import Layer

logger = logging.getLogger(__name__)

#: psd-tools layer kinds and their content kinds. Unknown kinds are unspecified.
KINDS = {
    "pixel": Kind.RASTER,
    "smartobject": Kind.RASTER,
    "solidcolorfill": Kind.SOLID_FILL,
    "type": Kind.TEXT,
    "shape": Kind.SHAPE,
    "group": Kind.GROUP,
    "artboard": Kind.GROUP,
}

#: Layer kinds without pixel data that psd-tools can still render.
FILL_KINDS = {"solidcolorfill", "patternfill", "gradientfill"}


class DocumentProtocol(Protocol):
    """
    Protocol defining the document interface the pipeline consumes.
    """

    @property
    def name(self) -> str:
        """Name of the document, used for messages."""
        ...

    @property
    def width(self) -> int:
        """Canvas width."""
        ...

    @property
    def height(self) -> int:
        """Canvas height."""
        ...

    @property
    def color_mode(self) -> Any:
        """Color mode tag."""
        ...

    @property
    def layers(self) -> Sequence[Layer]:
        """All the layers, bottom-to-top, each group followed by its children."""
        ...

    def get_raster_content(self, layer: Layer) -> np.ndarray:
        """Pixels of the layer as a (height, width, 4) uint8 array."""
        ...


def _decode_key(key: Any) -> str:
    if isinstance(key, Enum):
        key = key.value
    if isinstance(key, bytes):
        key = key.decode("ascii", "replace")
    return str(key).strip()


def to_bag(value: Any) -> Any:
    """
    Convert a psd-tools descriptor to nested dicts of plain values.

    Keys are decoded and stripped, e.g., ``b'Rd  '`` becomes ``'Rd'``.
    """
    if isinstance(value, DictElement):
        return {_decode_key(key): to_bag(item) for key, item in value.items()}
    if isinstance(value, BooleanElement):
        return bool(value.value)
    if isinstance(value, NumericElement):
        return float(value)
    if isinstance(value, StringElement):
        return value.value.rstrip("\x00")
    if isinstance(value, ValueElement):
        return value.value
    return value


def convert_opacity(opacity: int) -> int:
    """Convert opacity from [0, 255] to [0, 100]; only 0 maps to 0."""
    if opacity == 0:
        return 0
    return max(1, round_half_away(opacity * 100.0 / 255.0))


class PSDDocument(object):
    """
    Layered document backed by :py:class:`psd_tools.PSDImage`.

    :param psd: The parsed document.
    :param name: Name of the document, used for messages.
    """

    def __init__(self, psd: PSDImage, name: Optional[str] = None):
        self._psd = psd
        self._name = name or "document"
        self._sources: dict[int, Any] = {}
        self._roots = [self._convert(child) for child in psd]
        self._layers = [
            layer
            for root in self._roots
            for layer in [root] + list(root.descendants())
        ]

    @classmethod
    def open(
        cls, fp: Union[BinaryIO, str, os.PathLike], **kwargs: Any
    ) -> "PSDDocument":
        """
        Open a PSD or PSB document.

        :param fp: filename or file-like object.
        :param kwargs: arguments passed to :py:meth:`psd_tools.PSDImage.open`.
        """
        if isinstance(fp, (str, os.PathLike)):
            name = os.path.basename(os.fspath(fp))
        else:
            name = getattr(fp, "name", None)
        try:
            psd = PSDImage.open(fp, **kwargs)
        except (FileNotFoundError, IsADirectoryError, PermissionError):
            raise
        except Exception as e:
            raise ParseError("Failed to parse %s: %s" % (name, e)) from e
        return cls(psd, name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def width(self) -> int:
        return self._psd.width

    @property
    def height(self) -> int:
        return self._psd.height

    @property
    def color_mode(self) -> ColorMode:
        return self._psd.color_mode

    @property
    def roots(self) -> list[Layer]:
        """Top-level layers."""
        return self._roots

    @property
    def layers(self) -> list[Layer]:
        return self._layers

    def _convert(self, source: Any) -> Layer:
        try:
            kind = KINDS.get(source.kind, Kind.UNSPECIFIED)
            fill = None
            if kind == Kind.SOLID_FILL:
                fill = to_bag(
                    source.tagged_blocks.get_data(Tag.SOLID_COLOR_SHEET_SETTING)
                )

            layer = Layer(
                name=source.name,
                kind=kind,
                bbox=source.bbox,
                visible=source.visible,
                opacity=convert_opacity(source.opacity),
                layer_id=source.layer_id,
                fill=fill,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ParseError(
                "Malformed layer record in %s: %s" % (self.name, e)
            ) from e

        logger.debug("Converted %r from %s" % (layer, source.kind))
        self._sources[id(layer)] = source
        if kind == Kind.GROUP:
            for child in source:
                layer.append(self._convert(child))
        return layer

    def get_raster_content(self, layer: Layer) -> np.ndarray:
        """
        Pixels of the layer, cropped to its bounding box.

        :raises RasterizationError: If the layer has no pixels or psd-tools
            fails to decode or render them.
        """
        source = self._sources.get(id(layer))
        if source is None:
            raise RasterizationError("%r does not belong to %s" % (layer.name, self.name))

        try:
            image = source.topil(apply_icc=False)
            if image is None and source.kind in FILL_KINDS:
                logger.debug("Rendering fill %r" % layer)
                image = source.composite(apply_icc=False)
        except Exception as e:
            raise RasterizationError(
                "Failed to get pixels of %r: %s" % (layer.name, e)
            ) from e

        if image is None:
            raise RasterizationError("%r has no pixels" % layer.name)
        return np.asarray(image.convert("RGBA"))
