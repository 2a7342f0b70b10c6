"""
Color metadata of a document.

A document may carry its output color in a solid-color fill layer with a
reserved name. The color is encoded as ``#rrggbbaa`` where the alpha byte
comes from the opacity of the layer. Example attribute bag::

    {
        'Clr': {
            'Rd': 235.90926200151443,
            'Grn': 232.29671984910965,
            'Bl': 25.424751117825508,
            'Bk': 'PANTONE+ Solid Coated',
        }
    }

The metadata layer is read whether or not it is visible.
"""

import logging
import math
from collections.abc import Mapping
from numbers import Real
from typing import Iterable, Optional

from rtpng.constants import (
    BLUE_KEY,
    COLOR_KEY,
    GREEN_KEY,
    METADATA_LAYER_NAME,
    RED_KEY,
    Kind,
)
from rtpng.errors import MalformedColorError
from rtpng.layers import Layer

logger = logging.getLogger(__name__)


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value < 0:
        return int(math.ceil(value - 0.5))
    return int(math.floor(value + 0.5))


def _get_channel(color_desc: Mapping, key: str, layer: Layer) -> int:
    if key not in color_desc:
        raise MalformedColorError(
            "Color of %r has no %r channel" % (layer.name, key)
        )
    value = color_desc[key]
    if isinstance(value, bool) or not isinstance(value, Real):
        raise MalformedColorError(
            "Channel %r of %r is not numeric: %r" % (key, layer.name, value)
        )
    if not math.isfinite(value):
        raise MalformedColorError(
            "Channel %r of %r is not finite: %r" % (key, layer.name, value)
        )
    channel = round_half_away(float(value))
    if not 0 <= channel <= 255:
        raise MalformedColorError(
            "Channel %r of %r is out of range: %r" % (key, layer.name, value)
        )
    return channel


def extract_color(layer: Layer, name: str = METADATA_LAYER_NAME) -> Optional[str]:
    """
    Return the ``#rrggbbaa`` color of the metadata layer.

    :param layer: :py:class:`~rtpng.layers.Layer`
    :param name: Reserved name of the metadata layer.
    :return: `str`, or `None` if the layer is not the metadata layer.
    :raises MalformedColorError: If the metadata layer is not a valid
        solid-color fill.
    """
    if layer.name != name:
        return None
    if layer.kind != Kind.SOLID_FILL:
        raise MalformedColorError(
            "%r must be a solid color fill layer, got %s" % (layer.name, layer.kind.value)
        )

    color_desc = (layer.fill or {}).get(COLOR_KEY)
    if not isinstance(color_desc, Mapping):
        raise MalformedColorError("Could not find a color descriptor in %r" % layer.name)

    rgb = [_get_channel(color_desc, key, layer) for key in (RED_KEY, GREEN_KEY, BLUE_KEY)]
    alpha = round_half_away(layer.opacity / 100.0 * 255)
    color = "#%02x%02x%02x%02x" % (rgb[0], rgb[1], rgb[2], alpha)
    logger.debug("Color of %r is %s" % (layer.name, color))
    return color


def find_color(layers: Iterable[Layer], name: str = METADATA_LAYER_NAME) -> Optional[str]:
    """
    Find the color of a document among all its layers.

    :param layers: Every layer of the document, groups included.
    :param name: Reserved name of the metadata layer.
    :return: `str`, or `None` if the document has no metadata layer.
    :raises MalformedColorError: If the metadata layer is invalid or there is
        more than one.
    """
    found = [layer for layer in layers if layer.name == name]
    if not found:
        return None
    if len(found) > 1:
        raise MalformedColorError(
            "Found %d layers named %r, expected at most one" % (len(found), name)
        )
    return extract_color(found[0], name)
