"""
Processing options.

Example::

    config = Config(sizes=[(1170, 363), (570, 363)], quantize=False)
    result = process_file('banner.psd', config)
"""

import re

from attrs import define, field

from rtpng.constants import METADATA_LAYER_NAME
from rtpng.validators import range_


def _to_sizes(value):
    return tuple((int(w), int(h)) for w, h in value)


def _check_quality(inst, attr, value):
    match = re.fullmatch(r"(\d{1,3})(?:-(\d{1,3}))?", value)
    if not match or any(int(x) > 100 for x in match.groups() if x is not None):
        raise ValueError("'%s' must be MIN-MAX within 0-100, got %r" % (attr.name, value))


def parse_size(value: str) -> tuple[int, int]:
    """Parse a ``WIDTHxHEIGHT`` string."""
    match = re.fullmatch(r"\s*(\d+)\s*[xX]\s*(\d+)\s*", value)
    if not match:
        raise ValueError("Invalid size %r, expected WIDTHxHEIGHT" % value)
    return int(match.group(1)), int(match.group(2))


@define(frozen=True)
class Config:
    """
    Options of the per-document pipeline and the exporter.

    .. py:attribute:: metadata_name

        Name of the solid-color fill layer holding the color.

    .. py:attribute:: sizes

        Allowed (width, height) canvas sizes. Empty allows any size.

    .. py:attribute:: quantize

        Whether written PNGs are recompressed with pngquant.

    .. py:attribute:: pngquant

        pngquant executable.

    .. py:attribute:: quality

        pngquant quality range, ``MIN-MAX``.

    .. py:attribute:: speed

        pngquant speed, 1 (slowest) to 11.
    """

    metadata_name: str = METADATA_LAYER_NAME
    sizes: tuple[tuple[int, int], ...] = field(default=(), converter=_to_sizes)
    quantize: bool = True
    pngquant: str = "pngquant"
    quality: str = field(default="0-100", validator=_check_quality)
    speed: int = field(default=1, validator=range_(1, 11))

    def allows(self, width: int, height: int) -> bool:
        """Return True if the canvas size is allowed."""
        return not self.sizes or (width, height) in self.sizes
