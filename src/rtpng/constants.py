"""
Various constants for rtpng
"""
from enum import Enum


class Kind(Enum):
    """
    Content kind of a layer.
    """

    RASTER = "raster"
    SOLID_FILL = "solidfill"
    TEXT = "text"
    SHAPE = "shape"
    GROUP = "group"
    UNSPECIFIED = "unspecified"


#: Reserved name of the solid-color fill layer holding the output color.
METADATA_LAYER_NAME = "color"

#: Keys of the solid-color fill attribute bag.
COLOR_KEY = "Clr"
RED_KEY = "Rd"
GREEN_KEY = "Grn"
BLUE_KEY = "Bl"

#: Fully opaque alpha value of a raster buffer.
OPAQUE = 255

#: Number of channels of a raster buffer (RGBA).
CHANNELS = 4

#: Suffix of the flattened preview image.
MERGED_SUFFIX = "MERGED"

#: pngquant exit statuses that leave the input untouched.
PNGQUANT_SKIPPED = (98, 99)
