"""
Occlusion pruning.

Layers are walked once, bottom-to-top. When a layer covers the whole canvas
with fully opaque pixels, nothing drawn before it can show through, so the
layers kept so far are dropped and the opaque layer becomes the new bottom::

    [opaque, a, opaque, b]  ->  [opaque, b]

The decision for each layer only depends on its own pixels, never on the
accumulation of the layers below it.
"""

import logging
from typing import Iterable

from rtpng import utils
from rtpng.composite import Fetch, fetch_content, is_opaque, paste
from rtpng.constants import Kind
from rtpng.errors import UnsupportedContentError
from rtpng.layers import KeptLayer, Layer
from rtpng.visibility import is_visible

logger = logging.getLogger(__name__)

UNSUPPORTED_KINDS = {
    Kind.SHAPE: "must be rasterized beforehand",
    Kind.TEXT: "text is not supported",
}


def prune(
    layers: Iterable[Layer], width: int, height: int, fetch: Fetch
) -> list[KeptLayer]:
    """
    Return the layers that need rendering, in stacking order.

    Example::

        kept = prune(document.layers, document.width, document.height,
                     document.get_raster_content)
        for item in kept:
            print(item.index, item.layer.name)

    :param layers: Layers bottom-to-top; groups are allowed and skipped.
    :param width: Canvas width.
    :param height: Canvas height.
    :param fetch: Callable returning the pixels of a layer.
    :return: list of :py:class:`~rtpng.layers.KeptLayer`. A sole survivor
        gets index 0, otherwise layers are numbered from 1.
    :raises UnsupportedContentError: On shape or text layers.
    :raises RasterizationError: If the pixels of a layer cannot be obtained.
    :raises StructuralError: On a cyclic ancestor chain.
    """
    kept: list[Layer] = []
    for layer in layers:
        if not is_visible(layer) or layer.is_empty():
            logger.debug("Ignore %r" % layer)
            continue

        if layer.kind in UNSUPPORTED_KINDS:
            raise UnsupportedContentError(
                "%r has wrong layer kind %s: %s"
                % (layer.name, layer.kind.value, UNSUPPORTED_KINDS[layer.kind])
            )

        content = fetch_content(layer, fetch)
        scratch = paste(
            utils.new_buffer(width, height),
            layer.offset,
            content[: layer.height, : layer.width, :],
        )

        if is_opaque(scratch) and kept:
            logger.warning(
                "Layers behind %r are hidden: %s"
                % (layer.name, ", ".join(repr(x.name) for x in kept))
            )
            kept = [layer]
        else:
            kept.append(layer)

    if len(kept) == 1:
        return [KeptLayer(kept[0], 0)]
    return [KeptLayer(layer, index) for index, layer in enumerate(kept, 1)]
