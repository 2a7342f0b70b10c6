"""
Effective visibility of layers.

A layer is rendered only when it and every one of its ancestors are shown. A
single hidden or fully transparent group hides its whole subtree, whatever
the flags of its children are.
"""

import logging

from rtpng.errors import StructuralError
from rtpng.layers import Layer

logger = logging.getLogger(__name__)


def _is_shown(layer: Layer) -> bool:
    return layer.visible and layer.opacity != 0


def is_visible(layer: Layer) -> bool:
    """
    Layer visibility. Takes group visibility in account.

    Groups themselves are never visible; only their content is rendered.

    :param layer: :py:class:`~rtpng.layers.Layer`
    :return: `bool`
    :raises StructuralError: If the ancestor chain contains a cycle.
    """
    if layer.is_group() or not _is_shown(layer):
        return False

    seen = {id(layer)}
    node = layer.parent
    while node is not None:
        if id(node) in seen:
            raise StructuralError(
                "Cyclic ancestor chain at %r from %r" % (node.name, layer.name)
            )
        seen.add(id(node))
        if not _is_shown(node):
            logger.debug("%r is hidden by %r" % (layer, node))
            return False
        node = node.parent
    return True
