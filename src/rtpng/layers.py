"""
Layer module.

This module defines the in-memory layer tree the engine works on. Layers are
built once per document by :py:mod:`rtpng.document` (or directly in tests)
and are read-only afterwards.

Layer hierarchy:

Layers are organized in a tree where groups own an ordered list of children,
bottom-to-top. A child keeps a weak reference to its parent; a layer without
a parent is a root layer of the document::

    group = Layer.group("Header", [
        Layer("Background", bbox=(0, 0, 570, 363)),
        Layer("Logo", bbox=(10, 10, 110, 60)),
    ])
    for layer in group.descendants():
        print(layer.name, layer.parent.name)

Common layer properties:

- ``name``: Layer name
- ``kind``: :py:class:`~rtpng.constants.Kind` of the content
- ``visible``: Own visibility flag, see :py:func:`rtpng.visibility.is_visible`
- ``opacity``: Opacity (0-100)
- ``bbox``: Bounding box (left, top, right, bottom) in canvas coordinates
- ``fill``: Attribute bag of solid-color fill layers
- ``parent``: Parent group, or `None`
"""

import logging
import weakref
from typing import Any, Iterable, Iterator, Optional

from attrs import define, field

from rtpng.constants import Kind
from rtpng.errors import StructuralError
from rtpng.validators import bbox_, instance_of, range_

logger = logging.getLogger(__name__)


@define(eq=False, repr=False)
class Layer:
    """
    Node of the layer tree.

    .. py:attribute:: name
    .. py:attribute:: kind
    .. py:attribute:: bbox
    .. py:attribute:: visible
    .. py:attribute:: opacity
    .. py:attribute:: layer_id
    .. py:attribute:: fill
    .. py:attribute:: children
    """

    name: str = "Layer"
    kind: Kind = field(default=Kind.RASTER, validator=instance_of(Kind))
    bbox: tuple[int, int, int, int] = field(
        default=(0, 0, 0, 0), converter=tuple, validator=bbox_
    )
    visible: bool = True
    opacity: int = field(default=100, validator=range_(0, 100))
    layer_id: int = -1
    fill: Optional[dict[str, Any]] = None
    children: list["Layer"] = field(factory=list)
    _parent: Optional["weakref.ReferenceType[Layer]"] = field(
        default=None, init=False
    )

    def __attrs_post_init__(self) -> None:
        children, self.children = self.children, []
        for child in children:
            self.append(child)

    @classmethod
    def group(
        cls, name: str = "Group", children: Iterable["Layer"] = (), **kwargs: Any
    ) -> "Layer":
        """
        Create a group layer owning the given children.

        :param name: The name of the group.
        :param children: Child layers, bottom-to-top.
        :return: A :py:class:`Layer` of :py:attr:`Kind.GROUP`.
        """
        return cls(name=name, kind=Kind.GROUP, children=list(children), **kwargs)

    @property
    def parent(self) -> Optional["Layer"]:
        """Parent group of this layer, or `None` for a root layer."""
        if self._parent is None:
            return None
        return self._parent()

    def append(self, layer: "Layer") -> None:
        """
        Add a layer on top of the children of this group.

        :param layer: The layer to attach.
        :raises ValueError: If this layer is not a group.
        """
        if not self.is_group():
            raise ValueError("Only a group can have children: %r" % self)
        layer._parent = weakref.ref(self)
        self.children.append(layer)

    def is_group(self) -> bool:
        """Return True if this is a group."""
        return self.kind == Kind.GROUP

    def descendants(self) -> Iterator["Layer"]:
        """
        Return a generator to iterate over all descendant layers, each group
        followed by its children, bottom-to-top.

        :raises StructuralError: If a layer is reachable twice.
        """
        seen = {id(self)}
        stack = [iter(self.children)]
        while stack:
            layer = next(stack[-1], None)
            if layer is None:
                stack.pop()
                continue
            if id(layer) in seen:
                raise StructuralError("Layer %r appears twice in the tree" % layer.name)
            seen.add(id(layer))
            yield layer
            if layer.children:
                stack.append(iter(layer.children))

    @property
    def left(self) -> int:
        return self.bbox[0]

    @property
    def top(self) -> int:
        return self.bbox[1]

    @property
    def right(self) -> int:
        return self.bbox[2]

    @property
    def bottom(self) -> int:
        return self.bbox[3]

    @property
    def width(self) -> int:
        """Width of the layer."""
        return self.right - self.left

    @property
    def height(self) -> int:
        """Height of the layer."""
        return self.bottom - self.top

    @property
    def offset(self) -> tuple[int, int]:
        """(left, top) tuple."""
        return self.left, self.top

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) tuple."""
        return self.width, self.height

    def is_empty(self) -> bool:
        """Return True if the bounding box has no area."""
        return self.width == 0 or self.height == 0

    def __repr__(self) -> str:
        return "%s(%r kind=%s size=%dx%d%s%s)" % (
            self.__class__.__name__,
            self.name,
            self.kind.value,
            self.width,
            self.height,
            "" if self.visible else " hidden",
            " opacity=%d" % self.opacity if self.opacity != 100 else "",
        )


@define(frozen=True)
class KeptLayer:
    """
    Layer that survived occlusion pruning.

    .. py:attribute:: layer

        Source :py:class:`Layer`.

    .. py:attribute:: index

        1-based output number, or 0 for a sole unnumbered survivor.
    """

    layer: Layer
    index: int = field(validator=range_(0, 2**31 - 1))

    @property
    def name(self) -> str:
        return self.layer.name
