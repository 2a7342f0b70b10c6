"""
Validation functions for attrs.
"""
from attrs import define
from attrs.validators import instance_of

__all__ = ["instance_of", "range_", "bbox_"]


@define(repr=False, hash=True)
class _RangeValidator:
    minimum: int
    maximum: int

    def __call__(self, inst, attr, value):
        try:
            in_range = self.minimum <= value <= self.maximum
        except TypeError:
            in_range = False

        if isinstance(value, bool) or not in_range:
            raise ValueError(
                "'{name}' must be in range [{minimum!r}, {maximum!r}], got {value!r}".format(
                    name=attr.name,
                    minimum=self.minimum,
                    maximum=self.maximum,
                    value=value,
                )
            )

    def __repr__(self):
        return "<range_ validator with [{minimum!r}, {maximum!r}]>".format(
            minimum=self.minimum, maximum=self.maximum
        )


def range_(minimum, maximum):
    """
    A validator that raises a :exc:`ValueError` if the initializer is called
    with a value that does not belong in the [minimum, maximum] range. The
    check is performed using ``minimum <= value and value <= maximum``
    """
    return _RangeValidator(minimum, maximum)


def bbox_(inst, attr, value):
    """
    A validator for (left, top, right, bottom) integer tuples. Inverted boxes
    are rejected; empty boxes are allowed.
    """
    if len(value) != 4 or not all(isinstance(x, int) for x in value):
        raise ValueError(
            "'{name}' must be 4 integers, got {value!r}".format(
                name=attr.name, value=value
            )
        )
    left, top, right, bottom = value
    if right < left or bottom < top:
        raise ValueError(
            "'{name}' is inverted: {value!r}".format(name=attr.name, value=value)
        )
