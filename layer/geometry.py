import re
from typing import Sequence, Tuple, Union

PaddingSpec = Union[int, float, str, Sequence[float]]

DEFAULT_ORIGIN = "top left"


def resolve_padding(padding: PaddingSpec) -> Tuple[float, float, float, float]:
    """
    Normalizes a CSS-style padding shorthand into explicit sides.

    Args:
        padding: A single number, a sequence of 1-4 numbers, or a string of
                 whitespace-separated numbers (e.g. "10 20").

    Returns:
        Tuple of (top, right, bottom, left)
    """
    top = right = bottom = left = 0
    if isinstance(padding, str):
        padding = [float(value) for value in re.split(r"\s+", padding.strip()) if value]

    if isinstance(padding, (int, float)):
        top = right = bottom = left = padding
    elif padding is not None:
        values = list(padding)
        if len(values) == 1:
            top = right = bottom = left = values[0]
        elif len(values) == 2:
            top = bottom = values[0]
            right = left = values[1]
        elif len(values) == 3:
            top = values[0]
            right = left = values[1]
            bottom = values[2]
        elif len(values) >= 4:
            top, right, bottom, left = values[:4]

    return top, right, bottom, left


def resolve_origin(
    origin: str,
    x: float,
    y: float,
    padding_left: float,
    padding_top: float,
    width: float,
    height: float,
) -> Tuple[float, float, float, float]:
    """
    Places a box relative to an anchor point.

    The anchor (x, y) is interpreted according to the origin keyword, e.g.
    "bottom right" means (x, y) is the bottom right corner of the box.
    Horizontal and vertical keywords are evaluated independently. Unknown
    keywords leave the box at its top left default.

    Args:
        origin: One of the nine box origin keywords
        x: Anchor X coordinate
        y: Anchor Y coordinate
        padding_left: Left padding added to the text start
        padding_top: Top padding added to the text start
        width: Box width including padding
        height: Box height including padding

    Returns:
        Tuple of (box_x, box_y, text_x, text_y)
    """
    box_x = x
    box_y = y
    text_x = x + padding_left
    text_y = y + padding_top
    if isinstance(origin, str):
        if "right" in origin:
            box_x = x - width
            text_x = box_x + padding_left
        if origin.endswith("center"):
            box_x = x - width / 2
            text_x = box_x + padding_left
        if "bottom" in origin:
            box_y = y - height
            text_y = box_y + padding_top
        if origin.startswith("center"):
            box_y = y - height / 2
            text_y = box_y + padding_top
    return box_x, box_y, text_x, text_y


def resolve_text_align_x(text_align: str, x: float, width: float) -> float:
    """Returns the x coordinate text must be drawn at for the given alignment inside [x, x + width]."""
    if text_align in ("right", "end"):
        return x + width
    if text_align == "center":
        return x + width / 2
    return x
