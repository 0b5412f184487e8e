import re
from dataclasses import dataclass
from typing import Callable, List, Optional

PARAGRAPH_SPLIT = re.compile(r"\r?\n")


@dataclass(frozen=True)
class LinePlacement:
    """A run of text positioned by the layout engine, ready to be painted."""

    text: str
    x: float
    y: float
    is_bullet: bool = False


def layout_text(
    text: str,
    measure: Callable[[str], float],
    x: float,
    y: float,
    max_width: float,
    max_height: Optional[float],
    line_height: float,
    bullet: Optional[str] = None,
    bullet_width: float = 0.0,
) -> List[LinePlacement]:
    """
    Greedy word wrap of text inside a bounded box.

    Paragraphs are separated by newlines and empty paragraphs are skipped
    without consuming vertical space. Words are accumulated onto a line until
    the measured width of the candidate line exceeds max_width; the first word
    of a paragraph is never wrapped, even if it overflows on its own. Layout
    stops silently once the next line would start below the box.

    Args:
        text: Text to lay out
        measure: Returns the rendered width of a string in the active font
        x: Left edge (or alignment anchor) of every line
        y: Top of the first line
        max_width: Maximum line width
        max_height: Maximum height of the text block, None for unbounded
        line_height: Vertical advance per line
        bullet: Optional glyph painted before the first line of each paragraph
        bullet_width: Measured width of the bullet; all lines are shifted by it

    Returns:
        List of LinePlacement in paint order
    """
    placements: List[LinePlacement] = []
    end_y = None if max_height is None else y + max_height - line_height
    offset = bullet_width if bullet else 0.0

    for paragraph in PARAGRAPH_SPLIT.split(text):
        if paragraph == "":
            continue
        words = paragraph.split(" ")
        line = ""
        bullet_pending = bool(bullet)

        for index, word in enumerate(words):
            candidate = line + word + " "
            if measure(candidate) > max_width and index > 0:
                if bullet_pending:
                    placements.append(LinePlacement(bullet, x, y, is_bullet=True))
                    bullet_pending = False
                placements.append(LinePlacement(line, x + offset, y))
                line = word + " "
                y += line_height
                if end_y is not None and y > end_y:
                    return placements
            else:
                line = candidate

        if bullet_pending:
            placements.append(LinePlacement(bullet, x, y, is_bullet=True))
        placements.append(LinePlacement(line, x + offset, y))
        y += line_height
        if end_y is not None and y > end_y:
            return placements

    return placements
