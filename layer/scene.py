import json
from pathlib import Path
from typing import Any, Dict, List, Union

from layer.canvas import Style
from layer.commands import COMMANDS_BY_TAG, DrawCommand
from layer.document import LayerDocument
from utils.exceptions import ValidationError
from utils.logging import log_message

BUILDER_METHODS = {
    "text": "add_text",
    "multiline": "add_multiline_text",
    "rect": "add_rect",
    "rect-outline": "add_rect_outline",
    "circle": "add_circle",
    "circle-outline": "add_circle_outline",
    "line": "add_line",
    "polygon": "add_polygon",
    "polygon-outline": "add_polygon_outline",
    "text-box": "add_text_box",
    "text-box-outline": "add_text_box_outline",
    "multiline-box": "add_multiline_text_box",
    "multiline-box-outline": "add_multiline_text_box_outline",
    "image": "add_image",
    "start-shadow": "start_shadow",
    "end-shadow": "end_shadow",
    "start-blur": "start_blur",
    "end-blur": "end_blur",
}
STYLE_KEYS = ("color", "font_color")
GRADIENT_FACTORIES = {
    "linear": "create_linear_gradient",
    "radial": "create_radial_gradient",
    "conic": "create_conic_gradient",
}


def load_scene(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Reads a scene file: a JSON list of {"type": <command>, ...builder arguments}.

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file is not a list of command objects
    """
    scene_path = Path(path)
    if not scene_path.is_file():
        raise FileNotFoundError(f"Scene file not found: {scene_path}")
    try:
        entries = json.loads(scene_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(f"Scene file is not valid JSON: {e}") from e
    if not isinstance(entries, list):
        raise ValidationError("Scene file must contain a list of commands.")
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict) or "type" not in entry:
            raise ValidationError(f"Scene entry {index} must be an object with a 'type'.")
        if entry["type"] not in COMMANDS_BY_TAG:
            raise ValidationError(f"Scene entry {index} has unknown type '{entry['type']}'.")
    return entries


def resolve_style(document: LayerDocument, value: Any) -> Style:
    """
    Turns a scene style into a color string or gradient handle.

    Gradients are written as {"gradient": "linear", "args": [x1, y1, x2, y2],
    "stops": [[0, "#777"], [1, "#555"]]}.
    """
    if not isinstance(value, dict):
        return value
    factory_name = GRADIENT_FACTORIES.get(value.get("gradient"))
    if factory_name is None:
        raise ValidationError(f"Unknown gradient kind: {value.get('gradient')!r}")
    gradient = getattr(document, factory_name)(*value.get("args", []))
    for offset, color in value.get("stops", []):
        gradient.add_color_stop(offset, color)
    return gradient


async def build_scene(document: LayerDocument, entries: List[Dict[str, Any]]) -> List[DrawCommand]:
    """
    Records every scene entry on the document, in order.

    Raises:
        ValidationError: If an entry has arguments the builder does not accept
        InvalidGeometryError: If a polygon point list is malformed
        ImageDecodeError: If an image entry cannot be decoded
    """
    commands = []
    for index, entry in enumerate(entries):
        kwargs = dict(entry)
        tag = kwargs.pop("type")
        for key in STYLE_KEYS:
            if key in kwargs:
                kwargs[key] = resolve_style(document, kwargs[key])
        builder = getattr(document, BUILDER_METHODS[tag])
        try:
            if tag in ("polygon", "polygon-outline"):
                points = kwargs.pop("points", [])
                command = builder(kwargs.pop("color"), *points, **kwargs)
            elif tag == "image":
                command = await builder(**kwargs)
            else:
                command = builder(**kwargs)
        except (TypeError, KeyError) as e:
            raise ValidationError(f"Invalid arguments for scene entry {index} ('{tag}'): {e}") from e
        commands.append(command)
    log_message(f"Built scene with {len(commands)} commands", verbose=document.config.verbose)
    return commands
