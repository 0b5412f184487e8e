import asyncio
import json

import pytest

from layer.canvas import LinearGradient
from layer.scene import build_scene, load_scene
from utils.exceptions import InvalidGeometryError, ValidationError


def write_scene(tmp_path, entries):
    path = tmp_path / "scene.json"
    path.write_text(json.dumps(entries), encoding="utf-8")
    return path


def test_build_scene_records_commands(document, tmp_path):
    path = write_scene(
        tmp_path,
        [
            {"type": "rect", "x": 0, "y": 0, "width": 1280, "height": 720, "color": "#8c0e0d"},
            {"type": "start-shadow", "blur": 7, "offset_x": 2, "offset_y": 2, "color": "#555"},
            {
                "type": "text-box",
                "text": "Martin",
                "font": "bold 16px Arial",
                "font_color": "#fff",
                "x": 640,
                "y": 360,
                "origin": "bottom right",
                "padding": [10],
                "color": {"gradient": "linear", "args": [0, 0, 0, 100], "stops": [[0, "#777"], [1, "#555"]]},
            },
            {"type": "end-shadow"},
            {"type": "polygon", "color": "#fff", "points": [0, 0, 10, 0, 5, 5]},
        ],
    )

    commands = asyncio.run(build_scene(document, load_scene(path)))

    assert [command.type for command in commands] == ["rect", "start-shadow", "text-box", "end-shadow", "polygon"]
    assert isinstance(commands[2].color, LinearGradient)
    assert commands[2].padding == (10,)
    assert document.commands == tuple(commands)


def test_scene_image_entry(document, tmp_path, png_bytes):
    image_path = tmp_path / "logo.png"
    image_path.write_bytes(png_bytes)
    path = write_scene(tmp_path, [{"type": "image", "source": str(image_path), "x": 1, "y": 2}])

    commands = asyncio.run(build_scene(document, load_scene(path)))

    assert commands[0].image.width == 4


def test_scene_must_be_list(tmp_path):
    with pytest.raises(ValidationError):
        load_scene(write_scene(tmp_path, {"type": "rect"}))


def test_scene_unknown_type(tmp_path):
    with pytest.raises(ValidationError, match="unknown type"):
        load_scene(write_scene(tmp_path, [{"type": "hexagon"}]))


def test_scene_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_scene(tmp_path / "missing.json")


def test_scene_bad_arguments(document):
    with pytest.raises(ValidationError, match="'rect'"):
        asyncio.run(build_scene(document, [{"type": "rect", "x": 0}]))


def test_scene_bad_polygon(document):
    with pytest.raises(InvalidGeometryError):
        asyncio.run(build_scene(document, [{"type": "polygon", "color": "#fff", "points": [0, 0, 1, 1]}]))
