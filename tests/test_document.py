import asyncio
import dataclasses

import pytest

from layer.canvas import Gradient, PaintEffects
from layer.commands import (
    EndShadowCommand,
    ImageCommand,
    PolygonCommand,
    RectCommand,
    StartShadowCommand,
    TextBoxCommand,
)
from layer.config import LayerConfig
from layer.document import LayerDocument
from layer.image_loader import LoadedImage
from utils.exceptions import ImageDecodeError, InvalidGeometryError, ValidationError


def test_widescreen_dimensions():
    document = LayerDocument(widescreen=True)
    assert (document.width, document.height) == (1280, 720)


def test_default_is_widescreen():
    assert LayerDocument().height == 720


def test_standard_dimensions():
    document = LayerDocument.create(widescreen=False)
    assert (document.width, document.height) == (1280, 960)


def test_config_sets_dimensions():
    document = LayerDocument(config=LayerConfig(widescreen=False))
    assert document.height == 960
    assert document.widescreen is False


def test_config_matching_widescreen_is_accepted():
    document = LayerDocument(widescreen=False, config=LayerConfig(widescreen=False))
    assert document.height == 960


def test_widescreen_conflicting_with_config_fails():
    with pytest.raises(ValidationError, match="conflicts"):
        LayerDocument(widescreen=False, config=LayerConfig())


def test_builders_append_in_call_order(document):
    rect = document.add_rect(0, 0, 10, 10, "#fff")
    shadow = document.start_shadow(7, 2, 2, "#555")
    text = document.add_text("hi", "16px Arial", "#000", 5, 5)
    end = document.end_shadow()

    assert document.commands == (rect, shadow, text, end)
    assert [command.type for command in document.commands] == ["rect", "start-shadow", "text", "end-shadow"]
    assert isinstance(shadow, StartShadowCommand)
    assert isinstance(end, EndShadowCommand)


def test_builder_defaults(document):
    rect = document.add_rect(0, 0, 10, 10, "#fff")
    outline = document.add_rect_outline(0, 0, 10, 10, "#fff")
    line = document.add_line(0, 0, 10, 10, "#fff")
    box = document.add_text_box("Martin", "bold 16px Arial", "#fff", 640, 360, "#0000007f")

    assert rect.radius == 0
    assert (outline.line_width, outline.radius) == (1, 0)
    assert line.line_width == 1
    assert isinstance(box, TextBoxCommand)
    assert (box.origin, box.padding, box.max_width, box.radius) == ("top left", 0, None, 0)


def test_commands_are_immutable(document):
    rect = document.add_rect(0, 0, 10, 10, "#fff")
    with pytest.raises(dataclasses.FrozenInstanceError):
        rect.x = 5


def test_list_padding_is_stored_as_tuple(document):
    box = document.add_text_box("A", "16px Arial", "#fff", 0, 0, "#000", padding=[4, 8])
    assert box.padding == (4, 8)


def test_commands_view_is_a_copy(document):
    document.add_rect(0, 0, 10, 10, "#fff")
    view = document.commands
    document.add_circle(5, 5, 2, "#fff")
    assert len(view) == 1
    assert len(document) == 2


def test_polygon_with_three_points(document):
    polygon = document.add_polygon("#fff", 0, 0, 10, 0, 5, 5)
    assert isinstance(polygon, PolygonCommand)
    assert polygon.points == (0, 0, 10, 0, 5, 5)


def test_polygon_accepts_point_pairs(document):
    outline = document.add_polygon_outline("#fff", (0, 0), (10, 0), (5, 5), line_width=3)
    assert outline.points == (0, 0, 10, 0, 5, 5)
    assert outline.line_width == 3


def test_polygon_with_two_points_fails(document):
    with pytest.raises(InvalidGeometryError, match="at least have 3"):
        document.add_polygon("#fff", 0, 0, 10, 0)
    assert len(document) == 0


def test_polygon_with_odd_count_fails(document):
    with pytest.raises(InvalidGeometryError, match="even"):
        document.add_polygon("#fff", 0, 0, 10, 0, 5)
    with pytest.raises(InvalidGeometryError):
        document.add_polygon_outline("#fff", 0, 0, 10, 0, 5)
    assert len(document) == 0


def test_clear_keeps_dimensions():
    document = LayerDocument(widescreen=False)
    document.add_rect(0, 0, 10, 10, "#fff")
    document.add_circle(5, 5, 2, "#fff")
    document.clear()
    assert document.commands == ()
    assert (document.width, document.height) == (1280, 960)


def test_gradient_is_stored_as_handle(document):
    gradient = document.create_linear_gradient(0, 400, 0, 600)
    gradient.add_color_stop(0, "#777").add_color_stop(1, "#555")
    rect = document.add_rect(0, 0, 10, 10, gradient)
    assert rect.color is gradient
    assert gradient.stops == [(0.0, "#777"), (1.0, "#555")]


def test_gradient_stop_offset_must_be_in_range(document):
    gradient = document.create_radial_gradient(0, 0, 0, 10, 10, 20)
    with pytest.raises(ValueError):
        gradient.add_color_stop(1.5, "#fff")


def test_gradient_base_class_is_abstract():
    with pytest.raises(TypeError):
        Gradient()


@pytest.mark.parametrize(
    "effects, expected",
    [
        (PaintEffects(), False),
        (PaintEffects(shadow_color="#000"), False),
        (PaintEffects(shadow_blur=4, shadow_color="#00000000"), False),
        (PaintEffects(shadow_blur=4, shadow_color="#000"), True),
        (PaintEffects(shadow_offset_x=-2, shadow_color="#000"), True),
        (PaintEffects(shadow_offset_y=3, shadow_color="#00000080"), True),
    ],
)
def test_shadow_needs_visible_color_and_blur_or_offset(effects, expected):
    assert effects.has_shadow is expected


def test_add_image_appends_after_decode(document, png_bytes):
    command = asyncio.run(document.add_image(png_bytes, 10, 20))

    assert isinstance(command, ImageCommand)
    assert document.commands == (command,)
    assert (command.image.width, command.image.height) == (4, 3)
    assert (command.width, command.height) == (None, None)


def test_add_image_from_path(document, png_bytes, tmp_path):
    path = tmp_path / "logo.png"
    path.write_bytes(png_bytes)

    command = asyncio.run(document.add_image(str(path), 0, 0, 40, 30))

    assert (command.width, command.height) == (40, 30)


def test_add_image_reuses_loaded_image(document, png_bytes):
    loaded = asyncio.run(document.load_image(png_bytes))
    command = asyncio.run(document.add_image(loaded, 0, 0))

    assert isinstance(loaded, LoadedImage)
    assert command.image is loaded


def test_add_image_decode_failure_leaves_document_unchanged(document):
    document.add_rect(0, 0, 10, 10, "#fff")
    with pytest.raises(ImageDecodeError):
        asyncio.run(document.add_image(b"not an image", 0, 0))
    assert [command.type for command in document.commands] == ["rect"]


def test_add_image_missing_file_fails(document, tmp_path):
    with pytest.raises(ImageDecodeError):
        asyncio.run(document.add_image(tmp_path / "missing.png", 0, 0))
    assert len(document) == 0


def test_blur_markers(document):
    start = document.start_blur(4)
    end = document.end_blur()
    assert (start.type, start.radius) == ("start-blur", 4)
    assert end.type == "end-blur"


def test_rect_command_fields(document):
    rect = document.add_rect(1, 2, 3, 4, "#abc", radius=5)
    assert rect == RectCommand(1, 2, 3, 4, "#abc", 5)
