import pytest

from layer.geometry import resolve_origin, resolve_padding, resolve_text_align_x


@pytest.mark.parametrize(
    "padding, expected",
    [
        (0, (0, 0, 0, 0)),
        (5, (5, 5, 5, 5)),
        ([4], (4, 4, 4, 4)),
        ([2, 6], (2, 6, 2, 6)),
        ([1, 2, 3], (1, 2, 3, 2)),
        ([1, 2, 3, 4], (1, 2, 3, 4)),
        ((1, 2, 3, 4, 5), (1, 2, 3, 4)),
        ("7", (7, 7, 7, 7)),
        ("1 2 3", (1, 2, 3, 2)),
        ("  10   20 ", (10, 20, 10, 20)),
        ("1 2 3 4", (1, 2, 3, 4)),
    ],
)
def test_resolve_padding_shorthand(padding, expected):
    assert resolve_padding(padding) == expected


def test_resolve_padding_empty_sequence_is_zero():
    assert resolve_padding([]) == (0, 0, 0, 0)


@pytest.mark.parametrize(
    "origin, box",
    [
        ("top left", (100, 100)),
        ("top center", (75, 100)),
        ("top right", (50, 100)),
        ("center left", (100, 90)),
        ("center", (75, 90)),
        ("center right", (50, 90)),
        ("bottom left", (100, 80)),
        ("bottom center", (75, 80)),
        ("bottom right", (50, 80)),
    ],
)
def test_resolve_origin_all_anchors(origin, box):
    box_x, box_y, text_x, text_y = resolve_origin(origin, 100, 100, 0, 0, 50, 20)
    assert (box_x, box_y) == box
    assert (text_x, text_y) == box


def test_resolve_origin_offsets_text_by_padding():
    box_x, box_y, text_x, text_y = resolve_origin("bottom right", 200, 100, 8, 4, 60, 30)
    assert (box_x, box_y) == (140, 70)
    assert (text_x, text_y) == (148, 74)


def test_resolve_origin_unknown_keyword_keeps_top_left():
    assert resolve_origin("middle", 10, 20, 1, 2, 50, 20) == (10, 20, 11, 22)


@pytest.mark.parametrize(
    "align, expected",
    [
        ("left", 10),
        ("start", 10),
        ("right", 110),
        ("end", 110),
        ("center", 60),
        ("justify", 10),
    ],
)
def test_resolve_text_align_x(align, expected):
    assert resolve_text_align_x(align, 10, 100) == expected
