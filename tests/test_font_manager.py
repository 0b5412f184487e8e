import pytest

from layer.text.font_manager import get_skia_font, parse_font
from utils.exceptions import FontError


def test_parse_simple_font():
    spec = parse_font("16px Arial, sans-serif")
    assert spec.size == 16
    assert spec.families == ("Arial", "sans-serif")
    assert (spec.weight, spec.italic) == (400, False)


def test_parse_bold_italic_quoted_family():
    spec = parse_font('italic bold 20px "Comic Sans MS", sans-serif')
    assert spec.size == 20
    assert spec.families == ("Comic Sans MS", "sans-serif")
    assert (spec.weight, spec.italic) == (700, True)


def test_parse_numeric_weight_and_points():
    spec = parse_font("300 12pt Helvetica")
    assert spec.weight == 300
    assert spec.size == pytest.approx(16)


def test_parse_ignores_line_height():
    assert parse_font("16px/1.5 Arial").size == 16


@pytest.mark.parametrize("font", ["", "Arial", "bold Arial", "16px", 16])
def test_parse_invalid_font(font):
    with pytest.raises(FontError):
        parse_font(font)


def test_skia_fonts_are_cached_per_font_string():
    get_skia_font.cache_clear()
    font = get_skia_font("bold 18px sans-serif")
    assert get_skia_font("bold 18px sans-serif") is font
    assert get_skia_font.cache_info().hits == 1
    assert font.getSize() == 18
