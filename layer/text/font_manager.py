import os
import re
import threading
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Tuple, Union

import skia

from utils.exceptions import FontError
from utils.logging import log_message

FontSource = Union[str, os.PathLike, bytes, bytearray]

# Typefaces registered under an alias (process wide, like CSS @font-face)
_registered_typefaces: Dict[str, skia.Typeface] = {}
_font_lock = threading.RLock()

GENERIC_FAMILIES = {"serif", "sans-serif", "monospace", "cursive", "fantasy", "system-ui"}
FONT_WEIGHTS = {
    "normal": 400,
    "bold": 700,
    "bolder": 800,
    "lighter": 300,
}
FONT_STYLES = {"normal", "italic", "oblique"}
FONT_SIZE_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)(px|pt)(?:/\S+)?$")
PT_TO_PX = 4.0 / 3.0


@dataclass(frozen=True)
class FontSpec:
    """Parsed CSS font shorthand, e.g. 'bold 16px Arial, sans-serif'."""

    size: float
    families: Tuple[str, ...]
    weight: int = 400
    italic: bool = False


def parse_font(font: str) -> FontSpec:
    """
    Parses a CSS font shorthand string.

    Supports an optional style (italic/oblique), weight (keyword or 100-900),
    a size in px or pt (optionally followed by '/line-height', which is
    ignored) and a comma separated family list.

    Args:
        font: CSS font string

    Returns:
        FontSpec

    Raises:
        FontError: If the string has no size or no family
    """
    if not isinstance(font, str) or not font.strip():
        raise FontError(f"Invalid font string: {font!r}")

    tokens = font.strip().split()
    weight = 400
    italic = False
    size = None
    family_index = None
    for index, token in enumerate(tokens):
        lowered = token.lower()
        size_match = FONT_SIZE_PATTERN.match(lowered)
        if size_match:
            size = float(size_match.group(1))
            if size_match.group(2) == "pt":
                size *= PT_TO_PX
            family_index = index + 1
            break
        if lowered in FONT_STYLES:
            italic = italic or lowered != "normal"
        elif lowered in FONT_WEIGHTS:
            weight = FONT_WEIGHTS[lowered]
        elif lowered.isdigit() and 100 <= int(lowered) <= 900:
            weight = int(lowered)
        # font-variant / font-stretch keywords are accepted and ignored

    if size is None or family_index is None:
        raise FontError(f"Font string has no size: {font!r}")

    family_text = " ".join(tokens[family_index:])
    families = tuple(
        name.strip().strip("\"'") for name in family_text.split(",") if name.strip().strip("\"'")
    )
    if not families:
        raise FontError(f"Font string has no family: {font!r}")

    return FontSpec(size=size, families=families, weight=weight, italic=italic)


def _match_typeface(spec: FontSpec) -> skia.Typeface:
    """Finds the first available typeface in the family list."""
    slant = skia.FontStyle.Slant.kItalic_Slant if spec.italic else skia.FontStyle.Slant.kUpright_Slant
    style = skia.FontStyle(spec.weight, skia.FontStyle.Width.kNormal_Width, slant)
    font_mgr = skia.FontMgr()
    for family in spec.families:
        registered = _registered_typefaces.get(family)
        if registered is not None:
            return registered
        if family.lower() in GENERIC_FAMILIES:
            continue
        typeface = font_mgr.matchFamilyStyle(family, style)
        if typeface is not None:
            return typeface
    # Fall back to the platform default for the requested style
    return skia.Typeface("", style)


@lru_cache(maxsize=50)
def get_skia_font(font: str) -> skia.Font:
    """
    Returns a cached skia.Font for a CSS font string.

    Raises:
        FontError: If the font string cannot be parsed
    """
    with _font_lock:
        spec = parse_font(font)
        skia_font = skia.Font(_match_typeface(spec), spec.size)
        skia_font.setSubpixel(True)
        return skia_font


def load_font_data(source: FontSource) -> bytes:
    """
    Reads raw font bytes from a path or returns the given bytes.

    Raises:
        FontError: If the file cannot be read
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    try:
        return Path(source).read_bytes()
    except OSError as e:
        raise FontError(f"Failed to read font file {source}: {e}") from e


def register_font(source: FontSource, alias: str) -> bool:
    """
    Registers a font file or raw font bytes under an alias usable as a
    family name in font strings.

    Args:
        source: Path to a .ttf/.otf file, or the raw font bytes
        alias: Family name to register the font under

    Returns:
        True if the alias is (now) registered, False if the font could not be loaded
    """
    with _font_lock:
        if alias in _registered_typefaces:
            return True
        try:
            font_data = load_font_data(source)
        except FontError as e:
            log_message(f"Font registration failed for '{alias}': {e}", always_print=True)
            return False

        typeface = skia.Typeface.MakeFromData(skia.Data.MakeWithCopy(font_data))
        if typeface is None:
            log_message(f"Skia could not load typeface for '{alias}'", always_print=True)
            return False

        _registered_typefaces[alias] = typeface
        # Cached fonts may have resolved this alias to a fallback typeface
        get_skia_font.cache_clear()
        return True
