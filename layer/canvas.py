import io
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import skia
from PIL import Image, ImageColor

from layer.config import OutputConfig
from layer.text.font_manager import get_skia_font
from utils.exceptions import RenderingError
from utils.logging import log_message

IMAGE_FORMATS = {
    "png": "PNG",
    "jpeg": "JPEG",
    "jpg": "JPEG",
    "webp": "WEBP",
}


@dataclass(frozen=True)
class TextMetrics:
    """Text measurement relative to a 'top' text baseline."""

    width: float
    ascent: float
    descent: float


@dataclass(frozen=True)
class PaintEffects:
    """Modal paint state that persists across commands within one render pass."""

    shadow_blur: float = 0.0
    shadow_offset_x: float = 0.0
    shadow_offset_y: float = 0.0
    shadow_color: Optional[str] = None
    blur_radius: float = 0.0

    @property
    def has_shadow(self) -> bool:
        """A shadow paints only with a visible color and a non-zero blur or offset."""
        if self.shadow_color is None:
            return False
        if self.shadow_blur <= 0 and not self.shadow_offset_x and not self.shadow_offset_y:
            return False
        return (parse_color(self.shadow_color) >> 24) & 0xFF > 0

    @property
    def has_blur(self) -> bool:
        return self.blur_radius > 0


def parse_color(color: str) -> int:
    """
    Converts a CSS color string ('#fff', '#0000007f', 'rgba(...)', 'red') to a skia color.

    Raises:
        RenderingError: If the color cannot be parsed
    """
    try:
        r, g, b, a = ImageColor.getcolor(color, "RGBA")
    except (ValueError, TypeError, AttributeError) as e:
        raise RenderingError(f"Invalid color: {color!r}") from e
    return skia.ColorSetARGB(a, r, g, b)


class Gradient(ABC):
    """
    Opaque gradient handle usable wherever a color is accepted.

    Color stops are added after creation, like a canvas gradient, and are
    shared by every command that references the handle.
    """

    def __init__(self):
        self.stops: List[Tuple[float, str]] = []

    def add_color_stop(self, offset: float, color: str) -> "Gradient":
        if not 0 <= offset <= 1:
            raise ValueError(f"Color stop offset must be between 0 and 1, got {offset}")
        self.stops.append((float(offset), color))
        return self

    def _sorted_stops(self) -> Tuple[List[int], List[float]]:
        stops = sorted(self.stops, key=lambda stop: stop[0])
        return [parse_color(color) for _, color in stops], [offset for offset, _ in stops]

    @abstractmethod
    def make_shader(self) -> Optional[skia.Shader]:
        """Builds the skia shader; only called with two or more stops."""


class LinearGradient(Gradient):
    def __init__(self, x1: float, y1: float, x2: float, y2: float):
        super().__init__()
        self.start = (x1, y1)
        self.end = (x2, y2)

    def make_shader(self) -> Optional[skia.Shader]:
        colors, positions = self._sorted_stops()
        return skia.GradientShader.MakeLinear(
            points=[skia.Point(*self.start), skia.Point(*self.end)],
            colors=colors,
            positions=positions,
        )


class RadialGradient(Gradient):
    def __init__(self, x1: float, y1: float, r1: float, x2: float, y2: float, r2: float):
        super().__init__()
        self.start = (x1, y1)
        self.start_radius = r1
        self.end = (x2, y2)
        self.end_radius = r2

    def make_shader(self) -> Optional[skia.Shader]:
        colors, positions = self._sorted_stops()
        return skia.GradientShader.MakeTwoPointConical(
            skia.Point(*self.start),
            self.start_radius,
            skia.Point(*self.end),
            self.end_radius,
            colors,
            positions,
        )


class ConicGradient(Gradient):
    def __init__(self, start_angle: float, x: float, y: float):
        super().__init__()
        self.start_angle = start_angle  # radians, clockwise from the positive x axis
        self.center = (x, y)

    def make_shader(self) -> Optional[skia.Shader]:
        colors, positions = self._sorted_stops()
        matrix = skia.Matrix()
        matrix.setRotate(math.degrees(self.start_angle), *self.center)
        return skia.GradientShader.MakeSweep(
            self.center[0],
            self.center[1],
            colors,
            positions,
            localMatrix=matrix,
        )


Style = Union[str, Gradient]


class DrawingContext:
    """
    2D drawing context backed by a skia raster surface.

    Paint attributes are passed explicitly with every call; the only state
    kept between calls is the pixel content of the surface.
    """

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.surface = skia.Surface(width, height)
        self.canvas = self.surface.getCanvas()

    # --- Paint construction ---
    def make_paint(
        self,
        style: Style,
        effects: Optional[PaintEffects] = None,
        stroke_width: Optional[float] = None,
    ) -> skia.Paint:
        """
        Builds a fill paint, or a stroke paint when stroke_width is given.

        Raises:
            RenderingError: If the style is not a valid color or gradient
        """
        paint = skia.Paint(AntiAlias=True)
        if isinstance(style, Gradient):
            # Like canvas: no stops paints nothing, a single stop is a solid color
            if not style.stops:
                paint.setColor(skia.ColorTRANSPARENT)
            elif len(style.stops) == 1:
                paint.setColor(parse_color(style.stops[0][1]))
            else:
                shader = style.make_shader()
                if shader is None:
                    raise RenderingError("Gradient has no usable color stops")
                paint.setShader(shader)
        else:
            paint.setColor(parse_color(style))

        if stroke_width is not None:
            paint.setStyle(skia.Paint.kStroke_Style)
            paint.setStrokeWidth(stroke_width)

        image_filter = self._make_image_filter(effects)
        if image_filter is not None:
            paint.setImageFilter(image_filter)
        return paint

    @staticmethod
    def _make_image_filter(effects: Optional[PaintEffects]) -> Optional[skia.ImageFilter]:
        if effects is None:
            return None
        image_filter = None
        if effects.has_blur:
            image_filter = skia.ImageFilters.Blur(effects.blur_radius, effects.blur_radius)
        if effects.has_shadow:
            # Canvas shadowBlur is twice the gaussian sigma
            sigma = max(effects.shadow_blur, 0) / 2.0
            image_filter = skia.ImageFilters.DropShadow(
                effects.shadow_offset_x,
                effects.shadow_offset_y,
                sigma,
                sigma,
                parse_color(effects.shadow_color),
                image_filter,
            )
        return image_filter

    # --- Text ---
    def measure_text(self, text: str, font: str) -> TextMetrics:
        skia_font = get_skia_font(font)
        bounds = skia.Rect.MakeEmpty()
        width = skia_font.measureText(text, skia.TextEncoding.kUTF8, bounds)
        # Bounds are relative to the alphabetic baseline; shift them to a top baseline
        top_to_baseline = -skia_font.getMetrics().fAscent
        if bounds.isEmpty():
            return TextMetrics(width=width, ascent=0.0, descent=0.0)
        return TextMetrics(
            width=width,
            ascent=-(bounds.top() + top_to_baseline),
            descent=bounds.bottom() + top_to_baseline,
        )

    def fill_text(
        self,
        text: str,
        x: float,
        y: float,
        font: str,
        paint: skia.Paint,
        max_width: Optional[float] = None,
        text_align: str = "left",
    ) -> None:
        """Draws text with its top at y, horizontally condensed to max_width if it would overflow."""
        skia_font = get_skia_font(font)
        width = skia_font.measureText(text)
        scale = 1.0
        if max_width is not None and width > max_width:
            scale = max(max_width, 0) / width if width else 1.0
        drawn_width = width * scale

        if text_align in ("right", "end"):
            x -= drawn_width
        elif text_align == "center":
            x -= drawn_width / 2

        baseline = y - skia_font.getMetrics().fAscent
        if scale == 1.0:
            self.canvas.drawString(text, x, baseline, skia_font, paint)
            return
        self.canvas.save()
        self.canvas.translate(x, baseline)
        self.canvas.scale(scale, 1.0)
        self.canvas.drawString(text, 0, 0, skia_font, paint)
        self.canvas.restore()

    # --- Shapes ---
    def draw_rect(self, x: float, y: float, width: float, height: float, radius: float, paint: skia.Paint) -> None:
        rect = skia.Rect.MakeXYWH(x, y, width, height)
        if radius > 0:
            self.canvas.drawRoundRect(rect, radius, radius, paint)
        else:
            self.canvas.drawRect(rect, paint)

    def draw_circle(self, x: float, y: float, radius: float, paint: skia.Paint) -> None:
        self.canvas.drawCircle(x, y, radius, paint)

    def draw_line(self, x1: float, y1: float, x2: float, y2: float, paint: skia.Paint) -> None:
        self.canvas.drawLine(x1, y1, x2, y2, paint)

    def draw_polygon(self, points: Sequence[float], paint: skia.Paint) -> None:
        path = skia.Path()
        path.moveTo(points[0], points[1])
        for i in range(2, len(points), 2):
            path.lineTo(points[i], points[i + 1])
        path.close()
        self.canvas.drawPath(path, paint)

    def draw_image(
        self,
        image: skia.Image,
        x: float,
        y: float,
        width: Optional[float],
        height: Optional[float],
        paint: Optional[skia.Paint] = None,
    ) -> None:
        width = image.width() if width is None else width
        height = image.height() if height is None else height
        self.canvas.drawImageRect(image, skia.Rect.MakeXYWH(x, y, width, height), paint=paint)

    # --- Surface ---
    def clear(self) -> None:
        self.canvas.clear(skia.ColorTRANSPARENT)

    def to_pil(self) -> Image.Image:
        """Converts the surface to a PIL image.

        Raises:
            RenderingError: If conversion fails
        """
        skia_image = self.surface.makeImageSnapshot()
        if skia_image is None:
            log_message("Skia surface snapshot failed", always_print=True)
            raise RenderingError("Failed to create Skia image snapshot")
        skia_image = skia_image.convert(alphaType=skia.kUnpremul_AlphaType, colorType=skia.kRGBA_8888_ColorType)
        return Image.fromarray(np.array(skia_image))

    def encode(
        self,
        image_format: Optional[str] = None,
        quality: Optional[int] = None,
        output: Optional[OutputConfig] = None,
        verbose: bool = False,
    ) -> bytes:
        """
        Encodes the surface into a compressed image buffer.

        Args:
            image_format: "png", "jpeg" or "webp" (defaults to the output config)
            quality: JPEG/WEBP quality 1-100 or PNG compression level 0-9
            output: Output configuration supplying defaults
            verbose: Whether to print detailed logs

        Returns:
            Encoded image bytes

        Raises:
            RenderingError: If the format is unknown or encoding fails
        """
        output = output or OutputConfig()
        image_format = (image_format or output.image_format).lower()
        pil_format = IMAGE_FORMATS.get(image_format)
        if pil_format is None:
            raise RenderingError(f"Unsupported image format: {image_format}")

        image = self.to_pil()
        save_options = {}
        if pil_format == "JPEG":
            # JPEG doesn't support transparency - composite on black like an unpainted video frame
            background = Image.new("RGB", image.size, (0, 0, 0))
            background.paste(image, mask=image.split()[-1])
            image = background
            save_options["quality"] = max(1, min(quality if quality is not None else output.jpeg_quality, 100))
        elif pil_format == "PNG":
            level = quality if quality is not None else output.png_compression
            save_options["compress_level"] = max(0, min(level, 9))
        else:
            save_options["lossless"] = output.webp_lossless
            save_options["quality"] = max(1, min(quality if quality is not None else output.webp_quality, 100))

        log_message(f"Encoding {self.width}x{self.height} layer as {pil_format} {save_options}", verbose=verbose)
        buffer = io.BytesIO()
        try:
            image.save(buffer, format=pil_format, **save_options)
        except (OSError, ValueError) as e:
            log_message(f"Error encoding layer as {pil_format}: {e}", always_print=True)
            raise RenderingError(f"Failed to encode layer as {pil_format}") from e
        return buffer.getvalue()
