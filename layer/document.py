import os
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from layer.canvas import (
    ConicGradient,
    DrawingContext,
    LinearGradient,
    RadialGradient,
    Style,
    TextMetrics,
)
from layer.commands import (
    CircleCommand,
    CircleOutlineCommand,
    DrawCommand,
    EndBlurCommand,
    EndShadowCommand,
    ImageCommand,
    LineCommand,
    MultilineTextBoxCommand,
    MultilineTextBoxOutlineCommand,
    MultilineTextCommand,
    PolygonCommand,
    PolygonOutlineCommand,
    RectCommand,
    RectOutlineCommand,
    StartBlurCommand,
    StartShadowCommand,
    TextBoxCommand,
    TextBoxOutlineCommand,
    TextCommand,
)
from layer.config import LayerConfig
from layer.geometry import DEFAULT_ORIGIN, PaddingSpec
from layer.image_loader import ImageSource, LoadedImage, load_image
from layer.rendering import LayerRenderer
from layer.text.font_manager import FontSource, register_font
from utils.exceptions import ImageProcessingError, InvalidGeometryError, ValidationError
from utils.logging import log_message

PointValue = Union[float, Tuple[float, float]]

EXTENSION_FORMATS = {
    ".png": "png",
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".webp": "webp",
}


def _flatten_points(points: Iterable[PointValue]) -> Tuple[float, ...]:
    """Accepts flat coordinates (x1, y1, x2, y2, ...) or (x, y) pairs."""
    flat: List[float] = []
    for point in points:
        if isinstance(point, (list, tuple)):
            flat.extend(point)
        else:
            flat.append(point)
    return tuple(flat)


def validate_points(points: Tuple[float, ...]) -> None:
    """
    Validates a polygon point list.

    Raises:
        InvalidGeometryError: If the coordinate count is odd or there are fewer than 3 points
    """
    if len(points) % 2 != 0:
        raise InvalidGeometryError("Number of points must be even")
    if len(points) < 6:
        raise InvalidGeometryError("Polygon must at least have 3 coordinates")


def _freeze_padding(padding: PaddingSpec) -> PaddingSpec:
    if isinstance(padding, list):
        return tuple(padding)
    return padding


class LayerDocument:
    """
    Ordered list of draw commands for one overlay layer.

    Builder methods record commands without drawing anything; the list is
    replayed by create_buffer(). Later commands paint over earlier ones.
    """

    def __init__(self, widescreen: Optional[bool] = None, config: Optional[LayerConfig] = None):
        """
        Args:
            widescreen: 1280x720 when True (the default), 1280x960 when False
            config: Layer configuration; its widescreen flag sets the dimensions

        Raises:
            ValidationError: If widescreen contradicts the given config
        """
        if config is None:
            config = LayerConfig(widescreen=True if widescreen is None else widescreen)
        elif widescreen is not None and widescreen != config.widescreen:
            raise ValidationError(
                f"widescreen={widescreen} conflicts with config.widescreen={config.widescreen}"
            )
        self.config = config
        self.width = self.config.width
        self.height = self.config.height
        self._commands: List[DrawCommand] = []
        self._context = DrawingContext(self.width, self.height)

    @classmethod
    def create(cls, widescreen: bool = True) -> "LayerDocument":
        return cls(widescreen=widescreen)

    @property
    def widescreen(self) -> bool:
        return self.config.widescreen

    @property
    def commands(self) -> Tuple[DrawCommand, ...]:
        return tuple(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def append(self, command: DrawCommand) -> DrawCommand:
        self._commands.append(command)
        return command

    def clear(self) -> None:
        """Removes all commands, keeping dimensions and the drawing surface."""
        self._commands.clear()

    # --- Context helpers ---
    def measure_text(self, text: str, font: str) -> TextMetrics:
        """Measures text in a CSS font, e.g. '16px Arial, sans-serif'."""
        return self._context.measure_text(text, font)

    def create_linear_gradient(self, x1: float, y1: float, x2: float, y2: float) -> LinearGradient:
        return LinearGradient(x1, y1, x2, y2)

    def create_radial_gradient(
        self, x1: float, y1: float, r1: float, x2: float, y2: float, r2: float
    ) -> RadialGradient:
        return RadialGradient(x1, y1, r1, x2, y2, r2)

    def create_conic_gradient(self, start_angle: float, x: float, y: float) -> ConicGradient:
        return ConicGradient(start_angle, x, y)

    async def load_image(self, source: ImageSource) -> LoadedImage:
        """Loads an image from a path, URL, bytes or file object to use with add_image."""
        return await load_image(source, verbose=self.config.verbose)

    # --- Builders ---
    def start_shadow(self, blur: float, offset_x: float, offset_y: float, color: str) -> StartShadowCommand:
        return self.append(StartShadowCommand(blur, offset_x, offset_y, color))

    def end_shadow(self) -> EndShadowCommand:
        return self.append(EndShadowCommand())

    def start_blur(self, radius: float) -> StartBlurCommand:
        return self.append(StartBlurCommand(radius))

    def end_blur(self) -> EndBlurCommand:
        return self.append(EndBlurCommand())

    def add_text(
        self, text: str, font: str, color: Style, x: float, y: float, max_width: Optional[float] = None
    ) -> TextCommand:
        return self.append(TextCommand(text, font, color, x, y, max_width))

    def add_multiline_text(
        self,
        text: str,
        font: str,
        color: Style,
        x: float,
        y: float,
        width: float,
        height: Optional[float],
        line_height: float,
        text_align: str = "left",
        bullet: Optional[str] = None,
    ) -> MultilineTextCommand:
        return self.append(
            MultilineTextCommand(text, font, color, x, y, width, height, line_height, text_align, bullet)
        )

    async def add_image(
        self,
        source: ImageSource,
        x: float,
        y: float,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ) -> ImageCommand:
        """
        Decodes an image and records it once decoding has succeeded.

        Raises:
            ImageDecodeError: If the source cannot be decoded; nothing is recorded
        """
        image = await load_image(source, verbose=self.config.verbose)
        return self.append(ImageCommand(image, x, y, width, height))

    def add_rect(
        self, x: float, y: float, width: float, height: float, color: Style, radius: float = 0
    ) -> RectCommand:
        return self.append(RectCommand(x, y, width, height, color, radius))

    def add_rect_outline(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        color: Style,
        line_width: float = 1,
        radius: float = 0,
    ) -> RectOutlineCommand:
        return self.append(RectOutlineCommand(x, y, width, height, color, line_width, radius))

    def add_circle(self, x: float, y: float, radius: float, color: Style) -> CircleCommand:
        return self.append(CircleCommand(x, y, radius, color))

    def add_circle_outline(
        self, x: float, y: float, radius: float, color: Style, line_width: float = 1
    ) -> CircleOutlineCommand:
        return self.append(CircleOutlineCommand(x, y, radius, color, line_width))

    def add_line(
        self, x1: float, y1: float, x2: float, y2: float, color: Style, line_width: float = 1
    ) -> LineCommand:
        return self.append(LineCommand(x1, y1, x2, y2, color, line_width))

    def add_polygon(self, color: Style, *points: PointValue) -> PolygonCommand:
        """
        Records a filled polygon through the given points.

        Raises:
            InvalidGeometryError: If the point list is odd or has fewer than 3 points
        """
        flat = _flatten_points(points)
        validate_points(flat)
        return self.append(PolygonCommand(color, flat))

    def add_polygon_outline(self, color: Style, *points: PointValue, line_width: float = 1) -> PolygonOutlineCommand:
        flat = _flatten_points(points)
        validate_points(flat)
        return self.append(PolygonOutlineCommand(color, flat, line_width))

    def add_text_box(
        self,
        text: str,
        font: str,
        font_color: Style,
        x: float,
        y: float,
        color: Style,
        origin: str = DEFAULT_ORIGIN,
        padding: PaddingSpec = 0,
        max_width: Optional[float] = None,
        radius: float = 0,
    ) -> TextBoxCommand:
        """
        Records a single line of text on a box sized to fit it.

        (x, y) is the box corner or edge named by origin, e.g. "bottom right".
        """
        return self.append(
            TextBoxCommand(text, font, font_color, x, y, color, origin, _freeze_padding(padding), max_width, radius)
        )

    def add_text_box_outline(
        self,
        text: str,
        font: str,
        font_color: Style,
        x: float,
        y: float,
        color: Style,
        origin: str = DEFAULT_ORIGIN,
        padding: PaddingSpec = 0,
        max_width: Optional[float] = None,
        radius: float = 0,
        line_width: float = 1,
    ) -> TextBoxOutlineCommand:
        return self.append(
            TextBoxOutlineCommand(
                text, font, font_color, x, y, color, origin, _freeze_padding(padding), max_width, radius, line_width
            )
        )

    def add_multiline_text_box(
        self,
        text: str,
        font: str,
        font_color: Style,
        x: float,
        y: float,
        width: float,
        height: float,
        color: Style,
        line_height: float,
        padding: PaddingSpec = 0,
        radius: float = 0,
        text_align: str = "left",
        bullet: Optional[str] = None,
    ) -> MultilineTextBoxCommand:
        """Records a fixed size box with word-wrapped text inside its padding."""
        return self.append(
            MultilineTextBoxCommand(
                text,
                font,
                font_color,
                x,
                y,
                width,
                height,
                color,
                line_height,
                _freeze_padding(padding),
                radius,
                text_align,
                bullet,
            )
        )

    def add_multiline_text_box_outline(
        self,
        text: str,
        font: str,
        font_color: Style,
        x: float,
        y: float,
        width: float,
        height: float,
        color: Style,
        line_height: float,
        padding: PaddingSpec = 0,
        radius: float = 0,
        line_width: float = 1,
        text_align: str = "left",
        bullet: Optional[str] = None,
    ) -> MultilineTextBoxOutlineCommand:
        return self.append(
            MultilineTextBoxOutlineCommand(
                text,
                font,
                font_color,
                x,
                y,
                width,
                height,
                color,
                line_height,
                _freeze_padding(padding),
                radius,
                line_width,
                text_align,
                bullet,
            )
        )

    # --- Output ---
    def create_buffer(self, image_format: Optional[str] = None, quality: Optional[int] = None) -> bytes:
        """
        Renders all commands and encodes the layer.

        Args:
            image_format: "png", "jpeg" or "webp" (defaults to config.output.image_format)
            quality: JPEG/WEBP quality 1-100 or PNG compression level 0-9

        Returns:
            Encoded image bytes

        Raises:
            FontError: If a font string cannot be resolved
            RenderingError: If drawing or encoding fails
        """
        LayerRenderer(self._context, verbose=self.config.verbose).render(self._commands)
        return self._context.encode(image_format, quality, output=self.config.output, verbose=self.config.verbose)

    def write_file(
        self, path: Union[str, os.PathLike], image_format: Optional[str] = None, quality: Optional[int] = None
    ) -> Path:
        """
        Renders the layer and writes it to disk.

        The format is taken from the file extension unless given; unknown
        extensions are saved as PNG with a .png suffix.

        Returns:
            The path written

        Raises:
            ImageProcessingError: If the file cannot be written
        """
        output_path = Path(path)
        if image_format is None:
            image_format = EXTENSION_FORMATS.get(output_path.suffix.lower())
            if image_format is None:
                log_message(
                    f"Warning: Unknown output extension '{output_path.suffix}'. Saving as PNG.",
                    always_print=True,
                )
                image_format = "png"
                output_path = output_path.with_suffix(".png")

        buffer = self.create_buffer(image_format, quality)
        try:
            os.makedirs(output_path.parent, exist_ok=True)
            output_path.write_bytes(buffer)
        except OSError as e:
            log_message(f"Error saving layer to {output_path}: {e}", always_print=True)
            raise ImageProcessingError(f"Failed to save layer to {output_path}") from e
        log_message(f"Saved layer to {output_path}", verbose=self.config.verbose)
        return output_path

    @staticmethod
    def register_font(source: FontSource, alias: str) -> bool:
        """Registers a font file or font bytes under an alias usable in font strings."""
        return register_font(source, alias)
