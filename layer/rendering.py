import dataclasses
from typing import Callable, Dict, Iterable, Type

from layer.canvas import DrawingContext, PaintEffects
from layer.commands import (
    COMMAND_TYPES,
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
from layer.geometry import resolve_origin, resolve_padding, resolve_text_align_x
from layer.text.layout_engine import layout_text
from utils.exceptions import FontError, RenderingError
from utils.logging import log_message


class LayerRenderer:
    """
    Replays draw commands against a DrawingContext.

    Shadow and blur are modal: once started they apply to every following
    command until the matching end marker, or until the end of the pass.
    All other paint attributes are built from each command on its own.
    """

    def __init__(self, context: DrawingContext, verbose: bool = False):
        self.context = context
        self.verbose = verbose
        self.effects = PaintEffects()
        self._handlers: Dict[Type, Callable[[DrawCommand], None]] = {
            TextCommand: self._draw_text,
            MultilineTextCommand: self._draw_multiline_text,
            RectCommand: self._draw_rect,
            RectOutlineCommand: self._draw_rect_outline,
            CircleCommand: self._draw_circle,
            CircleOutlineCommand: self._draw_circle_outline,
            LineCommand: self._draw_line,
            PolygonCommand: self._draw_polygon,
            PolygonOutlineCommand: self._draw_polygon_outline,
            TextBoxCommand: self._draw_text_box,
            TextBoxOutlineCommand: self._draw_text_box,
            MultilineTextBoxCommand: self._draw_multiline_text_box,
            MultilineTextBoxOutlineCommand: self._draw_multiline_text_box,
            ImageCommand: self._draw_image,
            StartShadowCommand: self._start_shadow,
            EndShadowCommand: self._end_shadow,
            StartBlurCommand: self._start_blur,
            EndBlurCommand: self._end_blur,
        }
        missing = set(COMMAND_TYPES) - set(self._handlers)
        if missing:
            raise TypeError(f"No render handler for: {sorted(c.type for c in missing)}")

    def render(self, commands: Iterable[DrawCommand]) -> None:
        """
        Clears the surface and paints every command in order.

        Raises:
            FontError: If a font string cannot be parsed
            RenderingError: If any drawing operation fails; the pass is aborted
        """
        self.effects = PaintEffects()
        self.context.clear()
        count = 0
        for command in commands:
            handler = self._handlers.get(type(command))
            if handler is None:
                raise RenderingError(f"Unknown draw command: {command!r}")
            try:
                handler(command)
            except (FontError, RenderingError):
                raise
            except Exception as e:
                log_message(f"Drawing '{command.type}' failed: {e}", always_print=True)
                raise RenderingError(f"Failed to draw '{command.type}' command") from e
            count += 1
        log_message(f"Rendered {count} commands", verbose=self.verbose)

    # --- Paint helpers ---
    def _fill(self, style):
        return self.context.make_paint(style, self.effects)

    def _stroke(self, style, line_width):
        return self.context.make_paint(style, self.effects, stroke_width=line_width)

    def _paint_lines(self, text, font, x, y, width, height, line_height, text_align, bullet, paint):
        def measure(value):
            return self.context.measure_text(value, font).width

        bullet_width = measure(bullet) if bullet else 0.0
        for placement in layout_text(text, measure, x, y, width, height, line_height, bullet, bullet_width):
            self.context.fill_text(placement.text, placement.x, placement.y, font, paint, text_align=text_align)

    # --- Handlers ---
    def _draw_text(self, command: TextCommand) -> None:
        self.context.fill_text(
            command.text, command.x, command.y, command.font, self._fill(command.color), max_width=command.max_width
        )

    def _draw_multiline_text(self, command: MultilineTextCommand) -> None:
        x = resolve_text_align_x(command.text_align, command.x, command.width)
        self._paint_lines(
            command.text,
            command.font,
            x,
            command.y,
            command.width,
            command.height,
            command.line_height,
            command.text_align,
            command.bullet,
            self._fill(command.color),
        )

    def _draw_rect(self, command: RectCommand) -> None:
        self.context.draw_rect(
            command.x, command.y, command.width, command.height, command.radius, self._fill(command.color)
        )

    def _draw_rect_outline(self, command: RectOutlineCommand) -> None:
        self.context.draw_rect(
            command.x,
            command.y,
            command.width,
            command.height,
            command.radius,
            self._stroke(command.color, command.line_width),
        )

    def _draw_circle(self, command: CircleCommand) -> None:
        self.context.draw_circle(command.x, command.y, command.radius, self._fill(command.color))

    def _draw_circle_outline(self, command: CircleOutlineCommand) -> None:
        self.context.draw_circle(
            command.x, command.y, command.radius, self._stroke(command.color, command.line_width)
        )

    def _draw_line(self, command: LineCommand) -> None:
        self.context.draw_line(
            command.x1, command.y1, command.x2, command.y2, self._stroke(command.color, command.line_width)
        )

    def _draw_polygon(self, command: PolygonCommand) -> None:
        self.context.draw_polygon(command.points, self._fill(command.color))

    def _draw_polygon_outline(self, command: PolygonOutlineCommand) -> None:
        self.context.draw_polygon(command.points, self._stroke(command.color, command.line_width))

    def _draw_text_box(self, command) -> None:
        # Box is sized from the measured text; glyph ascent/descent set the height
        metrics = self.context.measure_text(command.text, command.font)
        padding_top, padding_right, padding_bottom, padding_left = resolve_padding(command.padding)
        width = metrics.width + padding_left + padding_right
        if command.max_width:
            width = min(width, command.max_width)
        height = abs(metrics.ascent) + abs(metrics.descent) + padding_top + padding_bottom
        box_x, box_y, text_x, text_y = resolve_origin(
            command.origin.strip(), command.x, command.y, padding_left, padding_top, width, height
        )

        if isinstance(command, TextBoxOutlineCommand):
            box_paint = self._stroke(command.color, command.line_width)
        else:
            box_paint = self._fill(command.color)
        self.context.draw_rect(box_x, box_y, width, height, command.radius, box_paint)
        self.context.fill_text(
            command.text,
            text_x,
            text_y,
            command.font,
            self._fill(command.font_color),
            max_width=width - padding_left - padding_right,
        )

    def _draw_multiline_text_box(self, command) -> None:
        padding_top, padding_right, padding_bottom, padding_left = resolve_padding(command.padding)
        inner_width = command.width - padding_left - padding_right
        inner_height = command.height - padding_top - padding_bottom

        if isinstance(command, MultilineTextBoxOutlineCommand):
            box_paint = self._stroke(command.color, command.line_width)
        else:
            box_paint = self._fill(command.color)
        self.context.draw_rect(command.x, command.y, command.width, command.height, command.radius, box_paint)

        x = resolve_text_align_x(command.text_align, command.x, inner_width) + padding_left
        self._paint_lines(
            command.text,
            command.font,
            x,
            command.y + padding_top,
            inner_width,
            inner_height,
            command.line_height,
            command.text_align,
            command.bullet,
            self._fill(command.font_color),
        )

    def _draw_image(self, command: ImageCommand) -> None:
        paint = None
        if self.effects.has_shadow or self.effects.has_blur:
            paint = self.context.make_paint("black", self.effects)
        self.context.draw_image(command.image.image, command.x, command.y, command.width, command.height, paint)

    def _start_shadow(self, command: StartShadowCommand) -> None:
        self.effects = dataclasses.replace(
            self.effects,
            shadow_blur=command.blur,
            shadow_offset_x=command.offset_x,
            shadow_offset_y=command.offset_y,
            shadow_color=command.color,
        )

    def _end_shadow(self, command: EndShadowCommand) -> None:
        self.effects = dataclasses.replace(
            self.effects, shadow_blur=0.0, shadow_offset_x=0.0, shadow_offset_y=0.0, shadow_color=None
        )

    def _start_blur(self, command: StartBlurCommand) -> None:
        self.effects = dataclasses.replace(self.effects, blur_radius=command.radius)

    def _end_blur(self, command: EndBlurCommand) -> None:
        self.effects = dataclasses.replace(self.effects, blur_radius=0.0)
