"""
Draw commands recorded by a LayerDocument.

Every primitive is a frozen dataclass carrying only the fields needed to
reproduce it; the ``type`` tag matches the command names used in scene files.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union

from layer.canvas import Style
from layer.geometry import DEFAULT_ORIGIN, PaddingSpec
from layer.image_loader import LoadedImage


@dataclass(frozen=True)
class TextCommand:
    type: ClassVar[str] = "text"

    text: str
    font: str
    color: Style
    x: float
    y: float
    max_width: Optional[float] = None


@dataclass(frozen=True)
class MultilineTextCommand:
    type: ClassVar[str] = "multiline"

    text: str
    font: str
    color: Style
    x: float
    y: float
    width: float
    height: Optional[float]
    line_height: float
    text_align: str = "left"
    bullet: Optional[str] = None


@dataclass(frozen=True)
class RectCommand:
    type: ClassVar[str] = "rect"

    x: float
    y: float
    width: float
    height: float
    color: Style
    radius: float = 0


@dataclass(frozen=True)
class RectOutlineCommand:
    type: ClassVar[str] = "rect-outline"

    x: float
    y: float
    width: float
    height: float
    color: Style
    line_width: float = 1
    radius: float = 0


@dataclass(frozen=True)
class CircleCommand:
    type: ClassVar[str] = "circle"

    x: float
    y: float
    radius: float
    color: Style


@dataclass(frozen=True)
class CircleOutlineCommand:
    type: ClassVar[str] = "circle-outline"

    x: float
    y: float
    radius: float
    color: Style
    line_width: float = 1


@dataclass(frozen=True)
class LineCommand:
    type: ClassVar[str] = "line"

    x1: float
    y1: float
    x2: float
    y2: float
    color: Style
    line_width: float = 1


@dataclass(frozen=True)
class PolygonCommand:
    type: ClassVar[str] = "polygon"

    color: Style
    points: Tuple[float, ...]


@dataclass(frozen=True)
class PolygonOutlineCommand:
    type: ClassVar[str] = "polygon-outline"

    color: Style
    points: Tuple[float, ...]
    line_width: float = 1


@dataclass(frozen=True)
class TextBoxCommand:
    type: ClassVar[str] = "text-box"

    text: str
    font: str
    font_color: Style
    x: float
    y: float
    color: Style
    origin: str = DEFAULT_ORIGIN
    padding: PaddingSpec = 0
    max_width: Optional[float] = None
    radius: float = 0


@dataclass(frozen=True)
class TextBoxOutlineCommand:
    type: ClassVar[str] = "text-box-outline"

    text: str
    font: str
    font_color: Style
    x: float
    y: float
    color: Style
    origin: str = DEFAULT_ORIGIN
    padding: PaddingSpec = 0
    max_width: Optional[float] = None
    radius: float = 0
    line_width: float = 1


@dataclass(frozen=True)
class MultilineTextBoxCommand:
    type: ClassVar[str] = "multiline-box"

    text: str
    font: str
    font_color: Style
    x: float
    y: float
    width: float
    height: float
    color: Style
    line_height: float
    padding: PaddingSpec = 0
    radius: float = 0
    text_align: str = "left"
    bullet: Optional[str] = None


@dataclass(frozen=True)
class MultilineTextBoxOutlineCommand:
    type: ClassVar[str] = "multiline-box-outline"

    text: str
    font: str
    font_color: Style
    x: float
    y: float
    width: float
    height: float
    color: Style
    line_height: float
    padding: PaddingSpec = 0
    radius: float = 0
    line_width: float = 1
    text_align: str = "left"
    bullet: Optional[str] = None


@dataclass(frozen=True)
class ImageCommand:
    type: ClassVar[str] = "image"

    image: LoadedImage
    x: float
    y: float
    width: Optional[float] = None
    height: Optional[float] = None


@dataclass(frozen=True)
class StartShadowCommand:
    type: ClassVar[str] = "start-shadow"

    blur: float
    offset_x: float
    offset_y: float
    color: str


@dataclass(frozen=True)
class EndShadowCommand:
    type: ClassVar[str] = "end-shadow"


@dataclass(frozen=True)
class StartBlurCommand:
    type: ClassVar[str] = "start-blur"

    radius: float


@dataclass(frozen=True)
class EndBlurCommand:
    type: ClassVar[str] = "end-blur"


DrawCommand = Union[
    TextCommand,
    MultilineTextCommand,
    RectCommand,
    RectOutlineCommand,
    CircleCommand,
    CircleOutlineCommand,
    LineCommand,
    PolygonCommand,
    PolygonOutlineCommand,
    TextBoxCommand,
    TextBoxOutlineCommand,
    MultilineTextBoxCommand,
    MultilineTextBoxOutlineCommand,
    ImageCommand,
    StartShadowCommand,
    EndShadowCommand,
    StartBlurCommand,
    EndBlurCommand,
]

COMMAND_TYPES = DrawCommand.__args__
COMMANDS_BY_TAG = {command_class.type: command_class for command_class in COMMAND_TYPES}
