import os
from dataclasses import dataclass, field

CANVAS_WIDTH = 1280
WIDESCREEN_HEIGHT = 720
STANDARD_HEIGHT = 960


@dataclass
class OutputConfig:
    """Configuration for encoding rendered layers."""

    image_format: str = "png"  # "png", "jpeg" or "webp"
    jpeg_quality: int = 95
    png_compression: int = 6
    webp_quality: int = 90
    webp_lossless: bool = False


@dataclass
class LayerConfig:
    """Main configuration for a layer document."""

    widescreen: bool = True
    verbose: bool = False
    output: OutputConfig = field(default_factory=OutputConfig)

    def __post_init__(self):
        if not self.verbose:
            self.verbose = os.environ.get("LAYER_VERBOSE", "").lower() in ("1", "true", "yes")

    @property
    def width(self) -> int:
        return CANVAS_WIDTH

    @property
    def height(self) -> int:
        return WIDESCREEN_HEIGHT if self.widescreen else STANDARD_HEIGHT
