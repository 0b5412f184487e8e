"""
Video Layer Package

This package builds static 2D overlay layers (text, shapes, gradients, images)
as a replayable list of draw commands and renders them with Skia into PNG,
JPEG or WEBP buffers for compositing onto a video stream.
"""

from .canvas import ConicGradient, Gradient, LinearGradient, RadialGradient, TextMetrics
from .config import LayerConfig, OutputConfig
from .document import LayerDocument
from .geometry import resolve_origin, resolve_padding, resolve_text_align_x
from .image_loader import LoadedImage, load_image
from .text import layout_text, register_font

__version__ = "1.0.0"
__version_info__ = (1, 0, 0)
__license__ = "MIT"
__description__ = "Declarative overlay layers rendered with Skia"
__all__ = [
    'LayerDocument',
    'LayerConfig',
    'OutputConfig',
    'Gradient',
    'LinearGradient',
    'RadialGradient',
    'ConicGradient',
    'TextMetrics',
    'LoadedImage',
    'load_image',
    'layout_text',
    'register_font',
    'resolve_padding',
    'resolve_origin',
    'resolve_text_align_x',
]
