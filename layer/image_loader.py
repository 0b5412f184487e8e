import asyncio
import io
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Union

import requests
import skia
from PIL import Image, UnidentifiedImageError

from utils.exceptions import ImageDecodeError
from utils.logging import log_message

REQUEST_TIMEOUT_SECONDS = 30


@dataclass(frozen=True)
class LoadedImage:
    """A decoded image ready to be drawn by the renderer."""

    image: skia.Image

    @property
    def width(self) -> int:
        return self.image.width()

    @property
    def height(self) -> int:
        return self.image.height()


ImageSource = Union[str, os.PathLike, bytes, bytearray, BinaryIO, Image.Image, LoadedImage]


def _read_source(source: ImageSource) -> bytes:
    """Reads the encoded bytes of a path, URL, file object or bytes source."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if hasattr(source, "read"):
        return source.read()
    if isinstance(source, str) and source.startswith(("http://", "https://")):
        try:
            response = requests.get(source, timeout=REQUEST_TIMEOUT_SECONDS)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ImageDecodeError(f"Failed to download image from {source}: {e}") from e
        return response.content
    try:
        return Path(source).read_bytes()
    except (OSError, TypeError) as e:
        raise ImageDecodeError(f"Failed to read image source {source!r}: {e}") from e


def pil_to_skia_image(pil_image: Image.Image) -> skia.Image:
    """Converts a PIL image to an immutable skia.Image.

    Raises:
        ImageDecodeError: If conversion fails
    """
    if pil_image.mode != "RGBA":
        pil_image = pil_image.convert("RGBA")
    skia_image = skia.Image.frombytes(
        pil_image.tobytes(), pil_image.size, skia.kRGBA_8888_ColorType, skia.kUnpremul_AlphaType
    )
    if skia_image is None:
        raise ImageDecodeError("Failed to create Skia image from PIL")
    return skia_image


def decode_image(source: ImageSource, verbose: bool = False) -> LoadedImage:
    """
    Decodes an image from a path, URL, bytes, binary file object or PIL image.

    Args:
        source: Image source
        verbose: Whether to print detailed logs

    Returns:
        LoadedImage

    Raises:
        ImageDecodeError: If the source cannot be read or decoded
    """
    if isinstance(source, LoadedImage):
        return source

    if isinstance(source, Image.Image):
        pil_image = source
    else:
        data = _read_source(source)
        try:
            pil_image = Image.open(io.BytesIO(data))
            pil_image.load()
        except (UnidentifiedImageError, OSError, ValueError) as e:
            log_message(f"Image decode failed: {e}", always_print=True)
            raise ImageDecodeError(f"Failed to decode image ({len(data)} bytes)") from e

    loaded = LoadedImage(pil_to_skia_image(pil_image))
    log_message(f"Decoded image {loaded.width}x{loaded.height}", verbose=verbose)
    return loaded


async def load_image(source: ImageSource, verbose: bool = False) -> LoadedImage:
    """Decodes an image in a worker thread so the event loop is not blocked."""
    return await asyncio.to_thread(decode_image, source, verbose)
