class ValidationError(ValueError):
    """Custom exception for invalid builder arguments."""

    pass


class InvalidGeometryError(ValidationError):
    """Custom exception for malformed point lists (odd count or fewer than 3 points)."""

    pass


class FontError(RuntimeError):
    """Custom exception for font parsing, loading and registration failures."""

    pass


class RenderingError(RuntimeError):
    """Custom exception for drawing-context failures during a render pass."""

    pass


class ImageProcessingError(Exception):
    """Custom exception for image operations failures."""

    pass


class ImageDecodeError(ImageProcessingError):
    """Custom exception for image sources that cannot be read or decoded."""

    pass
