import io

import pytest
from PIL import Image

from layer.document import LayerDocument


@pytest.fixture
def document():
    return LayerDocument(widescreen=True)


@pytest.fixture
def png_bytes():
    image = Image.new("RGBA", (4, 3), (255, 0, 0, 255))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
