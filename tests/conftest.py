import io
import logging
import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make the sources importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from iEnhance.core.pixel_buffer import PixelBuffer  # noqa: E402


@pytest.fixture
def package_logger():
    """Yield the package logger and restore its level and handlers afterwards."""

    logger = logging.getLogger("iEnhance")
    level = logger.level
    handlers = list(logger.handlers)
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture
def make_buffer():
    """Build a PixelBuffer filled with one RGBA colour."""

    def _make(width, height, rgba=(128, 128, 128, 255)):
        array = np.empty((height, width, 4), dtype=np.uint8)
        array[...] = rgba
        return PixelBuffer.from_array(array)

    return _make


@pytest.fixture
def random_buffer():
    """Build a reproducible noisy PixelBuffer with opaque alpha."""

    def _make(width, height, seed=1234):
        rng = np.random.default_rng(seed)
        array = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
        array[..., 3] = 255
        return PixelBuffer.from_array(array)

    return _make


@pytest.fixture
def encode_image():
    """Encode a PixelBuffer with Pillow in the requested container format."""

    def _encode(buffer, fmt="PNG"):
        image = Image.frombytes("RGBA", buffer.size, bytes(buffer.data))
        if fmt == "JPEG":
            image = image.convert("RGB")
        output = io.BytesIO()
        image.save(output, format=fmt)
        return output.getvalue()

    return _encode
