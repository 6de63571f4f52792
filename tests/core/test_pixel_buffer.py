"""Tests for the pipeline's data model."""

import numpy as np
import pytest

from iEnhance.core.pixel_buffer import EnhancementOptions, PixelBuffer


def test_buffer_copies_its_input():
    source = bytearray(range(16))
    buffer = PixelBuffer(2, 2, source)
    source[0] = 99
    assert buffer.data[0] == 0


@pytest.mark.parametrize(
    ("width", "height", "length"),
    [(0, 2, 0), (2, -1, 8), (2, 2, 15), (2, 2, 17)],
)
def test_buffer_rejects_invalid_geometry(width, height, length):
    with pytest.raises(ValueError):
        PixelBuffer(width, height, bytes(length))


def test_as_array_shares_memory():
    buffer = PixelBuffer(1, 1, bytes(4))
    buffer.as_array()[0] = 200
    assert buffer.data[0] == 200


def test_copy_is_independent():
    buffer = PixelBuffer(1, 1, bytes([1, 2, 3, 4]))
    clone = buffer.copy()
    clone.data[0] = 50
    assert buffer.data[0] == 1
    assert clone != buffer


def test_wire_shape():
    buffer = PixelBuffer(1, 2, bytes(range(8)))
    wire = buffer.to_wire()
    assert wire == {"width": 1, "height": 2, "data": bytes(range(8))}
    assert isinstance(wire["data"], bytes)
    assert PixelBuffer.from_wire(wire) == buffer


def test_from_wire_requires_every_field():
    with pytest.raises(KeyError):
        PixelBuffer.from_wire({"width": 1, "height": 1})


def test_from_array_requires_rgba_layout():
    with pytest.raises(ValueError):
        PixelBuffer.from_array(np.zeros((2, 2, 3), dtype=np.uint8))

    buffer = PixelBuffer.from_array(np.full((3, 2, 4), 7, dtype=np.uint8))
    assert buffer.size == (2, 3)
    assert set(buffer.data) == {7}


def test_options_defaults_and_noop():
    assert EnhancementOptions().is_noop
    assert EnhancementOptions(contrast=-3).is_noop
    assert not EnhancementOptions(sharpness=1).is_noop


def test_options_from_wire_fills_missing_keys():
    options = EnhancementOptions.from_wire({"denoise": "40"})
    assert options == EnhancementOptions(sharpness=0.0, denoise=40.0, contrast=0.0)
    assert options.to_wire() == {"sharpness": 0.0, "denoise": 40.0, "contrast": 0.0}


def test_options_are_not_clamped():
    options = EnhancementOptions(sharpness=250, denoise=0, contrast=500)
    assert options.sharpness == 250
    assert options.contrast == 500
