"""Tests for the Pillow image codec and its helpers."""

import io

import pytest
from PIL import Image

from iEnhance.core.codec import (
    ImageCodec,
    calculate_thumbnail_size,
    split_data_url,
    to_data_url,
)
from iEnhance.errors import DecodeError, EncodeError


@pytest.fixture
def codec():
    return ImageCodec()


def test_decode_png_preserves_pixels(codec, random_buffer, encode_image):
    buffer = random_buffer(5, 4)

    decoded = codec.decode(encode_image(buffer, "PNG"))

    assert decoded.format == "PNG"
    assert decoded.buffer == buffer


def test_decode_rejects_garbage(codec):
    with pytest.raises(DecodeError):
        codec.decode(b"definitely not an image")


def test_encode_keeps_source_format(codec, make_buffer):
    buffer = make_buffer(4, 3, (10, 200, 30, 255))

    jpeg = codec.encode(buffer, "JPEG", quality=95)
    png = codec.encode(buffer, "png", quality=95)

    with Image.open(io.BytesIO(jpeg)) as image:
        assert image.format == "JPEG"
        assert image.size == (4, 3)
    with Image.open(io.BytesIO(png)) as image:
        assert image.format == "PNG"
        assert image.mode == "RGBA"


def test_encode_writes_multi_picture_jpeg_as_plain_jpeg(codec, make_buffer):
    jpeg = codec.encode(make_buffer(4, 3, (10, 200, 30, 255)), "MPO", quality=95)

    with Image.open(io.BytesIO(jpeg)) as image:
        assert image.format == "JPEG"
        assert image.size == (4, 3)


def test_encode_unknown_format_raises(codec, make_buffer):
    with pytest.raises(EncodeError):
        codec.encode(make_buffer(2, 2), "NOT-A-FORMAT", quality=95)


@pytest.mark.parametrize(
    ("size", "expected"),
    [((400, 200), (200, 100)), ((200, 400), (100, 200)), ((300, 300), (200, 200))],
)
def test_calculate_thumbnail_size(size, expected):
    assert calculate_thumbnail_size(*size, 200) == expected


def test_calculate_thumbnail_size_keeps_one_pixel():
    assert calculate_thumbnail_size(10000, 1, 200) == (200, 1)
    with pytest.raises(ValueError):
        calculate_thumbnail_size(0, 10, 200)


def test_thumbnail_is_jpeg(codec, random_buffer, encode_image):
    thumb = codec.thumbnail(encode_image(random_buffer(40, 20), "PNG"), 10, quality=80)
    with Image.open(io.BytesIO(thumb)) as image:
        assert image.format == "JPEG"
        assert image.size == (10, 5)


def test_data_url_helpers():
    url = to_data_url("image/png", b"\x89PNG")
    assert url == "data:image/png;base64,iVBORw=="
    assert split_data_url(url) == ("image/png", b"\x89PNG")


@pytest.mark.parametrize("url", ["image/png;base64,AAAA", "data:image/png;base64,@@@"])
def test_split_data_url_rejects_invalid_input(url):
    with pytest.raises(DecodeError):
        split_data_url(url)
