"""Tests for upload validation and downscaling."""

import io
import os

import pytest
from PIL import Image

from fridgechef.services.image_service import VISION_MAX_DIM, ImageService
from fridgechef.utils.exceptions import ImageProcessingError


def png_bytes(size):
    # Random pixels keep the PNG incompressible, so large sizes trigger recompression
    image = Image.frombytes("RGB", size, os.urandom(size[0] * size[1] * 3))
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


@pytest.mark.parametrize(
    "content, mime",
    [
        (b"\xff\xd8\xff\xe0rest", "image/jpeg"),
        (b"\x89PNG\r\n\x1a\nrest", "image/png"),
        (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
        (b"\x00\x00\x00\x18ftypheic", "image/heic"),
        (b"GIF89a", "application/octet-stream"),
    ],
)
def test_detect_mime_type(content, mime):
    assert ImageService.detect_mime_type(content) == mime


def test_empty_upload_is_rejected():
    with pytest.raises(ImageProcessingError):
        ImageService().prepare(b"")


def test_oversized_upload_is_rejected():
    with pytest.raises(ImageProcessingError):
        ImageService(max_size=10).prepare(b"\x89PNG\r\n\x1a\n" + b"\x00" * 20)


def test_unsupported_format_is_rejected():
    with pytest.raises(ImageProcessingError):
        ImageService().prepare(b"GIF89a" + b"\x00" * 20)


def test_small_image_is_untouched():
    data = png_bytes((20, 20))
    assert ImageService().prepare(data) == (data, "image/png")


def test_large_image_is_downscaled_to_jpeg():
    data = png_bytes((1800, 900))
    resized, mime = ImageService().prepare(data)

    assert mime == "image/jpeg"
    with Image.open(io.BytesIO(resized)) as im:
        assert max(im.size) == VISION_MAX_DIM
