"""Validation and downscaling of uploaded fridge photos."""

import io
import logging
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from fridgechef.config import settings
from fridgechef.utils.exceptions import ImageProcessingError

logger = logging.getLogger(__name__)

SUPPORTED_MIME_TYPES = ("image/jpeg", "image/png", "image/webp", "image/heic", "image/heif")

# A fridge shot needs far less resolution than a phone camera produces.
VISION_MAX_DIM = 1600
JPEG_QUALITY = 80
RESIZE_THRESHOLD_BYTES = 400_000


class ImageService:
    """Service for processing uploaded images."""

    def __init__(self, max_size: Optional[int] = None) -> None:
        self.max_size = max_size or settings.max_image_size

    def prepare(self, file_content: bytes) -> Tuple[bytes, str]:
        """
        Validate an upload and shrink it for the vision call.

        Returns:
            Tuple of (image_bytes, mime_type)

        Raises:
            ImageProcessingError: If image is empty, too large or not a supported image
        """
        image_data, mime_type = self.validate_image(file_content)
        return self._maybe_resize(image_data, mime_type)

    def validate_image(self, file_content: bytes) -> Tuple[bytes, str]:
        if not file_content:
            raise ImageProcessingError("Image file is empty")

        if len(file_content) > self.max_size:
            raise ImageProcessingError(
                f"Image file too large (max {self.max_size / 1024 / 1024:.0f}MB)"
            )

        mime_type = self.detect_mime_type(file_content)
        if mime_type not in SUPPORTED_MIME_TYPES:
            raise ImageProcessingError(
                f"Unsupported image format: {mime_type}. Supported: JPEG, PNG, WebP, HEIC"
            )

        return file_content, mime_type

    @staticmethod
    def detect_mime_type(file_content: bytes) -> str:
        """Detect MIME type from magic bytes."""
        if file_content.startswith(b"\xff\xd8\xff"):
            return "image/jpeg"
        if file_content.startswith(b"\x89PNG\r\n\x1a\n"):
            return "image/png"
        if file_content.startswith(b"RIFF") and file_content[8:12] == b"WEBP":
            return "image/webp"
        if file_content[4:8] == b"ftyp":
            brand = file_content[8:12]
            if brand in (b"heic", b"heix", b"hevc", b"hevx"):
                return "image/heic"
            if brand in (b"mif1", b"msf1"):
                return "image/heif"
        return "application/octet-stream"

    def _maybe_resize(self, image_bytes: bytes, mime_type: str) -> Tuple[bytes, str]:
        """
        Downscale + recompress large JPEG/PNG/WebP uploads to reduce Gemini latency.

        Falls back to the original bytes when Pillow cannot decode the image.
        """
        if len(image_bytes) < RESIZE_THRESHOLD_BYTES or mime_type in ("image/heic", "image/heif"):
            return image_bytes, mime_type

        try:
            with Image.open(io.BytesIO(image_bytes)) as im:
                if im.mode in ("RGBA", "LA") or (im.mode == "P" and "transparency" in im.info):
                    bg = Image.new("RGBA", im.size, (255, 255, 255, 255))
                    im = Image.alpha_composite(bg, im.convert("RGBA")).convert("RGB")
                else:
                    im = im.convert("RGB")

                w, h = im.size
                if max(w, h) > VISION_MAX_DIM:
                    scale = VISION_MAX_DIM / float(max(w, h))
                    im = im.resize((max(1, int(w * scale)), max(1, int(h * scale))), Image.LANCZOS)

                out = io.BytesIO()
                im.save(out, format="JPEG", quality=JPEG_QUALITY, optimize=True)
        except (UnidentifiedImageError, OSError) as e:
            logger.warning("Image resize skipped: %s", e)
            return image_bytes, mime_type

        logger.info(
            "Image downscaled for vision",
            extra={"original_bytes": len(image_bytes), "resized_bytes": out.tell()},
        )
        return out.getvalue(), "image/jpeg"
