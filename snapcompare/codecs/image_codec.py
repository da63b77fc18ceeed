"""Image codec adapters: compressed bytes <-> RGBA pixel grids."""

from __future__ import annotations

import io
import logging
from enum import Enum

from PIL import Image, UnidentifiedImageError

from snapcompare.errors import ImageDecodeError
from snapcompare.models.pixel_grid import PixelGrid

logger = logging.getLogger(__name__)

# Roughly 5 GB of decoded RGBA samples
MAX_DECODED_PIXELS = 5 * 1024**3 // 4


class ImageFormat(str, Enum):
    PNG = "image/png"
    JPEG = "image/jpeg"


class ImageCodec:
    """Decodes one compressed image format into pixel grids and back."""

    image_format: ImageFormat
    pil_format: str

    def decode(self, data: bytes) -> PixelGrid:
        try:
            img = Image.open(io.BytesIO(data), formats=[self.pil_format])
        except Image.DecompressionBombError as e:
            raise ImageDecodeError(f"Image exceeds the decode memory ceiling: {e}") from e
        except (UnidentifiedImageError, OSError) as e:
            raise ImageDecodeError(f"Could not decode {self.image_format.value} image: {e}") from e

        try:
            width, height = img.size
            # Size comes from the header, so reject before touching pixel data
            if width * height > MAX_DECODED_PIXELS:
                raise ImageDecodeError(
                    f"Image {width}x{height} exceeds the decode memory ceiling"
                )
            try:
                rgba = img.convert("RGBA")
            except OSError as e:
                raise ImageDecodeError(f"Truncated or corrupt {self.image_format.value} image: {e}") from e
            logger.debug("Decoded %s image %dx%d", self.image_format.value, width, height)
            try:
                return PixelGrid(width, height, bytearray(rgba.tobytes()))
            finally:
                rgba.close()
        finally:
            img.close()

    def encode(self, grid: PixelGrid) -> bytes:
        img = Image.frombytes("RGBA", grid.size, bytes(grid.data))
        if self.pil_format == "JPEG":
            rgba, img = img, img.convert("RGB")
            rgba.close()
        buf = io.BytesIO()
        try:
            img.save(buf, format=self.pil_format)
        finally:
            img.close()
        return buf.getvalue()


class PngCodec(ImageCodec):
    image_format = ImageFormat.PNG
    pil_format = "PNG"


class JpegCodec(ImageCodec):
    image_format = ImageFormat.JPEG
    pil_format = "JPEG"


_CODECS: dict[ImageFormat, ImageCodec] = {
    ImageFormat.PNG: PngCodec(),
    ImageFormat.JPEG: JpegCodec(),
}


def codec_for(image_format: ImageFormat) -> ImageCodec:
    return _CODECS[image_format]
