from __future__ import annotations

import logging
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from portrait_studio.domain.entities.image_blob import ImageBlob
from portrait_studio.domain.errors import DecodeError
from portrait_studio.domain.services.processing_service import ProcessingService

logger = logging.getLogger(__name__)

MIN_QUALITY = 80
MAX_QUALITY = 95


def read_dimensions(data: bytes) -> tuple[int, int, str]:
    """Read (width, height, mime_type) from an encoded image header."""
    try:
        with Image.open(BytesIO(data)) as img:
            width, height = img.size
            mime = Image.MIME.get(img.format or "", "image/png")
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise DecodeError(f"Cannot decode image: {exc}") from exc
    return width, height, mime


class ImageNormalizer:
    """Decode, bound and re-encode uploads before they reach the edit service.

    Output is always JPEG at a fixed quality. Dimensions are capped so that the
    longer side is at most ``max_dimension``; smaller images keep their size.
    """

    output_format = "JPEG"
    output_mime_type = "image/jpeg"

    def __init__(
        self,
        quality: int = MAX_QUALITY,
        tone_boost: bool = False,
        processing: ProcessingService | None = None,
    ) -> None:
        self.quality = min(MAX_QUALITY, max(MIN_QUALITY, int(quality)))
        self.tone_boost = tone_boost
        self.processing = processing or ProcessingService()

    def normalize(self, raw: ImageBlob, max_dimension: int) -> ImageBlob:
        img = self._decode(raw.data)
        src_w, src_h = img.size
        target = self.processing.fit_within(src_w, src_h, max_dimension)
        if target != img.size:
            img = img.resize(target, Image.Resampling.LANCZOS)
        if self.tone_boost:
            img = self.processing.from_array(self.processing.tone_boost(self.processing.to_array(img)))

        buf = BytesIO()
        img.save(buf, format=self.output_format, quality=self.quality)
        out = ImageBlob(
            data=buf.getvalue(),
            mime_type=self.output_mime_type,
            width=img.width,
            height=img.height,
        )
        logger.info(
            "Normalized %dx%d (%d bytes) -> %dx%d (%d bytes)",
            src_w, src_h, raw.size, out.width, out.height, out.size,
        )
        return out

    # --------- helpers ---------
    @staticmethod
    def _decode(data: bytes) -> Image.Image:
        if not data:
            raise DecodeError("Empty file")
        try:
            img = Image.open(BytesIO(data))
            img.load()
            img = ImageOps.exif_transpose(img)
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
            raise DecodeError(f"Cannot decode image: {exc}") from exc
        return ImageNormalizer._flatten(img)

    # JPEG has no alpha: composite transparent images onto white.
    @staticmethod
    def _flatten(img: Image.Image) -> Image.Image:
        if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
            rgba = img.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, (0, 0), rgba)
            return background
        if img.mode != "RGB":
            return img.convert("RGB")
        return img
