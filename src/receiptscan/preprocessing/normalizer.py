"""Image preconditioning for OCR."""

import io
import logging
from pathlib import Path

import pillow_heif
from PIL import Image, ImageFilter, ImageOps, UnidentifiedImageError

from ..core.errors import ImageProcessingError

# Register HEIC opener
pillow_heif.register_heif_opener()

logger = logging.getLogger(__name__)


class ImageNormalizer:
    """
    Convert an arbitrary receipt photo into an OCR-friendly PNG.

    Steps, in order: grayscale, contrast stretch over the full intensity
    range, sharpen. Works on photographed receipts without per-image tuning.
    """

    def __init__(self, cutoff: float = 1.0, output_format: str = "PNG"):
        """
        Args:
            cutoff: Percent of darkest/lightest pixels ignored when stretching
            output_format: Pillow format name for the encoded buffer
        """
        self.cutoff = cutoff
        self.output_format = output_format

    def normalize_file(self, path: Path | str) -> bytes:
        """Read an image file and return the normalized, encoded buffer."""
        try:
            content = Path(path).read_bytes()
        except OSError as e:
            raise ImageProcessingError(f"Cannot read image {path}", cause=e) from e
        return self.normalize(content)

    def normalize(self, content: bytes) -> bytes:
        """Normalize encoded image bytes and return encoded PNG bytes."""
        try:
            with Image.open(io.BytesIO(content)) as img:
                img.load()
                source_format = img.format
                processed = self._transform(img)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise ImageProcessingError("Failed to preprocess image", cause=e) from e

        output = io.BytesIO()
        processed.save(output, format=self.output_format)
        logger.debug(
            "Normalized %s image %sx%s -> %d bytes",
            source_format,
            processed.width,
            processed.height,
            output.tell(),
        )
        return output.getvalue()

    def _transform(self, img: Image.Image) -> Image.Image:
        # Camera photos carry their rotation in EXIF
        img = ImageOps.exif_transpose(img)
        gray = ImageOps.grayscale(img)
        stretched = ImageOps.autocontrast(gray, cutoff=self.cutoff)
        return stretched.filter(ImageFilter.SHARPEN)
