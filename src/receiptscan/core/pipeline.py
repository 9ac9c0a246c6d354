"""Receipt processing pipeline."""

import asyncio
import logging
import time
from pathlib import Path

from ..extractors import ProgressCallback, TextExtractor
from ..parsing import ReceiptFieldParser
from ..preprocessing import ImageNormalizer
from .models import ExtractedReceiptData

logger = logging.getLogger(__name__)


class ReceiptPipeline:
    """
    Receipt processing pipeline.

    Orchestrates: Normalization -> Text extraction -> Field parsing

    Stage errors (ImageProcessingError, OcrExtractionError) propagate
    unchanged; a failed stage ends the invocation with no partial result.
    Instances hold no per-request state and can serve concurrent calls.
    Image decoding and OCR run in worker threads.
    """

    def __init__(
        self,
        normalizer: ImageNormalizer | None = None,
        extractor: TextExtractor | None = None,
        parser: ReceiptFieldParser | None = None,
    ):
        """
        Initialize pipeline with its stages.

        If not provided, creates default instances.
        """
        self.normalizer = normalizer or ImageNormalizer()
        self.extractor = extractor or TextExtractor()
        self.parser = parser or ReceiptFieldParser()

    async def process(
        self,
        image_path: Path | str,
        language: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ExtractedReceiptData:
        """
        Process a receipt image file.

        Args:
            image_path: Path to a readable image (JPEG, PNG, HEIC, ...)
            language: OCR language override
            on_progress: Optional sink for OCR progress updates

        Returns:
            ExtractedReceiptData with parsed fields and OCR metadata
        """
        logger.info(f"Processing receipt {image_path}")
        normalized = await asyncio.to_thread(self.normalizer.normalize_file, image_path)
        return await self._run(normalized, language, on_progress)

    async def process_bytes(
        self,
        content: bytes,
        language: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ExtractedReceiptData:
        """Process an already-loaded receipt image."""
        logger.info(f"Processing receipt from {len(content)} bytes")
        normalized = await asyncio.to_thread(self.normalizer.normalize, content)
        return await self._run(normalized, language, on_progress)

    async def _run(
        self,
        normalized: bytes,
        language: str | None,
        on_progress: ProgressCallback | None,
    ) -> ExtractedReceiptData:
        start_time = time.time()

        ocr_result = await self.extractor.extract(
            normalized,
            language=language,
            on_progress=on_progress,
        )
        fields = self.parser.parse(ocr_result.text)
        result = ExtractedReceiptData.from_parts(fields, ocr_result)

        logger.info(
            "Receipt processed in %dms: amount=%s currency=%s merchant=%r",
            int((time.time() - start_time) * 1000),
            result.amount,
            result.currency,
            result.merchant,
        )
        return result
