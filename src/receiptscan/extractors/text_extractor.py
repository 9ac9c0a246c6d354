"""Text extraction stage: runs an OCR engine over a normalized image."""

import asyncio
import logging

from ..config import Settings, get_settings
from ..core.errors import OcrExtractionError
from ..core.models import OCRResult
from .base import BaseOCREngine, OCRProgress, ProgressCallback

logger = logging.getLogger(__name__)


def create_engine(settings: Settings | None = None) -> BaseOCREngine:
    """Build the engine selected by `settings.ocr_engine`."""
    settings = settings or get_settings()

    if settings.ocr_engine == "google_vision":
        from .google_vision import GoogleVisionEngine

        return GoogleVisionEngine(credentials_path=settings.google_cloud_credentials)

    from .tesseract import TesseractEngine

    return TesseractEngine(timeout=settings.ocr_timeout_seconds)


class TextExtractor:
    """
    Run the recognition engine and return its minimal extraction record.

    The engine's page confidence is passed through as reported. No retries:
    a failure is raised to the caller as OcrExtractionError.
    """

    def __init__(self, engine: BaseOCREngine | None = None, language: str | None = None):
        settings = get_settings()
        self.engine = engine or create_engine(settings)
        self.language = language or settings.ocr_language

    async def extract(
        self,
        image: bytes,
        language: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> OCRResult:
        """
        Recognize text in a normalized image.

        Args:
            image: Normalized image bytes
            language: Overrides the configured language for this call
            on_progress: Optional sink for engine progress (informational only)

        Returns:
            OCRResult from the engine
        """
        lang = language or self.language
        sink = self._safe_sink(on_progress)

        try:
            result = await asyncio.to_thread(self.engine.recognize, image, lang, sink)
        except OcrExtractionError:
            raise
        except Exception as e:
            raise OcrExtractionError(f"{self.engine.name} engine failed", cause=e) from e

        logger.info(
            "OCR completed with %s: %d words, %d lines, confidence %.1f",
            result.engine,
            result.word_count,
            result.line_count,
            result.confidence,
        )
        return result

    @staticmethod
    def _safe_sink(on_progress: ProgressCallback | None) -> ProgressCallback:
        """Wrap the caller's sink so it cannot affect recognition."""

        def sink(update: OCRProgress) -> None:
            logger.debug("OCR progress: %s %d%%", update.status, round(update.progress * 100))
            if on_progress is None:
                return
            try:
                on_progress(update)
            except Exception:
                logger.warning("Progress callback raised; ignoring", exc_info=True)

        return sink
