"""Base OCR engine interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from ..core.models import OCRResult


@dataclass(frozen=True)
class OCRProgress:
    """Incremental progress reported by an engine."""

    status: str
    # Fraction of the current status completed (0-1)
    progress: float


ProgressCallback = Callable[[OCRProgress], None]


class BaseOCREngine(ABC):
    """Abstract base class for recognition engines."""

    name = "unknown"

    @abstractmethod
    def recognize(
        self,
        image: bytes,
        language: str,
        progress: ProgressCallback | None = None,
    ) -> OCRResult:
        """
        Recognize text in an encoded image.

        Blocking; callers run it off the event loop.

        Args:
            image: Encoded image bytes (normalized PNG)
            language: Tesseract-style language code (e.g., 'eng')
            progress: Optional sink for engine progress updates

        Returns:
            OCRResult with text, page confidence (0-100) and counts

        Raises:
            OcrExtractionError: If the engine fails
        """

    def is_available(self) -> bool:
        """Whether the engine's runtime dependencies are usable."""
        return True
