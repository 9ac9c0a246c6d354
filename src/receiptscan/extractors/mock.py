"""Mock OCR engine for testing without a recognition backend."""

from ..core.models import OCRResult
from .base import BaseOCREngine, OCRProgress, ProgressCallback


class MockOCREngine(BaseOCREngine):
    """Return fixed text for every image."""

    name = "mock"

    def __init__(self, mock_text: str = "", mock_confidence: float = 95.0):
        self.mock_text = mock_text
        self.mock_confidence = mock_confidence
        self.calls: list[tuple[bytes, str]] = []

    def recognize(
        self,
        image: bytes,
        language: str,
        progress: ProgressCallback | None = None,
    ) -> OCRResult:
        self.calls.append((image, language))
        if progress:
            progress(OCRProgress(status="recognizing text", progress=1.0))

        lines = [line for line in self.mock_text.splitlines() if line.strip()]
        return OCRResult(
            text=self.mock_text,
            confidence=self.mock_confidence,
            word_count=sum(len(line.split()) for line in lines),
            line_count=len(lines),
            engine=self.name,
        )
