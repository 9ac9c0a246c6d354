"""Google Cloud Vision OCR engine."""

import logging
from pathlib import Path

from google.api_core.exceptions import GoogleAPIError
from google.cloud import vision

from ..core.errors import OcrExtractionError
from ..core.models import OCRResult
from .base import BaseOCREngine, OCRProgress, ProgressCallback

logger = logging.getLogger(__name__)

# Tesseract language codes -> Vision language hints
LANGUAGE_HINTS: dict[str, str] = {
    "eng": "en",
    "deu": "de",
    "fra": "fr",
    "spa": "es",
    "ita": "it",
    "por": "pt",
    "nld": "nl",
    "ces": "cs",
    "slk": "sk",
    "pol": "pl",
    "hin": "hi",
    "jpn": "ja",
    "chi_sim": "zh",
}


def language_hints(language: str) -> list[str]:
    """Map a Tesseract language string ('deu+eng') to Vision hints."""
    hints = []
    for code in language.split("+"):
        code = code.strip()
        if code:
            hints.append(LANGUAGE_HINTS.get(code, code))
    return hints


class GoogleVisionEngine(BaseOCREngine):
    """Recognize text using Google Cloud Vision document text detection."""

    name = "google_vision"

    def __init__(
        self,
        credentials_path: Path | None = None,
        client: vision.ImageAnnotatorClient | None = None,
    ):
        """
        Initialize Vision engine.

        Args:
            credentials_path: Path to Google Cloud service account JSON.
                            If None, uses GOOGLE_APPLICATION_CREDENTIALS env var.
            client: Preconfigured client, mainly for tests
        """
        self.credentials_path = credentials_path
        self._client = client

    @property
    def client(self) -> vision.ImageAnnotatorClient:
        """Lazy-load Vision client."""
        if self._client is None:
            if self.credentials_path:
                self._client = vision.ImageAnnotatorClient.from_service_account_file(
                    str(self.credentials_path)
                )
            else:
                self._client = vision.ImageAnnotatorClient()
        return self._client

    def recognize(
        self,
        image: bytes,
        language: str,
        progress: ProgressCallback | None = None,
    ) -> OCRResult:
        if progress:
            progress(OCRProgress(status="recognizing text", progress=0.0))

        image_context = vision.ImageContext(language_hints=language_hints(language))
        try:
            response = self.client.document_text_detection(
                image=vision.Image(content=image),
                image_context=image_context,
            )
        except GoogleAPIError as e:
            raise OcrExtractionError("Google Vision request failed", cause=e) from e

        if response.error.message:
            raise OcrExtractionError(f"Google Vision error: {response.error.message}")

        if progress:
            progress(OCRProgress(status="recognizing text", progress=1.0))

        annotation = response.full_text_annotation
        text = annotation.text if annotation else ""

        page_confidences = []
        word_count = 0
        if annotation:
            for page in annotation.pages:
                page_confidences.append(page.confidence)
                for block in page.blocks:
                    for paragraph in block.paragraphs:
                        word_count += len(paragraph.words)

        # Vision reports 0-1; engines report on the 0-100 scale
        confidence = (
            sum(page_confidences) / len(page_confidences) * 100 if page_confidences else 0.0
        )
        line_count = sum(1 for line in text.splitlines() if line.strip())

        logger.debug(
            "Vision recognized %d words on %d lines (confidence %.1f)",
            word_count,
            line_count,
            confidence,
        )

        return OCRResult(
            text=text,
            confidence=confidence,
            word_count=word_count,
            line_count=line_count,
            engine=self.name,
        )

    def is_available(self) -> bool:
        # Without an explicit file the client falls back to default credentials
        return self.credentials_path is None or Path(self.credentials_path).exists()
