"""Tesseract OCR engine."""

import io
import logging

import pytesseract
from PIL import Image, UnidentifiedImageError
from pytesseract import Output

from ..core.errors import OcrExtractionError
from ..core.models import OCRResult
from .base import BaseOCREngine, OCRProgress, ProgressCallback

logger = logging.getLogger(__name__)

# image_to_data level for word rows
WORD_LEVEL = 5


def configure_tesseract_cmd(tesseract_cmd: str | None) -> None:
    """
    Point pytesseract at a tesseract binary outside PATH.

    The command is a pytesseract module global shared by every engine;
    applied once at startup.
    """
    if tesseract_cmd:
        pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        logger.info(f"Using tesseract binary {tesseract_cmd}")


class TesseractEngine(BaseOCREngine):
    """Recognize text with a local Tesseract install via pytesseract."""

    name = "tesseract"

    def __init__(self, timeout: float = 0, config: str = ""):
        """
        Args:
            timeout: Seconds before the tesseract process is killed, 0 for none
            config: Extra command line options passed to tesseract
        """
        self.timeout = timeout
        self.config = config

    def recognize(
        self,
        image: bytes,
        language: str,
        progress: ProgressCallback | None = None,
    ) -> OCRResult:
        if progress:
            progress(OCRProgress(status="recognizing text", progress=0.0))

        try:
            with Image.open(io.BytesIO(image)) as img:
                img.load()
                data = pytesseract.image_to_data(
                    img,
                    lang=language,
                    config=self.config,
                    output_type=Output.DICT,
                    timeout=self.timeout,
                )
        except (UnidentifiedImageError, pytesseract.TesseractError, RuntimeError, OSError) as e:
            # TesseractNotFoundError is an OSError; timeouts are RuntimeErrors
            raise OcrExtractionError("Failed to extract text from image", cause=e) from e

        if progress:
            progress(OCRProgress(status="recognizing text", progress=1.0))

        return self._build_result(data)

    def _build_result(self, data: dict) -> OCRResult:
        """Rebuild page text and counts from word-level rows."""
        lines: list[tuple[tuple[int, int, int, int], list[str]]] = []
        confidences: list[float] = []
        word_count = 0

        for i, level in enumerate(data.get("level", [])):
            if int(level) != WORD_LEVEL:
                continue
            word = str(data["text"][i]).strip()
            if not word:
                continue

            word_count += 1
            conf = float(data["conf"][i])
            if conf >= 0:
                confidences.append(conf)

            key = (
                int(data["page_num"][i]),
                int(data["block_num"][i]),
                int(data["par_num"][i]),
                int(data["line_num"][i]),
            )
            if lines and lines[-1][0] == key:
                lines[-1][1].append(word)
            else:
                lines.append((key, [word]))

        text_lines: list[str] = []
        previous_paragraph = None
        for key, words in lines:
            paragraph = key[:3]
            if previous_paragraph is not None and paragraph != previous_paragraph:
                text_lines.append("")
            text_lines.append(" ".join(words))
            previous_paragraph = paragraph

        confidence = sum(confidences) / len(confidences) if confidences else 0.0

        logger.debug(
            "Tesseract recognized %d words on %d lines (confidence %.1f)",
            word_count,
            len(lines),
            confidence,
        )

        return OCRResult(
            text="\n".join(text_lines),
            confidence=confidence,
            word_count=word_count,
            line_count=len(lines),
            engine=self.name,
        )

    def is_available(self) -> bool:
        try:
            pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError:
            return False
        return True
