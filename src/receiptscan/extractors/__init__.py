"""OCR engines and the text extraction stage."""

from .base import BaseOCREngine, OCRProgress, ProgressCallback
from .mock import MockOCREngine
from .tesseract import TesseractEngine, configure_tesseract_cmd
from .text_extractor import TextExtractor, create_engine


# Lazy import for GoogleVisionEngine; the Vision client stack is heavy to load
def __getattr__(name):
    if name == "GoogleVisionEngine":
        from .google_vision import GoogleVisionEngine
        return GoogleVisionEngine
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "BaseOCREngine",
    "GoogleVisionEngine",
    "MockOCREngine",
    "OCRProgress",
    "ProgressCallback",
    "TesseractEngine",
    "TextExtractor",
    "configure_tesseract_cmd",
    "create_engine",
]
