"""Core module - models, errors and pipeline.

The pipeline lives in `receiptscan.core.pipeline`; it is not re-exported here
because the stage packages import these models.
"""

from .errors import ImageProcessingError, OcrExtractionError, ReceiptProcessingError
from .models import (
    ExpenseCategory,
    ExtractedReceiptData,
    OCRResult,
    ParsedReceiptFields,
)

__all__ = [
    "ExpenseCategory",
    "ExtractedReceiptData",
    "ImageProcessingError",
    "OCRResult",
    "OcrExtractionError",
    "ParsedReceiptFields",
    "ReceiptProcessingError",
]
