"""Pydantic models for OCR output and extracted receipt data."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ExpenseCategory(str, Enum):
    """Expense categories, in keyword-matching order."""

    TRAVEL = "Travel"
    MEALS = "Meals"
    OFFICE_SUPPLIES = "Office Supplies"
    TRANSPORTATION = "Transportation"
    ACCOMMODATION = "Accommodation"
    ENTERTAINMENT = "Entertainment"
    TECHNOLOGY = "Technology"


class OCRResult(BaseModel):
    """Minimal record produced by a recognition engine for one image."""

    text: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=100.0, description="Engine page confidence 0-100")
    word_count: int = Field(default=0, ge=0)
    line_count: int = Field(default=0, ge=0)
    engine: str = "unknown"


class ParsedReceiptFields(BaseModel):
    """Business fields inferred from receipt text. Absent means not detected."""

    amount: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    date: str | None = Field(default=None, description="Date as printed, not canonicalized")
    merchant: str | None = None
    category: ExpenseCategory | None = None


class ExtractedReceiptData(ParsedReceiptFields):
    """
    Full extraction record for one receipt image.

    Parsed fields plus the engine metadata. Serialized with camelCase keys
    for API consumers.
    """

    model_config = ConfigDict(populate_by_name=True)

    confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    raw_text: str = Field(default="", alias="rawText")
    word_count: int = Field(default=0, ge=0, alias="wordCount")
    line_count: int = Field(default=0, ge=0, alias="lineCount")

    @classmethod
    def from_parts(cls, fields: ParsedReceiptFields, ocr: OCRResult) -> "ExtractedReceiptData":
        """Merge parser output with extractor metadata."""
        return cls(
            **fields.model_dump(),
            confidence=ocr.confidence,
            raw_text=ocr.text,
            word_count=ocr.word_count,
            line_count=ocr.line_count,
        )

    def to_json(self) -> dict[str, Any]:
        """JSON-serializable record with camelCase keys; missing fields are null."""
        return self.model_dump(mode="json", by_alias=True)
