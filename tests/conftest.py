"""Pytest configuration and fixtures."""

import io
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from receiptscan.core.pipeline import ReceiptPipeline
from receiptscan.extractors import MockOCREngine, TextExtractor

WALMART_TEXT = "WALMART\n05/12/2024\nTotal: $23.47"

CAFE_RECEIPT_TEXT = """BLUE BOTTLE CAFE
221 Market Street
March 3, 2024
2x Cappuccino      9.00
Croissant          4.25
Subtotal          13.25
Tax                1.19
TOTAL            $14.44
Thank you!
"""


def _receipt_image() -> Image.Image:
    """Low-contrast grey 'photo' with a few dark bars standing in for text."""
    img = Image.new("RGB", (240, 320), (150, 150, 140))
    draw = ImageDraw.Draw(img)
    for row in range(6):
        top = 30 + row * 40
        draw.rectangle([20, top, 200, top + 12], fill=(110, 110, 105))
    return img


@pytest.fixture
def receipt_png_bytes() -> bytes:
    """Encoded PNG receipt image."""
    buf = io.BytesIO()
    _receipt_image().save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def receipt_image_path(tmp_path: Path) -> Path:
    """Receipt image saved as JPEG on disk."""
    path = tmp_path / "receipt.jpg"
    _receipt_image().save(path, format="JPEG")
    return path


@pytest.fixture
def walmart_engine() -> MockOCREngine:
    return MockOCREngine(mock_text=WALMART_TEXT, mock_confidence=87.5)


@pytest.fixture
def walmart_pipeline(walmart_engine) -> ReceiptPipeline:
    """Pipeline with the real normalizer and parser and a mock OCR engine."""
    return ReceiptPipeline(extractor=TextExtractor(walmart_engine, language="eng"))


@pytest.fixture
def walmart_text() -> str:
    return WALMART_TEXT


@pytest.fixture
def cafe_receipt_text() -> str:
    return CAFE_RECEIPT_TEXT
