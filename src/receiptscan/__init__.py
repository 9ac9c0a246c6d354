"""Receipt scanning: image preprocessing, OCR and expense field extraction."""

__version__ = "0.1.0"
