"""Receipt text parsing."""

from .receipt_parser import (
    CATEGORY_KEYWORDS,
    ReceiptFieldParser,
    normalize_amount,
    parse_amount,
    parse_category,
    parse_currency,
    parse_date,
    parse_merchant,
)

__all__ = [
    "CATEGORY_KEYWORDS",
    "ReceiptFieldParser",
    "normalize_amount",
    "parse_amount",
    "parse_category",
    "parse_currency",
    "parse_date",
    "parse_merchant",
]
