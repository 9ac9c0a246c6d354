"""
Heuristic field extraction from OCR'd receipt text.

Every field is detected independently. A field that cannot be found is left
as None; the parser never raises for a missing match.
"""

import logging
import math
import re
from typing import Mapping, Sequence

from ..core.models import ExpenseCategory, ParsedReceiptFields

logger = logging.getLogger(__name__)

CURRENCY_CODES = ("USD", "EUR", "GBP", "INR", "CAD", "AUD", "JPY", "CNY")

# Checked in this order when no explicit code is present
CURRENCY_SYMBOLS: tuple[tuple[str, str], ...] = (
    ("$", "USD"),
    ("€", "EUR"),
    ("£", "GBP"),
    ("₹", "INR"),
)

# Decimal number: European grouping (1.234,56) or a plain decimal (123.45 / 123,45)
_DECIMAL = r"\d{1,3}(?:\.\d{3})+,\d{1,2}|\d+[.,]\d{1,2}"
_CODES = "|".join(CURRENCY_CODES)

# Most specific first. Only the first match of each pattern is considered.
AMOUNT_PATTERNS: Sequence[tuple[str, re.Pattern]] = (
    ("dollar_prefixed", re.compile(rf"\$\s*({_DECIMAL})", re.ASCII)),
    ("currency_code_suffix", re.compile(rf"({_DECIMAL})\s*(?:{_CODES})", re.ASCII | re.IGNORECASE)),
    (
        "labeled",
        re.compile(
            rf"(?:total|amount|sum|price|cost|charge)[:\s]*\$?\s*({_DECIMAL})",
            re.ASCII | re.IGNORECASE,
        ),
    ),
    ("rupee_prefixed", re.compile(r"(?:rs|₹)\s*(\d+[.,]?\d*)", re.ASCII | re.IGNORECASE)),
    (
        "currency_word_suffix",
        re.compile(rf"({_DECIMAL})\s*(?:dollars?|euros?|pounds?|rupees?)", re.ASCII | re.IGNORECASE),
    ),
    ("thousands_grouped", re.compile(r"\$?\s*(\d{1,3}(?:[.,]\d{3})*[.,]\d{2})", re.ASCII)),
    ("integer_with_code", re.compile(r"(\d+)\s*(?:USD|EUR|GBP|INR)", re.ASCII | re.IGNORECASE)),
    ("any_decimal", re.compile(r"\b(\d+[.,]\d{1,2})\b", re.ASCII)),
)

# Only tried when the whole cascade above found nothing. Misfires on phone
# numbers and quantities; kept because callers expect some amount.
LAST_RESORT_INTEGER = re.compile(r"\b(\d+)\b", re.ASCII)

_MONTHS = "Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"

DATE_PATTERNS: Sequence[re.Pattern] = (
    re.compile(r"(?<!\d)\d{1,2}[-/]\d{1,2}[-/]\d{2,4}", re.ASCII),  # 12/31/2024 or 31-12-2024
    re.compile(r"\d{4}[-/]\d{1,2}[-/]\d{1,2}", re.ASCII),  # 2024-12-31
    re.compile(rf"(?:{_MONTHS})[a-z]*\s+\d{{1,2}},?\s+\d{{4}}", re.ASCII | re.IGNORECASE),  # January 15, 2024
    re.compile(rf"\d{{1,2}}\s+(?:{_MONTHS})[a-z]*\s+\d{{4}}", re.ASCII | re.IGNORECASE),  # 15 January 2024
)

_CURRENCY_CODE_RE = re.compile(rf"\b({_CODES})\b", re.ASCII | re.IGNORECASE)
_LEADING_DIGIT = re.compile(r"^\d", re.ASCII)
_NON_NUMERIC = re.compile(r"[^\d.,]", re.ASCII)
_FLOAT_PREFIX = re.compile(r"\d+(?:\.\d*)?|\.\d+", re.ASCII)

MERCHANT_SCAN_LINES = 3
MERCHANT_MIN_LENGTH = 3  # exclusive
MERCHANT_MAX_LENGTH = 50  # exclusive

CATEGORY_KEYWORDS: Mapping[ExpenseCategory, tuple[str, ...]] = {
    ExpenseCategory.TRAVEL: ("taxi", "uber", "lyft", "flight", "hotel", "airline", "airport", "train", "bus"),
    ExpenseCategory.MEALS: ("restaurant", "cafe", "coffee", "food", "dining", "lunch", "dinner", "breakfast"),
    ExpenseCategory.OFFICE_SUPPLIES: ("office", "supplies", "stationery", "paper", "pen", "printer"),
    ExpenseCategory.TRANSPORTATION: ("gas", "fuel", "parking", "toll", "metro", "subway"),
    ExpenseCategory.ACCOMMODATION: ("hotel", "motel", "inn", "lodge", "resort", "airbnb"),
    ExpenseCategory.ENTERTAINMENT: ("movie", "cinema", "theater", "concert", "event"),
    ExpenseCategory.TECHNOLOGY: ("electronics", "computer", "software", "hardware", "tech"),
}


def normalize_amount(fragment: str) -> float | None:
    """
    Convert a matched amount fragment to a float.

    Both ',' and '.' present: '.' groups thousands and ',' is the decimal
    point (1.234,56 -> 1234.56). Only ',' present: decimal when exactly two
    digits follow it (123,45), thousands otherwise (1,234). The leading
    numeric prefix of the cleaned string is read.
    """
    cleaned = _NON_NUMERIC.sub("", fragment)
    if "," in cleaned and "." in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    elif "," in cleaned:
        if len(cleaned.split(",")[1]) == 2:
            cleaned = cleaned.replace(",", ".", 1)
        else:
            cleaned = cleaned.replace(",", "")

    match = _FLOAT_PREFIX.match(cleaned)
    if not match:
        return None
    value = float(match.group())
    return value if math.isfinite(value) else None


def _is_valid_amount(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def parse_amount(text: str) -> float | None:
    """Return the first positive amount found by the pattern cascade."""
    for name, pattern in AMOUNT_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        value = normalize_amount(match.group(1))
        if _is_valid_amount(value):
            logger.debug("Amount %s detected by pattern %s", value, name)
            return value

    match = LAST_RESORT_INTEGER.search(text)
    if match:
        value = float(match.group(1))
        if _is_valid_amount(value):
            logger.debug("Amount %s detected by bare integer fallback", value)
            return value

    logger.debug("No amount detected")
    return None


def parse_currency(text: str) -> str | None:
    """Explicit currency code first, then a currency symbol."""
    match = _CURRENCY_CODE_RE.search(text)
    if match:
        return match.group(1).upper()
    for symbol, code in CURRENCY_SYMBOLS:
        if symbol in text:
            return code
    return None


def parse_date(text: str) -> str | None:
    """
    Return the first date-looking substring, verbatim.

    D/M vs M/D ordering is ambiguous, so no calendar date is built here.
    """
    for pattern in DATE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None


def parse_merchant(text: str) -> str | None:
    """First of the top non-blank lines that looks like a name."""
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    for line in lines[:MERCHANT_SCAN_LINES]:
        if MERCHANT_MIN_LENGTH < len(line) < MERCHANT_MAX_LENGTH and not _LEADING_DIGIT.match(line):
            return line
    return None


def parse_category(
    text: str,
    keywords: Mapping[ExpenseCategory, Sequence[str]] = CATEGORY_KEYWORDS,
) -> ExpenseCategory | None:
    """First category, in mapping order, with any keyword in the text."""
    lowered = text.lower()
    for category, words in keywords.items():
        if any(word in lowered for word in words):
            return category
    return None


class ReceiptFieldParser:
    """Turn raw OCR text into ParsedReceiptFields."""

    def __init__(self, category_keywords: Mapping[ExpenseCategory, Sequence[str]] | None = None):
        self.category_keywords = CATEGORY_KEYWORDS if category_keywords is None else category_keywords

    def parse(self, text: str) -> ParsedReceiptFields:
        logger.debug("Parsing OCR text (%d chars)", len(text))

        fields = ParsedReceiptFields(
            amount=parse_amount(text),
            currency=parse_currency(text),
            date=parse_date(text),
            merchant=parse_merchant(text),
            category=parse_category(text, self.category_keywords),
        )

        logger.debug(
            "Parsed fields: amount=%s currency=%s date=%s merchant=%r category=%s",
            fields.amount,
            fields.currency,
            fields.date,
            fields.merchant,
            fields.category.value if fields.category else None,
        )
        return fields
