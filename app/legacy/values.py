"""Cleaning rules for values read from legacy staging tables.

Staging holds text only; these helpers turn it back into trimmed strings,
Decimals and dates. Blank input always becomes None.
"""
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

_DATE_FORMATS = ("%Y-%m-%d", "%Y%m%d", "%d/%m/%Y", "%d/%m/%y", "%d-%m-%Y")
_NUMBER_RE = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)$")


def to_staging_text(value: Any) -> Optional[str]:
    """Render a decoded DBF value as staging text (dates as ISO 8601)."""
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value).strip()


def normalize_string(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    text = str(value).strip()
    return text or None


def normalize_number(value: Any) -> Optional[Decimal]:
    """
    Parse a legacy number. Accepts "1234.5", "1234,5", "1.234,50" and
    "1,234.50": whichever of ',' and '.' comes last is the decimal separator,
    the other one is a thousands separator.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        try:
            parsed = Decimal(str(value))
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None

    text = str(value).strip().replace(" ", "")
    if not text:
        return None
    if "," in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    if not _NUMBER_RE.match(text):
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def normalize_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    # ISO datetimes written by the staging loader: keep the date part
    if len(text) > 10 and text[4:5] == "-" and text[10:11] in ("T", " "):
        text = text[:10]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def normalize_code(value: Any) -> Optional[str]:
    """Legacy codes are compared trimmed; blank codes never match anything."""
    return normalize_string(value)
