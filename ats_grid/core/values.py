"""
Value coercion helpers shared by the filter and sort engines.
"""

import math
import unicodedata
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Optional

MS_PER_DAY = 86_400_000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def is_number(value: Any) -> bool:
    """True for real numbers; bools are excluded."""
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def coerce_number(value: Any) -> Optional[float]:
    """Convert a cell value to float, or None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if is_number(value):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", ""))
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def parse_date_like(value: Any) -> Optional[datetime | date]:
    """Parse a date, datetime or ISO-8601 string. Returns None otherwise."""
    if isinstance(value, (datetime, date)):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def is_date_only(value: Any) -> bool:
    """True when a parsed value carries no time of day."""
    return isinstance(value, date) and not isinstance(value, datetime)


def to_epoch_ms(value: Any) -> Optional[float]:
    """
    Epoch milliseconds for a date-like value.

    Naive datetimes and plain dates are interpreted as UTC.
    """
    parsed = parse_date_like(value)
    if parsed is None:
        return None
    if is_date_only(parsed):
        parsed = datetime.combine(parsed, time.min)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return (parsed - _EPOCH).total_seconds() * 1000.0


def collation_key(text: str) -> tuple[str, str]:
    """
    Locale-aware collation key for strings.

    Primary strength ignores case and accents, so "émile" sorts with
    "Emile"; the raw string breaks ties deterministically.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), text
