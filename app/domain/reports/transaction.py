"""Transaction row parsing for the report aggregators.

Input rows are plain comma-separated lines with a fixed column order:

    date, account, description, debit, credit

No quoting is supported; short rows are padded with empty strings.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime

FIELD_COUNT = 5

# Leading numeric prefix, same leniency as a "parse the number at the start" reader:
# "40" → 40, " 12.5abc" → 12.5, "Infinity" → inf, "abc" and "  " → NaN.
_NUMBER_PREFIX = re.compile(
    r"^\s*([+-]?(?:Infinity|\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?))"
)

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d",
    "%m/%d/%Y",
)


@dataclass(frozen=True)
class TransactionRow:
    date: str
    account: str
    description: str
    debit: str
    credit: str

    def delta(self) -> float:
        """Signed contribution of the row: debit − credit."""
        return to_number(self.debit) - to_number(self.credit)


def parse_line(line: str) -> TransactionRow:
    """Split a raw line into a TransactionRow.

    Extra columns beyond the fifth are ignored.
    """
    parts = line.rstrip("\r\n").split(",")
    if len(parts) < FIELD_COUNT:
        parts.extend([""] * (FIELD_COUNT - len(parts)))
    return TransactionRow(*parts[:FIELD_COUNT])


def to_number(value: str | None) -> float:
    """Parse an amount field. Missing or empty → 0; anything else without a
    numeric prefix (whitespace included) → NaN."""
    if not value:
        return 0.0
    match = _NUMBER_PREFIX.match(value)
    if not match:
        return math.nan
    return float(match.group(1))


def parse_year(raw: str | None) -> str | None:
    """Return the 4-digit year of a date field, or None when it does not parse."""
    if not raw or not raw.strip():
        return None
    value = raw.strip()
    for fmt in _DATE_FORMATS:
        try:
            return f"{datetime.strptime(value, fmt).year:04d}"
        except ValueError:
            continue
    try:
        return f"{datetime.fromisoformat(value).year:04d}"
    except ValueError:
        return None


def format_amount(value: float) -> str:
    """Fixed two-decimal rendering used by every report.

    Non-finite values print as NaN, Infinity and -Infinity.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return f"{value:.2f}"
