from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Optional, Tuple

_MONTHS = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

PRESENT_TERMS = {"present", "current", "now", "today", "ongoing"}

_MONTH_NAMES = "|".join(sorted(_MONTHS, key=len, reverse=True))

# One endpoint of a range: "Jan 2020", "January, 2020", "01/2020", "2020-01", "2020", "Present"
_POINT = (
    rf"(?:(?:{_MONTH_NAMES})\.?,?\s+\d{{4}}"
    r"|\d{1,2}/\d{4}"
    r"|\d{4}-\d{1,2}"
    r"|\d{4}"
    r"|present|current|now|today|ongoing)"
)
_RANGE_RE = re.compile(rf"(?P<start>{_POINT})\s*(?:-|to|until)\s*(?P<end>{_POINT})", re.IGNORECASE)


def _month_token_to_int(token: Optional[str]) -> Optional[int]:
    if not token:
        return None
    token_clean = token.strip().lower().rstrip(".,")
    if token_clean.isdigit():
        month_val = int(token_clean)
        if 1 <= month_val <= 12:
            return month_val
        return None
    return _MONTHS.get(token_clean)


def _valid_year(value: int) -> bool:
    return 1950 <= value <= datetime.now().year + 1


def parse_month_year(value: Any) -> Optional[date]:
    """
    Best-effort parse of a resume date into the first day of its month.

    Accepts date/datetime objects and strings such as "2020-03-15", "2020-03",
    "03/2020", "Mar 2020", "March, 2020" and "2020" (January assumed).
    Returns None for anything else, including "Present".
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().replace(day=1)
    if isinstance(value, date):
        return value.replace(day=1)

    raw = str(value).strip()
    if not raw or raw.lower() in PRESENT_TERMS:
        return None

    # ISO-like prefix: YYYY-MM[-DD][Thh:mm...]
    m = re.match(r"^(\d{4})-(\d{1,2})(?:-\d{1,2})?(?:[T ].*)?$", raw)
    if m:
        return _compose(int(m.group(1)), _month_token_to_int(m.group(2)))

    m = re.match(r"^(\d{1,2})/(?:\d{1,2}/)?(\d{4})$", raw)
    if m:
        return _compose(int(m.group(2)), _month_token_to_int(m.group(1)))

    m = re.match(r"^([A-Za-z]+)\.?,?\s+(\d{4})$", raw)
    if m:
        return _compose(int(m.group(2)), _month_token_to_int(m.group(1)))

    m = re.match(r"^(\d{4})$", raw)
    if m:
        return _compose(int(m.group(1)), 1)

    return None


def _compose(year: int, month: Optional[int]) -> Optional[date]:
    if month is None or not _valid_year(year):
        return None
    return date(year, month, 1)


def find_date_range(text: str) -> Optional[Tuple[Optional[date], Optional[date], bool]]:
    """
    Locate a "start - end" date range inside a free-text line.

    Returns (start, end, is_current) or None when no range is present.
    An end of "Present" yields end=None and is_current=True.
    """
    if not text:
        return None
    normalized = re.sub(r"[‐-―−]", "-", text)
    m = _RANGE_RE.search(normalized)
    if not m:
        return None
    start = parse_month_year(m.group("start"))
    end_raw = m.group("end").strip().lower()
    if end_raw in PRESENT_TERMS:
        return start, None, True
    end = parse_month_year(m.group("end"))
    if start is None and end is None:
        return None
    return start, end, False


def months_between(start: date, end: date) -> int:
    return (end.year - start.year) * 12 + (end.month - start.month)
