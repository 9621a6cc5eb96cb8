import calendar
import re
from datetime import date
from typing import Tuple

PERIOD_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_period(period: str) -> Tuple[int, int]:
    """Split a ``YYYY-MM`` billing period into (year, month).

    Raises ValueError for anything that is not a real calendar month.
    """
    m = PERIOD_RE.match(period or "")
    if not m:
        raise ValueError(f"invalid period {period!r}, expected YYYY-MM")
    year, month = int(m.group(1)), int(m.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"invalid period {period!r}, month out of range")
    return year, month


def period_bounds(period: str) -> Tuple[date, date]:
    year, month = parse_period(period)
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def previous_period(period: str) -> str:
    year, month = parse_period(period)
    year = year + (month - 2) // 12
    month = (month - 2) % 12 + 1
    return f"{year:04d}-{month:02d}"
