"""Date utilities: calendar date parsing, report ranges and month keys.

Pure functions, no I/O. Transaction dates are calendar dates in UTC, so the
month of a transaction is simply the year and month of its ``txn_date``.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Optional

from fintrack.domain.models import Month


_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD calendar date.

    Raises:
        ValueError: If the value is not a valid date in that format.
    """
    if not isinstance(value, str) or not _DATE_RE.match(value.strip()):
        raise ValueError(f"expected YYYY-MM-DD, got {value!r}")
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass(frozen=True)
class DateRange:
    """Report range: ``start`` inclusive, ``end`` inclusive through end of day.

    Either bound may be missing. Membership is checked as
    ``start <= d < end + 1 day`` so that anything recorded on ``end`` counts.
    """

    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def end_exclusive(self) -> Optional[date]:
        return self.end + timedelta(days=1) if self.end else None

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        end_exclusive = self.end_exclusive
        if end_exclusive is not None and not day < end_exclusive:
            return False
        return True

    def to_dict(self) -> dict:
        return {
            "from": self.start.isoformat() if self.start else None,
            "to": self.end.isoformat() if self.end else None,
        }


def month_key(day: date) -> Month:
    return Month(f"{day.year:04d}-{day.month:02d}")


def month_start(day: date) -> date:
    return day.replace(day=1)


def add_months(day: date, months: int) -> date:
    """Shift the first day of ``day``'s month by ``months`` (may be negative)."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def iter_months(start: date, count: int) -> Iterator[Month]:
    """Yield ``count`` consecutive month keys beginning with ``start``'s month."""
    for offset in range(count):
        yield month_key(add_months(start, offset))
