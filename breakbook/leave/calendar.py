"""Working-day calendar — pure date arithmetic, no I/O.

Weekends are Saturday and Sunday. Holidays come from a ``HolidayCalendar``
built from fixed month/day patterns and expanded per year on demand.
"""

from __future__ import annotations

from datetime import date, timedelta
from functools import lru_cache
from typing import Iterable, Optional

from breakbook.common.constants import SATURDAY, SUNDAY
from breakbook.config import settings


class HolidayCalendar:
    """Fixed-date holidays (e.g. national days) recurring every year."""

    def __init__(self, patterns: Iterable[tuple[int, int]] = ()) -> None:
        self.patterns: tuple[tuple[int, int], ...] = tuple(sorted(set(patterns)))
        self._by_year: dict[int, frozenset[date]] = {}

    def holidays_for_year(self, year: int) -> frozenset[date]:
        """Concrete holiday dates for *year*; 29 Feb is skipped in non-leap years."""
        cached = self._by_year.get(year)
        if cached is None:
            days: set[date] = set()
            for month, day in self.patterns:
                try:
                    days.add(date(year, month, day))
                except ValueError:
                    continue
            cached = frozenset(days)
            self._by_year[year] = cached
        return cached

    def __contains__(self, d: date) -> bool:
        return d in self.holidays_for_year(d.year)

    def __repr__(self) -> str:
        return f"<HolidayCalendar {len(self.patterns)} patterns>"


@lru_cache(maxsize=1)
def default_calendar() -> HolidayCalendar:
    """Holiday calendar configured via ``settings.HOLIDAYS``."""
    return HolidayCalendar(settings.holiday_patterns)


def is_weekend(d: date) -> bool:
    return d.weekday() in (SATURDAY, SUNDAY)


def is_holiday(d: date, calendar: Optional[HolidayCalendar] = None) -> bool:
    return d in (calendar or default_calendar())


def count_working_days(
    start: date,
    end: date,
    calendar: Optional[HolidayCalendar] = None,
) -> int:
    """Count dates in the closed interval [start, end] that are neither
    weekend nor holiday.

    Raises:
        ValueError: if ``start`` is after ``end``.
    """
    if start > end:
        raise ValueError(
            f"start ({start.isoformat()}) must not be after end ({end.isoformat()})"
        )

    cal = calendar or default_calendar()
    count = 0
    current = start
    while current <= end:
        if not is_weekend(current) and current not in cal:
            count += 1
        current += timedelta(days=1)
    return count


def months_elapsed(from_date: date, as_of: date) -> int:
    """Whole months from *from_date* to *as_of*, clamped at 0.

    A month counts once the day-of-month of *as_of* reaches the
    day-of-month of *from_date* (15 Jan → 14 Feb is 0, → 15 Feb is 1).
    """
    if as_of < from_date:
        return 0
    months = (as_of.year - from_date.year) * 12 + (as_of.month - from_date.month)
    if as_of.day < from_date.day:
        months -= 1
    return max(months, 0)


def ranges_overlap(
    a_start: date,
    a_end: date,
    b_start: date,
    b_end: date,
) -> bool:
    """Closed-interval overlap: sharing a single day counts."""
    return a_start <= b_end and b_start <= a_end
