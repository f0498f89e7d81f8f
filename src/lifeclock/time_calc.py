"""
lifeclock/time_calc.py - Elapsed / Remaining Time Calculator

Calendar-aware duration breakdowns between two instants:
- Time lived: birth -> now
- Time remaining: now -> expected end (birth + life expectancy)

Breakdown Algorithm (nested subtraction):
1. Whole years Y such that start + Y years <= end
2. Whole months M such that start + Y years + M months <= end
3. Whole days, hours, minutes, seconds of what remains

Month/year addition clamps to the last day of a shorter month
(Jan 31 + 1 month = Feb 28/29; Feb 29 + 1 year = Feb 28).

All instants are naive datetimes in the host's local time; plain dates are
treated as midnight. Precision is calendar-day for the grid and one second
for the counters.

Author: LifeClock Project
License: MIT
"""

import calendar
import math
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Union
import logging

logger = logging.getLogger(__name__)

Instant = Union[date, datetime]

SECONDS_PER_DAY = 86400
SECONDS_PER_WEEK = 7 * SECONDS_PER_DAY


# =============================================================================
# CALENDAR ARITHMETIC
# =============================================================================

def as_datetime(value: Instant) -> datetime:
    """Promote a date to midnight; datetimes pass through unchanged."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time())


def add_months(value: datetime, months: int) -> datetime:
    """Add whole calendar months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def add_years(value: datetime, years: int) -> datetime:
    return add_months(value, 12 * years)


def add_fractional_years(value: datetime, years: float) -> datetime:
    """
    Add a possibly fractional number of years.

    Whole years are added on the calendar; the fraction is applied to the
    actual length of the following year (365 or 366 days).
    """
    whole = math.floor(years)
    fraction = years - whole
    anchor = add_years(value, whole)
    if fraction == 0:
        return anchor
    next_anchor = add_years(value, whole + 1)
    return anchor + (next_anchor - anchor) * fraction


def whole_years_between(start: datetime, end: datetime) -> int:
    """Full calendar years from start to end (negative if end precedes start)."""
    if end < start:
        return -whole_years_between(end, start)
    years = end.year - start.year
    if add_years(start, years) > end:
        years -= 1
    return years


def whole_months_between(start: datetime, end: datetime) -> int:
    """Full calendar months from start to end (negative if end precedes start)."""
    if end < start:
        return -whole_months_between(end, start)
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if add_months(start, months) > end:
        months -= 1
    return months


def whole_weeks_between(start: datetime, end: datetime) -> int:
    """Full 7-day weeks from start to end, truncated toward zero."""
    return int((end - start).total_seconds() / SECONDS_PER_WEEK)


def anniversary(birth: Instant, year: int) -> datetime:
    """
    Midnight of the birthday in a given year.

    A Feb 29 birthday falls on Feb 28 in non-leap years.
    """
    day = min(birth.day, calendar.monthrange(year, birth.month)[1])
    return datetime(year, birth.month, day)


# =============================================================================
# BREAKDOWN
# =============================================================================

@dataclass(frozen=True)
class TimeBreakdown:
    """
    A duration split into calendar components.

    Attributes:
        years, months, days, hours, minutes, seconds: Nested components
        total_seconds: Raw whole seconds between the two instants
    """
    years: int = 0
    months: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    total_seconds: int = 0

    @classmethod
    def zero(cls) -> 'TimeBreakdown':
        return cls()


def time_lived_since(birth: Instant, now: Instant) -> TimeBreakdown:
    """
    Break down the time elapsed from birth to now.

    Args:
        birth: Date/time of birth
        now: Reference instant

    Returns:
        TimeBreakdown; all zeros if birth is after now
    """
    start = as_datetime(birth)
    end = as_datetime(now)

    if start > end:
        return TimeBreakdown.zero()

    years = whole_years_between(start, end)
    after_years = add_years(start, years)

    months = whole_months_between(after_years, end)
    after_months = add_months(after_years, months)

    remainder = int((end - after_months).total_seconds())

    return TimeBreakdown(
        years=years,
        months=months,
        days=remainder // SECONDS_PER_DAY,
        hours=(remainder // 3600) % 24,
        minutes=(remainder // 60) % 60,
        seconds=remainder % 60,
        total_seconds=int((end - start).total_seconds()),
    )


def expected_end_date(birth: Instant, life_expectancy_years: float) -> datetime:
    """Birth plus the life expectancy, on the calendar."""
    return add_fractional_years(as_datetime(birth), life_expectancy_years)


def time_remaining_until(birth: Instant, life_expectancy_years: float,
                         now: Instant) -> TimeBreakdown:
    """
    Break down the time from now until the expected end of life.

    Args:
        birth: Date/time of birth
        life_expectancy_years: Expected lifespan from birth (fractional allowed)
        now: Reference instant

    Returns:
        TimeBreakdown; all zeros once the expected end has passed
        (see is_over_life_expectancy)
    """
    end = expected_end_date(birth, life_expectancy_years)
    current = as_datetime(now)

    if end < current:
        return TimeBreakdown.zero()

    return time_lived_since(current, end)


def is_over_life_expectancy(birth: Instant, life_expectancy_years: float,
                            now: Instant) -> bool:
    """True iff now is strictly after the expected end of life."""
    return as_datetime(now) > expected_end_date(birth, life_expectancy_years)


# =============================================================================
# FORMATTING
# =============================================================================

def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def format_time_lived(breakdown: TimeBreakdown) -> str:
    """e.g. '25 years, 3 months, 15 days' (zero components omitted)."""
    parts = []
    if breakdown.years > 0:
        parts.append(_plural(breakdown.years, 'year'))
    if breakdown.months > 0:
        parts.append(_plural(breakdown.months, 'month'))
    if breakdown.days > 0:
        parts.append(_plural(breakdown.days, 'day'))
    return ', '.join(parts)


def format_clock(hours: int, minutes: int, seconds: int) -> str:
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
