"""
lifeclock/timeline.py - Life Timeline Grid Builder

Lays a lifetime out as a grid of discrete units, each classified as
pre-birth, lived, current or future relative to a reference instant.

Granularities:
- YEARS:  one cell per calendar year from the birth year, ceil(LE) cells,
          10 columns (one row per decade)
- MONTHS: calendar-aligned 12 columns (Jan-Dec) x one row per calendar year,
          birth year through birth year + ceil(LE); months before birth in
          the birth year are pre-birth placeholders
- WEEKS:  ceil(LE x 52) consecutive 7-day cells starting at the birth
          instant (not ISO weeks, so they drift against the calendar),
          52 columns

Classification depends only on the reference instant versus the cell's
calendar position. Grids are rebuilt wholesale on every call; nothing is
mutated in place.

Counting Conventions:
- YEARS:  lived = index of current year, remaining = total - current - 1
- MONTHS: lived counts lived AND current cells, remaining = total - lived - 1
          when a current cell exists
- WEEKS:  lived = whole weeks elapsed, remaining excludes the current week

Author: LifeClock Project
License: MIT
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Union
import logging

import pandas as pd

from .time_calc import (
    Instant,
    anniversary,
    as_datetime,
    whole_weeks_between,
    whole_years_between,
)

logger = logging.getLogger(__name__)

YEARS_COLUMNS = 10
MONTHS_COLUMNS = 12
WEEKS_COLUMNS = 52
WEEKS_PER_YEAR = 52


class Granularity(Enum):
    """Size of one timeline cell."""
    YEARS = "years"
    MONTHS = "months"
    WEEKS = "weeks"


@dataclass(frozen=True)
class TimelineUnit:
    """
    One grid cell.

    Attributes:
        index: Sequential position (0-based, chronological)
        is_lived: Entirely in the past
        is_current: Contains the reference instant
        is_pre_birth: Calendar placeholder before birth (months view only)
        label: Short label, e.g. "Jan 2020"
        details_text: Tooltip text
        age: Age shown for this cell
    """
    index: int
    is_lived: bool
    is_current: bool
    is_pre_birth: bool
    label: str
    details_text: str
    age: int

    @property
    def status(self) -> str:
        if self.is_pre_birth:
            return 'pre-birth'
        if self.is_current:
            return 'current'
        return 'lived' if self.is_lived else 'future'


@dataclass(frozen=True)
class GridLayout:
    """
    Aggregate description of a unit sequence.

    Attributes:
        rows, columns: Grid shape
        total_units: Number of cells (including pre-birth placeholders)
        lived_units: Cells counted as lived (see module docstring)
        remaining_units: Cells counted as remaining
        current_unit_index: Index of the current cell, None if outside the grid
        percent_complete: lived_units / total_units x 100, in [0, 100]
        actual_years: Years view only, precise whole years lived
        actual_total_years: Years view only, total years in the grid
    """
    rows: int
    columns: int
    total_units: int
    lived_units: int
    remaining_units: int
    current_unit_index: Optional[int]
    percent_complete: float
    actual_years: Optional[int] = None
    actual_total_years: Optional[int] = None


@dataclass(frozen=True)
class TimelineData:
    """Layout plus units for one granularity."""
    granularity: Granularity
    layout: GridLayout
    units: List[TimelineUnit] = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        """One row per unit, with grid position, for tabular export."""
        columns = self.layout.columns
        return pd.DataFrame([
            {
                'Index': u.index,
                'Row': u.index // columns,
                'Column': u.index % columns,
                'Label': u.label,
                'Age': u.age,
                'Status': u.status,
                'Details': u.details_text,
            }
            for u in self.units
        ], columns=['Index', 'Row', 'Column', 'Label', 'Age', 'Status', 'Details'])


def _percent(lived: int, total: int) -> float:
    return (lived / total) * 100 if total else 0.0


# =============================================================================
# YEARS
# =============================================================================

def build_years_timeline(birth: Instant, now: Instant,
                         life_expectancy: float) -> TimelineData:
    """
    One cell per calendar year, 10 per row.

    The age shown for year i is the age turned during that calendar year,
    i.e. i itself. The current year's tooltip says whether this year's
    birthday has happened yet.
    """
    birth = as_datetime(birth)
    now = as_datetime(now)

    total_years = math.ceil(life_expectancy)
    current_index = now.year - birth.year
    birthday_has_passed = now >= anniversary(birth, now.year)

    units = []
    for i in range(total_years):
        calendar_year = birth.year + i
        is_current = i == current_index
        is_lived = calendar_year < now.year

        if is_current and not birthday_has_passed:
            details = (f"{calendar_year} (Currently {i - 1}, turning {i} "
                       f"on {birth:%b} {birth.day})")
        else:
            details = f"{calendar_year} (Age {i})"

        units.append(TimelineUnit(
            index=i,
            is_lived=is_lived,
            is_current=is_current,
            is_pre_birth=False,
            label=str(calendar_year),
            details_text=details,
            age=i,
        ))

    has_current = 0 <= current_index < total_years
    lived = min(max(current_index, 0), total_years)

    layout = GridLayout(
        rows=math.ceil(total_years / YEARS_COLUMNS),
        columns=YEARS_COLUMNS,
        total_units=total_years,
        lived_units=lived,
        remaining_units=max(total_years - lived - (1 if has_current else 0), 0),
        current_unit_index=current_index if has_current else None,
        percent_complete=_percent(lived, total_years),
        actual_years=max(whole_years_between(birth, now), 0),
        actual_total_years=total_years,
    )
    return TimelineData(Granularity.YEARS, layout, units)


# =============================================================================
# MONTHS
# =============================================================================

def _month_age(year_offset: int, month: int, birth_month: int) -> int:
    """Age during a month: the birthday month and later show this year's age."""
    if month >= birth_month:
        return year_offset
    return max(year_offset - 1, 0)


def build_months_timeline(birth: Instant, now: Instant,
                          life_expectancy: float) -> TimelineData:
    """
    Calendar-aligned months: every row is a full Jan-Dec calendar year.

    Birthday-month cells carry an age transition ("Age 45 -> 46"), except
    the birth month itself which is "(Age 0)".
    """
    birth = as_datetime(birth)
    now = as_datetime(now)

    total_years = math.ceil(life_expectancy) + 1
    total_units = total_years * MONTHS_COLUMNS

    units = []
    lived_count = 0
    current_index = None

    for year_offset in range(total_years):
        year = birth.year + year_offset

        for month in range(1, MONTHS_COLUMNS + 1):
            index = year_offset * MONTHS_COLUMNS + (month - 1)
            month_start = datetime(year, month, 1)
            label = f"{month_start:%b %Y}"

            if year_offset == 0 and month < birth.month:
                units.append(TimelineUnit(
                    index=index,
                    is_lived=False,
                    is_current=False,
                    is_pre_birth=True,
                    label=label,
                    details_text=f"Born {birth:%B %d, %Y}",
                    age=0,
                ))
                continue

            age = _month_age(year_offset, month, birth.month)
            if month == birth.month and year_offset == 0:
                details = f"{month_start:%B %Y} (Age 0)"
            elif month == birth.month:
                details = f"{month_start:%B %Y} (Age {year_offset - 1} → {year_offset})"
            else:
                details = f"{month_start:%B %Y} (Age {age})"

            is_current = (year, month) == (now.year, now.month)
            is_lived = (year, month) < (now.year, now.month)

            if is_lived or is_current:
                lived_count += 1
            if is_current:
                current_index = index

            units.append(TimelineUnit(
                index=index,
                is_lived=is_lived,
                is_current=is_current,
                is_pre_birth=False,
                label=label,
                details_text=details,
                age=age,
            ))

    layout = GridLayout(
        rows=total_years,
        columns=MONTHS_COLUMNS,
        total_units=total_units,
        lived_units=lived_count,
        remaining_units=total_units - lived_count - (1 if current_index is not None else 0),
        current_unit_index=current_index,
        percent_complete=_percent(lived_count, total_units),
    )
    return TimelineData(Granularity.MONTHS, layout, units)


# =============================================================================
# WEEKS
# =============================================================================

def _contains_birthday(birth: datetime, week_start: datetime, week_end: datetime) -> bool:
    for year in range(week_start.year, week_end.year + 1):
        if week_start <= anniversary(birth, year) < week_end:
            return True
    return False


def build_weeks_timeline(birth: Instant, now: Instant,
                         life_expectancy: float) -> TimelineData:
    """
    Consecutive 7-day weeks from the birth instant, 52 per row.

    A week spanning a birthday shows the age transition; week 0 never does,
    since the only anniversary it could contain is the birth itself.
    """
    birth = as_datetime(birth)
    now = as_datetime(now)

    total_weeks = math.ceil(life_expectancy * WEEKS_PER_YEAR)
    lived_weeks = whole_weeks_between(birth, now)

    units = []
    for i in range(total_weeks):
        week_start = birth + timedelta(weeks=i)
        week_end = week_start + timedelta(weeks=1)
        span = f"Week {i + 1:,}: {week_start:%b %d}-{week_end:%b %d, %Y}"

        age = whole_years_between(birth, week_start)
        if i > 0 and _contains_birthday(birth, week_start, week_end):
            details = f"{span} (Age {age} → {age + 1})"
            age += 1
        else:
            details = f"{span} (Age {age})"

        units.append(TimelineUnit(
            index=i,
            is_lived=i < lived_weeks,
            is_current=i == lived_weeks,
            is_pre_birth=False,
            label=f"{week_start:%b %d, %Y}",
            details_text=details,
            age=age,
        ))

    has_current = 0 <= lived_weeks < total_weeks
    lived = min(max(lived_weeks, 0), total_weeks)

    layout = GridLayout(
        rows=math.ceil(total_weeks / WEEKS_COLUMNS),
        columns=WEEKS_COLUMNS,
        total_units=total_weeks,
        lived_units=lived,
        remaining_units=max(total_weeks - lived - (1 if has_current else 0), 0),
        current_unit_index=lived_weeks if has_current else None,
        percent_complete=_percent(lived, total_weeks),
    )
    return TimelineData(Granularity.WEEKS, layout, units)


# =============================================================================
# DISPATCH
# =============================================================================

_BUILDERS = {
    Granularity.YEARS: build_years_timeline,
    Granularity.MONTHS: build_months_timeline,
    Granularity.WEEKS: build_weeks_timeline,
}


def build_timeline(birth: Instant, now: Instant, life_expectancy: float,
                   granularity: Union[Granularity, str]) -> Optional[TimelineData]:
    """
    Build the grid for one granularity.

    Args:
        birth: Date/time of birth
        now: Reference instant (the host's clock tick)
        life_expectancy: Expected lifespan in years
        granularity: Granularity or its value ('years', 'months', 'weeks')

    Returns:
        TimelineData, or None (with a logged error) for an unknown
        granularity or a non-positive life expectancy
    """
    try:
        granularity = Granularity(granularity)
    except ValueError:
        logger.error(f"Unknown timeline granularity: {granularity!r}")
        return None

    if life_expectancy is None or not math.isfinite(life_expectancy) or life_expectancy <= 0:
        logger.error(f"Cannot build a timeline for life expectancy {life_expectancy!r}")
        return None

    return _BUILDERS[granularity](birth, now, life_expectancy)


def granularity_label(granularity: Granularity) -> str:
    return Granularity(granularity).value.capitalize()


def unit_name(granularity: Granularity, count: int) -> str:
    """'year' for a count of 1, otherwise 'years' (likewise months/weeks)."""
    name = Granularity(granularity).value
    return name[:-1] if count == 1 else name
