"""
lifeclock/milestones.py - Remaining Milestone Counter

Counts recurring calendar events left between today and the expected end of
life: birthdays, seasons, weekends and holidays.

Season Boundaries (Northern hemisphere, fixed dates):
- Spring: Mar 20 - Jun 20
- Summer: Jun 21 - Sep 20
- Fall:   Sep 21 - Dec 20
- Winter: Dec 21 - Mar 19 (wraps the new year)

All counting is at calendar-day granularity. Unknown milestone types,
unknown seasons and malformed holiday definitions are logged and contribute
nothing; they never abort the rest of the batch.

Author: LifeClock Project
License: MIT
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union
import logging

import numpy as np
from pydantic import ValidationError

from .holidays import HolidayDefinition
from .time_calc import Instant, anniversary

logger = logging.getLogger(__name__)

WEEKEND_MASK = '0000011'


class MilestoneType(Enum):
    """Kinds of milestones a user can track."""
    BIRTHDAYS = "birthdays"
    SUMMERS = "summers"
    WINTERS = "winters"
    SPRING = "spring"
    FALL = "fall"
    WEEKENDS = "weekends"
    HOLIDAYS = "holidays"


# (label, icon, description template)
MILESTONE_CATALOGUE: Dict[MilestoneType, Tuple[str, str, str]] = {
    MilestoneType.BIRTHDAYS: ("Birthdays", "🎂", "{count} more birthdays to celebrate"),
    MilestoneType.SUMMERS: ("Summers", "☀️", "{count} more summers to enjoy"),
    MilestoneType.WINTERS: ("Winters", "❄️", "{count} more winters to embrace"),
    MilestoneType.SPRING: ("Springs", "🌸", "{count} more springs to see bloom"),
    MilestoneType.FALL: ("Falls", "🍂", "{count} more falls to watch the leaves turn"),
    MilestoneType.WEEKENDS: ("Weekends", "🏖️", "{count} more weekends to make memories"),
}

# season -> ((start month, start day), (end month, end day))
SEASONS: Dict[str, Tuple[Tuple[int, int], Tuple[int, int]]] = {
    'spring': ((3, 20), (6, 20)),
    'summer': ((6, 21), (9, 20)),
    'fall': ((9, 21), (12, 20)),
    'winter': ((12, 21), (3, 19)),
}

SEASON_FOR_MILESTONE = {
    MilestoneType.SPRING: 'spring',
    MilestoneType.SUMMERS: 'summer',
    MilestoneType.FALL: 'fall',
    MilestoneType.WINTERS: 'winter',
}


@dataclass(frozen=True)
class Milestone:
    """A counted milestone, ready for display."""
    id: str
    type: MilestoneType
    label: str
    icon: str
    count: int
    description: str


def _as_date(value: Instant) -> date:
    return value.date() if isinstance(value, datetime) else value


# =============================================================================
# COUNTERS
# =============================================================================

def in_season(day: Instant, season: str) -> bool:
    """Whether a calendar day falls inside a named season."""
    (start_month, start_day), (end_month, end_day) = SEASONS[season]
    month_day = (_as_date(day).month, _as_date(day).day)
    if (start_month, start_day) <= (end_month, end_day):
        return (start_month, start_day) <= month_day <= (end_month, end_day)
    return month_day >= (start_month, start_day) or month_day <= (end_month, end_day)


def count_seasons(start: Instant, end: Instant, season: str) -> int:
    """
    Number of times a season begins in (start, end], plus one if start is
    already inside that season.

    Args:
        start: First day (usually today)
        end: Last day (usually the expected end of life)
        season: 'spring', 'summer', 'fall' or 'winter'

    Returns:
        Count, 0 for an unknown season or an empty interval
    """
    season = season.lower() if isinstance(season, str) else season
    if season not in SEASONS:
        logger.error(f"Unknown season: {season!r}")
        return 0

    start_day, end_day = _as_date(start), _as_date(end)
    if end_day < start_day:
        return 0

    begin_month, begin_day = SEASONS[season][0]
    count = sum(
        1 for year in range(start_day.year, end_day.year + 1)
        if start_day < date(year, begin_month, begin_day) <= end_day
    )
    if in_season(start_day, season):
        count += 1
    return count


def count_birthdays(birth: Instant, now: Instant, end: Instant) -> int:
    """
    Birthdays still to come between now and end (inclusive).

    A birthday falling today has not passed yet and is counted.
    """
    today, end_day = _as_date(now), _as_date(end)
    first_year = max(today.year, _as_date(birth).year + 1)

    return sum(
        1 for year in range(first_year, end_day.year + 1)
        if today <= anniversary(birth, year).date() <= end_day
    )


def count_weekends(now: Instant, end: Instant) -> int:
    """
    Weekends left: (Saturdays + Sundays in [now, end]) // 2.
    """
    today, end_day = _as_date(now), _as_date(end)
    if end_day < today:
        return 0

    weekend_days = np.busday_count(today, end_day + timedelta(days=1), weekmask=WEEKEND_MASK)
    return int(weekend_days) // 2


def count_holiday(holiday: Union[HolidayDefinition, Dict[str, Any]],
                  now: Instant, end: Instant) -> int:
    """
    Occurrences of a holiday in [now, end].

    Args:
        holiday: HolidayDefinition, or a raw definition dict
        now: First day
        end: Last day

    Returns:
        Count, 0 if the definition is malformed
    """
    if not isinstance(holiday, HolidayDefinition):
        try:
            holiday = HolidayDefinition.model_validate(holiday)
        except ValidationError as exc:
            logger.error(f"Skipping malformed holiday definition {holiday!r}: {exc}")
            return 0

    today, end_day = _as_date(now), _as_date(end)
    count = 0
    for year in range(today.year, end_day.year + 1):
        occurrence = holiday.date_for_year(year)
        if occurrence is not None and today <= occurrence <= end_day:
            count += 1
    return count


# =============================================================================
# BATCH
# =============================================================================

def _count_standard(milestone_type: MilestoneType, birth: Instant,
                    now: Instant, end: Instant) -> int:
    if milestone_type is MilestoneType.BIRTHDAYS:
        return count_birthdays(birth, now, end)
    if milestone_type is MilestoneType.WEEKENDS:
        return count_weekends(now, end)
    return count_seasons(now, end, SEASON_FOR_MILESTONE[milestone_type])


def calculate_all_milestones(types: Iterable[Union[MilestoneType, str]], birth: Instant,
                             now: Instant, end: Instant) -> List[Milestone]:
    """
    Standard (non-holiday) milestones for the selected types, in order.

    Args:
        types: Selected milestone types; 'holidays' is handled by
            calculate_milestones and ignored here
        birth: Date of birth
        now: Today
        end: Expected end of life

    Returns:
        One Milestone per recognized type
    """
    milestones = []
    for raw_type in types:
        try:
            milestone_type = MilestoneType(raw_type)
        except ValueError:
            logger.error(f"Unknown milestone type: {raw_type!r}")
            continue

        if milestone_type is MilestoneType.HOLIDAYS:
            continue

        label, icon, template = MILESTONE_CATALOGUE[milestone_type]
        count = _count_standard(milestone_type, birth, now, end)
        milestones.append(Milestone(
            id=milestone_type.value,
            type=milestone_type,
            label=label,
            icon=icon,
            count=count,
            description=template.format(count=count),
        ))
    return milestones


def calculate_milestones(selected_milestones: Iterable[Union[MilestoneType, str]],
                         selected_holidays: Iterable[str],
                         holidays: Sequence[HolidayDefinition],
                         birth: Instant, now: Instant, end: Instant,
                         custom_holidays: Optional[Sequence[HolidayDefinition]] = None
                         ) -> List[Milestone]:
    """
    Standard milestones followed by one milestone per selected holiday.

    Args:
        selected_milestones: Milestone types to count
        selected_holidays: Holiday ids to count; unknown ids are skipped
        holidays: Available holiday definitions
        birth, now, end: Date of birth, today, expected end of life
        custom_holidays: User-created holidays, selectable by id as well

    Returns:
        List of Milestone
    """
    milestones = calculate_all_milestones(selected_milestones, birth, now, end)

    available = {h.id: h for h in list(holidays) + list(custom_holidays or [])}
    for holiday_id in selected_holidays:
        holiday = available.get(holiday_id)
        if holiday is None:
            logger.warning(f"Selected holiday not found: {holiday_id!r}")
            continue

        count = count_holiday(holiday, now, end)
        milestones.append(Milestone(
            id=f"holiday-{holiday_id}",
            type=MilestoneType.HOLIDAYS,
            label=holiday.name,
            icon=holiday.icon,
            count=count,
            description=f"{count} more {holiday.name} celebrations",
        ))
    return milestones
