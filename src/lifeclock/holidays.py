"""
lifeclock/holidays.py - Holiday Definitions and Calculated Holidays

Holidays come from static JSON as two arrays, "fixed" (MM/DD every year) and
"calculated" (date derived per year by a named algorithm). Calculated
holidays resolve through a closed enum of algorithms rather than arbitrary
function names, so an unknown name fails validation at load time and the
entry is skipped instead of failing at count time.

Algorithms:
- Easter Sunday: Meeus/Jones/Butcher anonymous Gregorian algorithm
- US Thanksgiving: fourth Thursday of November

Author: LifeClock Project
License: MIT
"""

import re
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)

ANNUAL_DATE_PATTERN = re.compile(r'^(\d{2})/(\d{2})$')
ONE_TIME_DATE_PATTERN = re.compile(r'^(\d{2})/(\d{2})/(\d{4})$')


# =============================================================================
# CALCULATED HOLIDAY ALGORITHMS
# =============================================================================

def calculate_easter(year: int) -> date:
    """
    Easter Sunday for a Gregorian year (Meeus/Jones/Butcher).

    Args:
        year: Calendar year

    Returns:
        Date of Easter Sunday
    """
    a = year % 19
    b = year // 100
    c = year % 100
    d = b // 4
    e = b % 4
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i = c // 4
    k = c % 4
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month = (h + l - 7 * m + 114) // 31
    day = ((h + l - 7 * m + 114) % 31) + 1
    return date(year, month, day)


def calculate_thanksgiving(year: int) -> date:
    """US Thanksgiving: the fourth Thursday of November."""
    november_first = date(year, 11, 1)
    days_until_thursday = (3 - november_first.weekday()) % 7
    return date(year, 11, 1 + days_until_thursday + 21)


class HolidayCalculation(Enum):
    """Registered holiday algorithms, keyed by their name in holidays.json."""
    EASTER = "calculateEaster"
    THANKSGIVING = "calculateThanksgiving"


HOLIDAY_CALCULATORS: Dict[HolidayCalculation, Callable[[int], date]] = {
    HolidayCalculation.EASTER: calculate_easter,
    HolidayCalculation.THANKSGIVING: calculate_thanksgiving,
}


class HolidayKind(Enum):
    """How a holiday's date is determined."""
    FIXED = "fixed"
    CALCULATED = "calculated"
    CUSTOM = "custom"


# =============================================================================
# DEFINITIONS
# =============================================================================

class HolidayDefinition(BaseModel):
    """
    A holiday as read from holidays.json (or created by the user).

    Fixed and custom holidays carry a date; custom holidays may use
    MM/DD/YYYY for a one-time date. Calculated holidays carry the name of a
    registered algorithm.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    icon: str = ""
    kind: HolidayKind = Field(..., alias="type")
    fixed_date: Optional[str] = Field(default=None, alias="date")
    calculation: Optional[HolidayCalculation] = Field(default=None, alias="calculateFn")

    @model_validator(mode='after')
    def _check_kind_fields(self) -> 'HolidayDefinition':
        if self.kind is HolidayKind.CALCULATED:
            if self.calculation is None:
                raise ValueError(f"calculated holiday '{self.id}' has no calculateFn")
        elif self.fixed_date is None:
            raise ValueError(f"{self.kind.value} holiday '{self.id}' has no date")
        elif self.kind is HolidayKind.FIXED and not ANNUAL_DATE_PATTERN.match(self.fixed_date):
            raise ValueError(f"fixed holiday '{self.id}' date must be MM/DD, got '{self.fixed_date}'")
        elif self.kind is HolidayKind.CUSTOM and not (
                ANNUAL_DATE_PATTERN.match(self.fixed_date) or ONE_TIME_DATE_PATTERN.match(self.fixed_date)):
            raise ValueError(
                f"custom holiday '{self.id}' date must be MM/DD or MM/DD/YYYY, got '{self.fixed_date}'"
            )
        return self

    @property
    def is_one_time(self) -> bool:
        return self.fixed_date is not None and ONE_TIME_DATE_PATTERN.match(self.fixed_date) is not None

    def date_for_year(self, year: int) -> Optional[date]:
        """
        Resolve this holiday's date in a given year.

        Args:
            year: Calendar year

        Returns:
            The date, or None if the holiday does not occur that year
            (e.g. 02/29 in a non-leap year, or a one-time date in another year)
        """
        if self.kind is HolidayKind.CALCULATED:
            return HOLIDAY_CALCULATORS[self.calculation](year)

        one_time = ONE_TIME_DATE_PATTERN.match(self.fixed_date)
        if one_time:
            month, day, only_year = (int(part) for part in one_time.groups())
            if only_year != year:
                return None
        else:
            month, day = (int(part) for part in ANNUAL_DATE_PATTERN.match(self.fixed_date).groups())

        try:
            return date(year, month, day)
        except ValueError:
            return None


def load_holiday_definitions(raw: Any) -> List[HolidayDefinition]:
    """
    Build definitions from the holidays.json structure.

    Args:
        raw: Parsed JSON, expected {"fixed": [...], "calculated": [...]}

    Returns:
        Valid definitions in file order (fixed, then calculated). Malformed
        entries, including unknown calculateFn names, are logged and skipped.
    """
    if not isinstance(raw, dict):
        logger.error(f"[Holidays] Expected a JSON object, got {type(raw).__name__}")
        return []

    definitions: List[HolidayDefinition] = []
    for group in ('fixed', 'calculated'):
        entries = raw.get(group, [])
        if not isinstance(entries, list):
            logger.error(f"[Holidays] '{group}' must be a list, skipping it")
            continue

        for entry in entries:
            try:
                definitions.append(HolidayDefinition.model_validate(entry))
            except ValidationError as exc:
                logger.error(f"[Holidays] Skipping malformed {group} holiday {entry!r}: {exc}")

    logger.info(f"[Holidays] Loaded {len(definitions)} holiday definitions")
    return definitions
