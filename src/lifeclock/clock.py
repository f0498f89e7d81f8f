"""
lifeclock/clock.py - Life Clock Composition Root

Wires the data store, resolver, mapper and calculators together for one
user profile. The clock is driven by explicit ticks: the host owns the
timer (every second for counters, every minute for day-sensitive values
such as milestones) and passes the current instant in. Nothing here reads
the wall clock or schedules work.

Usage:
    clock = create_life_clock({
        'birthday': '1990-06-15',
        'gender': 'female',
        'country': 'USA',
        'income': 85000,
    })
    snapshot = clock.tick(datetime.now(), Granularity.WEEKS)

Author: LifeClock Project
License: MIT
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union
import logging

from .config import MilestonePreferences, UserProfile
from .data_store import LifeTableStore
from .income_mapper import IncomePercentileMapper
from .life_expectancy import INCOME_COUNTRY, LifeExpectancyResolver, LifeExpectancyResult
from .milestones import Milestone, calculate_milestones
from .time_calc import (
    Instant,
    TimeBreakdown,
    expected_end_date,
    is_over_life_expectancy,
    time_lived_since,
    time_remaining_until,
)
from .timeline import Granularity, TimelineData, build_timeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClockSnapshot:
    """Everything the display needs for one tick."""
    now: datetime
    life_expectancy: LifeExpectancyResult
    expected_end: datetime
    time_lived: TimeBreakdown
    time_remaining: TimeBreakdown
    is_over_life_expectancy: bool
    timeline: Optional[TimelineData]
    milestones: List[Milestone] = field(default_factory=list)


class LifeClock:
    """
    Pure, tick-driven life clock for one profile.

    Life expectancy is resolved once at construction; every other value is
    recomputed from the instant passed to each call.

    Attributes:
        profile: The user's profile
        preferences: Milestone preferences
        store: Shared data store
        life_expectancy: Resolved estimate and its source
        expected_end: Birth + life expectancy
    """

    def __init__(self, profile: UserProfile, store: Optional[LifeTableStore] = None,
                 preferences: Optional[MilestonePreferences] = None):
        self.profile = profile
        self.preferences = preferences or MilestonePreferences()
        self.store = store or LifeTableStore()

        self.resolver = LifeExpectancyResolver(self.store)
        self.life_expectancy = self.resolver.resolve(
            profile.country, profile.gender, profile.income_percentile
        )
        self.expected_end = expected_end_date(profile.birthday, self.life_expectancy.years)

        logger.info(f"LifeClock initialized: {self.life_expectancy.years:.2f} years "
                    f"({self.life_expectancy.source.description})")

    @property
    def birthday(self) -> datetime:
        return self.profile.birthday

    def time_lived(self, now: Instant) -> TimeBreakdown:
        return time_lived_since(self.birthday, now)

    def time_remaining(self, now: Instant) -> TimeBreakdown:
        return time_remaining_until(self.birthday, self.life_expectancy.years, now)

    def is_over(self, now: Instant) -> bool:
        return is_over_life_expectancy(self.birthday, self.life_expectancy.years, now)

    def timeline(self, now: Instant,
                 granularity: Union[Granularity, str] = Granularity.YEARS) -> Optional[TimelineData]:
        return build_timeline(self.birthday, now, self.life_expectancy.years, granularity)

    def milestones(self, now: Instant) -> List[Milestone]:
        """Milestones left from now until the expected end of life."""
        return calculate_milestones(
            self.preferences.selected_milestones,
            self.preferences.selected_holidays,
            self.store.holidays(),
            self.birthday,
            now,
            self.expected_end,
            custom_holidays=self.preferences.custom_holidays,
        )

    def tick(self, now: Instant,
             granularity: Union[Granularity, str] = Granularity.YEARS) -> ClockSnapshot:
        """
        Recompute every display value for one instant.

        Args:
            now: Current instant, supplied by the host's timer
            granularity: Timeline cell size

        Returns:
            ClockSnapshot
        """
        if not isinstance(now, datetime):
            now = datetime.combine(now, datetime.min.time())

        return ClockSnapshot(
            now=now,
            life_expectancy=self.life_expectancy,
            expected_end=self.expected_end,
            time_lived=self.time_lived(now),
            time_remaining=self.time_remaining(now),
            is_over_life_expectancy=self.is_over(now),
            timeline=self.timeline(now, granularity),
            milestones=self.milestones(now),
        )


def _parse_birthday(value: Union[str, date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    for fmt in ('%Y-%m-%d', '%Y-%m-%dT%H:%M:%S', '%m/%d/%Y'):
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f"Unrecognized birthday format: {value!r}")


def create_life_clock(config: Dict[str, Any]) -> LifeClock:
    """
    Factory building a LifeClock from a plain config dict.

    Keys:
        birthday: 'YYYY-MM-DD' (or date/datetime), required
        gender: 'male', 'female' or 'other', required
        country: ISO alpha-3 code, required
        income_percentile: Optional 1-100 (USA only)
        income: Optional household income in dollars, mapped to a
            percentile when income_percentile is absent (USA only)
        data_dir: Optional directory with the data files
        milestones: Optional list of milestone types
        holidays: Optional list of holiday ids

    Raises:
        ValueError / pydantic.ValidationError: for a missing or invalid profile
    """
    store = LifeTableStore(config.get('data_dir'))

    country = str(config.get('country', '')).strip().upper()
    gender = config.get('gender')
    percentile = config.get('income_percentile')

    income = config.get('income')
    if percentile is None and income is not None and country == INCOME_COUNTRY:
        percentile = IncomePercentileMapper(store).percentile_for_income(float(income), gender)
        logger.info(f"Income ${float(income):,.0f} mapped to percentile {percentile}")

    profile = UserProfile(
        birthday=_parse_birthday(config['birthday']),
        gender=gender,
        country=country,
        income_percentile=percentile,
    )

    selections = {}
    if config.get('milestones') is not None:
        selections['selected_milestones'] = list(config['milestones'])
    if config.get('holidays') is not None:
        selections['selected_holidays'] = list(config['holidays'])

    return LifeClock(profile, store=store, preferences=MilestonePreferences(**selections))
