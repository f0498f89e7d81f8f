"""
LifeClock Engine

Computation core of a "life clock": estimates a person's expected lifespan
from country or US income-percentile data, then derives time lived, time
remaining, a year/month/week life grid, and counts of remaining milestones.

Data Sources:
- WHO life expectancy at birth by country and gender
- Health Inequality Project life expectancy by US household income percentile

Author: LifeClock Project
License: MIT
"""

__version__ = "1.0.0"
__author__ = "LifeClock Project"

from .clock import (
    LifeClock,
    ClockSnapshot,
    create_life_clock
)

from .config import (
    UserProfile,
    MilestonePreferences,
    StoredState
)

from .data_store import (
    LifeTableStore,
    CountryLifeExpectancyEntry
)

from .life_expectancy import (
    LifeExpectancyResolver,
    LifeExpectancyResult,
    LifeExpectancySource,
    resolve_life_expectancy,
    resolve_source,
    GLOBAL_AVERAGE_LIFE_EXPECTANCY
)

from .income_mapper import (
    IncomePercentileMapper,
    format_income
)

from .time_calc import (
    TimeBreakdown,
    time_lived_since,
    time_remaining_until,
    is_over_life_expectancy,
    expected_end_date,
    format_time_lived,
    format_clock
)

from .timeline import (
    Granularity,
    TimelineData,
    TimelineUnit,
    GridLayout,
    build_timeline
)

from .holidays import (
    HolidayDefinition,
    calculate_easter,
    calculate_thanksgiving
)

from .milestones import (
    Milestone,
    MilestoneType,
    calculate_milestones,
    calculate_all_milestones
)

__all__ = [
    # Clock
    "LifeClock",
    "ClockSnapshot",
    "create_life_clock",

    # Persisted state
    "UserProfile",
    "MilestonePreferences",
    "StoredState",

    # Data
    "LifeTableStore",
    "CountryLifeExpectancyEntry",

    # Life expectancy
    "LifeExpectancyResolver",
    "LifeExpectancyResult",
    "LifeExpectancySource",
    "resolve_life_expectancy",
    "resolve_source",
    "GLOBAL_AVERAGE_LIFE_EXPECTANCY",

    # Income
    "IncomePercentileMapper",
    "format_income",

    # Time
    "TimeBreakdown",
    "time_lived_since",
    "time_remaining_until",
    "is_over_life_expectancy",
    "expected_end_date",
    "format_time_lived",
    "format_clock",

    # Timeline
    "Granularity",
    "TimelineData",
    "TimelineUnit",
    "GridLayout",
    "build_timeline",

    # Milestones
    "HolidayDefinition",
    "calculate_easter",
    "calculate_thanksgiving",
    "Milestone",
    "MilestoneType",
    "calculate_milestones",
    "calculate_all_milestones",
]
