"""
tests/test_time_calc.py - Time Calculator Tests

Validates the nested calendar breakdown, its reconstruction invariant,
and the over-expectancy edge cases.

Author: LifeClock Project
License: MIT
"""

from datetime import date, datetime, timedelta

import pytest
from lifeclock.time_calc import (
    TimeBreakdown,
    add_months,
    add_years,
    anniversary,
    expected_end_date,
    format_clock,
    format_time_lived,
    is_over_life_expectancy,
    time_lived_since,
    time_remaining_until,
)


class TestCalendarArithmetic:
    """Month/year addition with day clamping."""

    def test_month_end_clamps(self):
        assert add_months(datetime(2021, 1, 31), 1) == datetime(2021, 2, 28)
        assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)
        assert add_months(datetime(2024, 11, 15), 3) == datetime(2025, 2, 15)

    def test_leap_day_plus_year(self):
        assert add_years(datetime(2024, 2, 29), 1) == datetime(2025, 2, 28)

    def test_leap_day_anniversary(self):
        assert anniversary(date(2000, 2, 29), 2001) == datetime(2001, 2, 28)
        assert anniversary(date(2000, 2, 29), 2004) == datetime(2004, 2, 29)

    def test_expected_end_whole_years(self):
        assert expected_end_date(date(2000, 1, 1), 80) == datetime(2080, 1, 1)

    def test_expected_end_fractional_years(self):
        """Half of leap year 2080 is 183 days."""
        assert expected_end_date(date(2000, 1, 1), 80.5) == datetime(2080, 7, 2)


class TestTimeLived:
    """Elapsed breakdown since birth."""

    def test_breakdown_components(self):
        result = time_lived_since(datetime(2000, 1, 1), datetime(2001, 3, 15, 10, 20, 30))

        assert (result.years, result.months, result.days) == (1, 2, 14)
        assert (result.hours, result.minutes, result.seconds) == (10, 20, 30)

    def test_birth_after_now_is_zero(self):
        result = time_lived_since(datetime(2030, 1, 1), datetime(2025, 1, 1))

        assert result == TimeBreakdown.zero()
        assert result.total_seconds == 0

    @pytest.mark.parametrize("birth, now", [
        (datetime(1990, 6, 15), datetime(2025, 3, 2, 13, 45, 7)),
        (datetime(2000, 1, 31), datetime(2000, 3, 1)),
        (datetime(1988, 2, 29, 6, 30), datetime(2023, 2, 28, 23, 59, 59)),
        (datetime(1975, 12, 31, 23, 0), datetime(2024, 1, 1, 0, 30)),
    ])
    def test_components_reconstruct_total(self, birth, now):
        """Adding the components back onto birth lands on now."""
        result = time_lived_since(birth, now)

        rebuilt = add_months(add_years(birth, result.years), result.months)
        rebuilt += timedelta(days=result.days, hours=result.hours,
                             minutes=result.minutes, seconds=result.seconds)

        assert abs((rebuilt - now).total_seconds()) <= 1, \
            f"Reconstructed {rebuilt} differs from {now}"
        assert result.total_seconds == int((now - birth).total_seconds())

    def test_plain_dates_are_midnight(self):
        result = time_lived_since(date(2020, 1, 1), date(2020, 1, 2))
        assert result.days == 1
        assert result.total_seconds == 86400


class TestTimeRemaining:
    """Remaining breakdown and the over-expectancy flag."""

    def test_remaining_until_expected_end(self):
        result = time_remaining_until(date(2000, 1, 1), 80, datetime(2079, 12, 31, 12))

        assert (result.years, result.months, result.days, result.hours) == (0, 0, 0, 12)

    def test_past_expected_end_is_zero(self):
        result = time_remaining_until(date(1900, 1, 1), 73.0, datetime(2025, 1, 1))
        assert result == TimeBreakdown.zero()

    def test_over_expectancy_is_strict(self):
        birth = date(2000, 1, 1)
        assert not is_over_life_expectancy(birth, 80, datetime(2080, 1, 1))
        assert is_over_life_expectancy(birth, 80, datetime(2080, 1, 1, 0, 0, 1))

    def test_over_expectancy_is_monotonic(self):
        birth = date(1950, 6, 15)
        flags = [
            is_over_life_expectancy(birth, 73.0, datetime(2020, 1, 1) + timedelta(days=30 * i))
            for i in range(60)
        ]

        first_true = flags.index(True)
        assert all(flags[first_true:]), "Once over, must stay over"
        assert not any(flags[:first_true])


class TestFormatting:
    """Display helpers."""

    def test_format_time_lived(self):
        assert format_time_lived(TimeBreakdown(years=25, months=3, days=15)) == \
            "25 years, 3 months, 15 days"
        assert format_time_lived(TimeBreakdown(years=1, days=1)) == "1 year, 1 day"
        assert format_time_lived(TimeBreakdown()) == ""

    def test_format_clock(self):
        assert format_clock(5, 3, 9) == "05:03:09"
