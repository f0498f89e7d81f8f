"""
tests/test_income_mapper.py - Income / Percentile Mapping Tests

Author: LifeClock Project
License: MIT
"""

import logging
import math

import pytest
from lifeclock.data_store import LifeTableStore
from lifeclock.income_mapper import IncomePercentileMapper, format_income, round_half_up


@pytest.fixture(scope="module")
def mapper():
    return IncomePercentileMapper(LifeTableStore())


class TestFormatIncome:
    """Compact dollar formatting thresholds."""

    @pytest.mark.parametrize("income, expected", [
        (500, "$500"),
        (999, "$999"),
        (1000, "$1.0k"),
        (9876, "$9.9k"),
        (9999, "$10.0k"),
        (10000, "$10k"),
        (57000, "$57k"),
        (1000000, "$1.0M"),
        (1500000, "$1.5M"),
    ])
    def test_literal_cases(self, income, expected):
        assert format_income(income) == expected

    @pytest.mark.parametrize("income, expected", [
        (1250, "$1.3k"),
        (56500, "$57k"),
        (1250000, "$1.3M"),
    ])
    def test_ties_round_up(self, income, expected):
        """Exact halves round up at every scale, never to even."""
        assert format_income(income) == expected, \
            f"{income} formatted as {format_income(income)}, expected {expected}"

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2


class TestPercentileForIncome:
    """Income -> percentile."""

    def test_clamps_below_and_above(self, mapper):
        assert mapper.percentile_for_income(0, 'male') == 1
        assert mapper.percentile_for_income(2000000, 'female') == 100

    def test_tabulated_income(self, mapper):
        assert mapper.percentile_for_income(61000, 'male') == 50
        assert mapper.percentile_for_income(57950, 'female') == 50

    def test_negative_income_rejected(self, mapper, caplog):
        with caplog.at_level(logging.WARNING):
            assert mapper.percentile_for_income(-1, 'male') is None
        assert "Invalid income" in caplog.text

    @pytest.mark.parametrize("income", [math.nan, math.inf, -math.inf])
    def test_non_finite_income_rejected(self, mapper, income, caplog):
        with caplog.at_level(logging.WARNING):
            assert mapper.percentile_for_income(income, 'male') is None
        assert "Invalid income" in caplog.text

    @pytest.mark.parametrize("gender", ["male", "female"])
    @pytest.mark.parametrize("percentile", [10, 25, 50, 75, 90])
    def test_round_trip_within_one(self, mapper, gender, percentile):
        income = mapper.income_for_percentile(percentile, gender)
        recovered = mapper.percentile_for_income(income, gender)

        assert abs(recovered - percentile) <= 1, \
            f"{gender} p{percentile}: ${income:,.0f} mapped back to p{recovered}"

    def test_interpolates_between_brackets(self, mapper):
        low = mapper.income_for_percentile(49, 'male')
        high = mapper.income_for_percentile(50, 'male')
        assert mapper.percentile_for_income(low + 0.8 * (high - low), 'male') == 50
        assert mapper.percentile_for_income(low + 0.2 * (high - low), 'male') == 49


class TestIncomeForPercentile:
    """Percentile -> income."""

    def test_exact_hit(self, mapper):
        assert mapper.income_for_percentile(50, 'male') == pytest.approx(61000.0)

    def test_fractional_percentile_interpolates(self, mapper):
        low = mapper.income_for_percentile(50, 'male')
        high = mapper.income_for_percentile(51, 'male')
        assert mapper.income_for_percentile(50.5, 'male') == pytest.approx((low + high) / 2)

    def test_other_is_average(self, mapper):
        male = mapper.income_for_percentile(50, 'male')
        female = mapper.income_for_percentile(50, 'female')
        other = mapper.income_for_percentile(50, 'other')

        assert other == pytest.approx((male + female) / 2)
        assert min(male, female) <= other <= max(male, female)

    @pytest.mark.parametrize("percentile", [0, 100.5, -10])
    def test_out_of_range(self, mapper, percentile):
        assert mapper.income_for_percentile(percentile, 'male') is None

    def test_income_range(self, mapper):
        low, high = mapper.income_range(50, 'male')
        assert low == pytest.approx(61000 * 0.95)
        assert high == pytest.approx(61000 * 1.05)
        assert mapper.income_range(50.5, 'male') is None

    def test_unavailable_table(self, tmp_path):
        mapper = IncomePercentileMapper(LifeTableStore(tmp_path))

        assert mapper.percentile_for_income(50000, 'male') is None
        assert mapper.income_for_percentile(50, 'male') is None
        assert mapper.income_range(50, 'male') is None
