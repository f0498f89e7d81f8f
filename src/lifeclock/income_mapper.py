"""
lifeclock/income_mapper.py - Income <-> Percentile Mapping

Bidirectional, linearly interpolated mapping between a household income in
dollars and a 1-100 income percentile, per gender, built from the
income table's hh_inc column.

Mathematical Framework:
- Percentile from income: clamp to [1, 100] outside the tabulated range,
  otherwise interpolate between the two bracketing percentiles and round
  half up to the nearest integer
- Income from percentile: exact hits return the tabulated value, otherwise
  linear interpolation between bracketing percentiles
- Gender "other" uses the mean of the male and female incomes at each
  percentile

Author: LifeClock Project
License: MIT
"""

import math
from typing import Optional, Tuple
import logging

import numpy as np

from .data_store import LifeTableStore
from .life_expectancy import normalize_gender

logger = logging.getLogger(__name__)

INCOME_RANGE_BAND = 0.05


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounding up (2.5 -> 3, not 2)."""
    return int(math.floor(value + 0.5))


def format_income(income: float) -> str:
    """
    Format a dollar amount compactly. Ties round up at every scale.

    Examples:
        500 -> "$500", 9876 -> "$9.9k", 1250 -> "$1.3k", 57000 -> "$57k",
        1500000 -> "$1.5M"
    """
    if income < 1000:
        return f"${round_half_up(income)}"
    if income < 10000:
        return f"${round_half_up(income / 100) / 10:.1f}k"
    if income < 1000000:
        return f"${round_half_up(income / 1000)}k"
    return f"${round_half_up(income / 100000) / 10:.1f}M"


class IncomePercentileMapper:
    """
    Interpolates between income and percentile for one store's income table.

    The percentile-sorted income arrays are built once on first use. If the
    income table is unavailable every method returns None.
    """

    def __init__(self, store: LifeTableStore):
        self.store = store
        self._scales = None

    def _income_scales(self):
        """(percentiles, {gender: incomes}) as ascending numpy arrays, or None."""
        if self._scales is None:
            frame = self.store.income_by_percentile()
            if frame is None or frame.empty:
                logger.error("[IncomePercentileMapper] Income data unavailable")
                return None

            male = frame['male'].to_numpy(dtype=np.float64)
            female = frame['female'].to_numpy(dtype=np.float64)
            self._scales = (
                frame.index.to_numpy(dtype=np.float64),
                {'male': male, 'female': female, 'other': (male + female) / 2},
            )
        return self._scales

    def _scale_for(self, gender: Optional[str]) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        normalized = normalize_gender(gender)
        if normalized is None:
            return None
        scales = self._income_scales()
        if scales is None:
            return None
        percentiles, incomes = scales
        return percentiles, incomes[normalized]

    def percentile_for_income(self, income: float, gender: Optional[str]) -> Optional[int]:
        """
        Convert an annual household income to a percentile.

        Args:
            income: Dollars; negative or non-finite income is rejected
            gender: 'male', 'female' or 'other'

        Returns:
            Integer percentile in [1, 100], or None if invalid/unavailable
        """
        if not math.isfinite(income) or income < 0:
            logger.warning(f"[IncomePercentileMapper] Invalid income rejected: {income}")
            return None

        scale = self._scale_for(gender)
        if scale is None:
            return None
        percentiles, incomes = scale

        if income <= incomes[0]:
            return 1
        if income >= incomes[-1]:
            return 100

        return round_half_up(float(np.interp(income, incomes, percentiles)))

    def income_for_percentile(self, percentile: float, gender: Optional[str]) -> Optional[float]:
        """
        Convert a percentile (fractional allowed) to a household income.

        Args:
            percentile: In [1, 100]
            gender: 'male', 'female' or 'other'

        Returns:
            Dollars, or None if out of range/unavailable
        """
        if not 1 <= percentile <= 100:
            logger.warning(f"[IncomePercentileMapper] Percentile out of range: {percentile}")
            return None

        scale = self._scale_for(gender)
        if scale is None:
            return None
        percentiles, incomes = scale

        if percentile < percentiles[0] or percentile > percentiles[-1]:
            return None

        return float(np.interp(percentile, percentiles, incomes))

    def income_range(self, percentile: int, gender: Optional[str]) -> Optional[Tuple[float, float]]:
        """
        Cosmetic +/-5% band around a tabulated percentile's income.

        Returns:
            (low, high), or None if the percentile is not tabulated
        """
        scale = self._scale_for(gender)
        if scale is None:
            return None
        percentiles, incomes = scale

        hits = np.flatnonzero(percentiles == percentile)
        if hits.size == 0:
            return None

        income = float(incomes[hits[0]])
        return (income * (1 - INCOME_RANGE_BAND), income * (1 + INCOME_RANGE_BAND))
