"""
lifeclock/data_store.py - Life Table Data Store

The single owner of the bundled static datasets:
- Country x gender life expectancy (WHO, JSON)
- Income percentile x gender life expectancy (Health Inequality Project,
  CSV, exactly 200 rows: 100 percentiles x 2 genders)
- Holiday definitions (JSON, fixed + calculated)

Each dataset is parsed lazily on first access and memoized for the lifetime
of the store. First population is guarded by a lock so concurrent first
access parses once. A failed load is sticky: later calls short-circuit to
"unavailable" instead of re-parsing bad data.

The store is constructed once by the composition root (see clock.py) and
passed to the resolver and mapper; there is no module-level cache.

Author: LifeClock Project
License: MIT
"""

import json
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
import logging

import pandas as pd

from .csv_table import parse_table
from .holidays import HolidayDefinition, load_holiday_definitions

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).parent / 'data'

COUNTRY_FILE = 'life_expectancy.json'
INCOME_FILE = 'health_ineq_online_table_1.csv'
HOLIDAY_FILE = 'holidays.json'

INCOME_REQUIRED_COLUMNS = ('gnd', 'pctile', 'hh_inc', 'le_agg')

MAX_PLAUSIBLE_YEARS = 130.0


@dataclass(frozen=True)
class CountryLifeExpectancyEntry:
    """One country's life expectancy at birth, in years."""
    code: str
    country_name: str
    male: float
    female: float
    both: float

    def is_plausible(self) -> bool:
        return all(0 < v < MAX_PLAUSIBLE_YEARS for v in (self.male, self.female, self.both))


class _Unavailable:
    """Sticky marker for a dataset whose load failed."""

    def __repr__(self) -> str:
        return '<unavailable>'


UNAVAILABLE = _Unavailable()


class LifeTableStore:
    """
    Lazily loaded, memoized access to the bundled datasets.

    Attributes:
        data_dir: Directory holding the three data files
        expected_income_rows: Row count the income table must have
    """

    EXPECTED_INCOME_ROWS = 200

    def __init__(self, data_dir: Optional[Union[str, Path]] = None,
                 expected_income_rows: int = EXPECTED_INCOME_ROWS):
        self.data_dir = Path(data_dir) if data_dir is not None else DEFAULT_DATA_DIR
        self.expected_income_rows = expected_income_rows

        self._lock = threading.Lock()
        self._countries = None
        self._income = None
        self._holidays = None

    # =========================================================================
    # COUNTRY TABLE
    # =========================================================================

    def countries(self) -> Dict[str, CountryLifeExpectancyEntry]:
        """
        Country table keyed by ISO 3166-1 alpha-3 code.

        Returns:
            Mapping of code to entry; empty if the table could not be loaded
        """
        if self._countries is None:
            with self._lock:
                if self._countries is None:
                    self._countries = self._load_countries()

        if self._countries is UNAVAILABLE:
            return {}
        return self._countries

    def _load_countries(self):
        path = self.data_dir / COUNTRY_FILE
        try:
            raw = json.loads(path.read_text(encoding='utf-8'))
            if not isinstance(raw, dict):
                raise ValueError(f"Expected a JSON object, got {type(raw).__name__}")

            table = {}
            for code, fields in raw.items():
                entry = CountryLifeExpectancyEntry(
                    code=code,
                    country_name=str(fields['countryName']),
                    male=float(fields['male']),
                    female=float(fields['female']),
                    both=float(fields['both']),
                )
                if not entry.is_plausible():
                    logger.warning(f"[CountryData] Skipping implausible entry for {code}: {entry}")
                    continue
                table[code] = entry
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.error(f"[CountryData] Load failed for {path}: {exc}")
            return UNAVAILABLE

        logger.info(f"[CountryData] Loaded {len(table)} countries")
        return table

    # =========================================================================
    # INCOME TABLE
    # =========================================================================

    def income_table(self) -> Optional[pd.DataFrame]:
        """
        Income table as a DataFrame (one row per gender/percentile).

        Returns:
            DataFrame with at least gnd, pctile, hh_inc, le_agg; None if the
            table is unavailable
        """
        if self._income is None:
            with self._lock:
                if self._income is None:
                    self._income = self._load_income()

        if self._income is UNAVAILABLE:
            return None
        return self._income

    def _load_income(self):
        path = self.data_dir / INCOME_FILE
        try:
            records = parse_table(path.read_text(encoding='utf-8'))

            if len(records) != self.expected_income_rows:
                raise ValueError(
                    f"Expected {self.expected_income_rows} rows, got {len(records)}"
                )

            df = pd.DataFrame.from_records(records)
            missing = [c for c in INCOME_REQUIRED_COLUMNS if c not in df.columns]
            if missing:
                raise ValueError(f"Missing required columns: {missing}")

            if df[list(INCOME_REQUIRED_COLUMNS)].isna().any().any():
                raise ValueError("Required columns contain empty fields")

            df['pctile'] = df['pctile'].astype(int)
            df['hh_inc'] = df['hh_inc'].astype(float)
            df['le_agg'] = df['le_agg'].astype(float)
        except (OSError, ValueError, TypeError) as exc:
            logger.error(f"[IncomeData] CSV load failed for {path}: {exc}")
            return UNAVAILABLE

        logger.info(f"[IncomeData] Loaded {len(df)} income rows")
        return df

    def income_lookup(self) -> Optional[Dict[Tuple[str, int], float]]:
        """
        Life expectancy keyed by (gender code, percentile), e.g. ('M', 50).

        Returns:
            Lookup dict, or None if the income table is unavailable
        """
        df = self.income_table()
        if df is None:
            return None
        return {
            (str(gnd), int(pctile)): float(le)
            for gnd, pctile, le in zip(df['gnd'], df['pctile'], df['le_agg'])
        }

    def income_by_percentile(self) -> Optional[pd.DataFrame]:
        """
        Household income per percentile for both genders.

        Percentiles missing either gender are dropped.

        Returns:
            DataFrame indexed by percentile (ascending) with columns
            'male' and 'female'; None if the income table is unavailable
        """
        df = self.income_table()
        if df is None:
            return None

        pivot = df.pivot_table(index='pctile', columns='gnd', values='hh_inc', aggfunc='first')
        pivot = pivot.rename(columns={'M': 'male', 'F': 'female'})
        for column in ('male', 'female'):
            if column not in pivot.columns:
                pivot[column] = float('nan')

        return pivot[['male', 'female']].dropna().sort_index()

    # =========================================================================
    # HOLIDAYS
    # =========================================================================

    def holidays(self) -> List[HolidayDefinition]:
        """
        Holiday definitions (fixed first, then calculated).

        Returns:
            Valid definitions; malformed entries are skipped, and an
            unreadable file yields an empty list
        """
        if self._holidays is None:
            with self._lock:
                if self._holidays is None:
                    self._holidays = self._load_holidays()

        if self._holidays is UNAVAILABLE:
            return []
        return self._holidays

    def _load_holidays(self):
        path = self.data_dir / HOLIDAY_FILE
        try:
            raw = json.loads(path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as exc:
            logger.error(f"[Holidays] Load failed for {path}: {exc}")
            return UNAVAILABLE

        return load_holiday_definitions(raw)
