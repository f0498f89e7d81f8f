"""
lifeclock/life_expectancy.py - Life Expectancy Resolver

Resolves an expected lifespan (years from birth) from one of two datasets:
- Country x gender (WHO): gender "other" uses the dataset's combined column
- US household income percentile x gender (Health Inequality Project):
  gender "other" averages the male and female entries, since the dataset
  has no combined column

Resolution Priority:
1. USA + income percentile supplied -> income dataset
2. Anything else, or any income-path failure -> country dataset
3. Unknown or missing country -> global average (73.0 years)

Nothing here raises for bad input: invalid percentiles, unknown genders and
unavailable datasets all resolve to None (or the documented fallback) with a
logged warning.

Author: LifeClock Project
License: MIT
"""

from dataclasses import dataclass
from numbers import Real
from typing import Dict, List, Optional, Tuple
import logging

from .data_store import LifeTableStore

logger = logging.getLogger(__name__)

GLOBAL_AVERAGE_LIFE_EXPECTANCY = 73.0

INCOME_COUNTRY = 'USA'
COUNTRY_DATASET = 'WHO'
INCOME_DATASET = 'Health Inequality Project'

GENDERS = ('male', 'female', 'other')
GENDER_CODES = {'male': 'M', 'female': 'F'}


def normalize_gender(gender: Optional[str]) -> Optional[str]:
    """
    Normalize a gender to 'male', 'female' or 'other'.

    Accepts the full words in any case, and the 'M'/'F' codes used by the
    income dataset.

    Returns:
        Normalized gender, or None (with a warning) if unrecognized
    """
    if isinstance(gender, str):
        value = gender.strip().lower()
        if value in GENDERS:
            return value
        if value == 'm':
            return 'male'
        if value == 'f':
            return 'female'

    logger.warning(f"Unrecognized gender: {gender!r}")
    return None


def validate_percentile(percentile) -> Optional[int]:
    """
    Check an income percentile is an integer in [1, 100].

    Integral floats (50.0) are accepted; 50.5, 0, 101 and non-numbers are not.

    Returns:
        The percentile as int, or None (with a warning) if invalid
    """
    if isinstance(percentile, Real) and not isinstance(percentile, bool):
        as_float = float(percentile)
        if as_float.is_integer() and 1 <= as_float <= 100:
            return int(as_float)

    logger.warning(f"[IncomeData] Invalid percentile: {percentile}")
    return None


# =============================================================================
# PROVENANCE
# =============================================================================

@dataclass(frozen=True)
class SourceDetail:
    """What the estimate was looked up by."""
    country: Optional[str] = None
    income_percentile: Optional[int] = None
    gender: Optional[str] = None


@dataclass(frozen=True)
class LifeExpectancySource:
    """
    Provenance of a life expectancy estimate.

    Attributes:
        kind: 'country' or 'income'
        dataset_name: 'WHO' or 'Health Inequality Project'
        description: Human-readable summary for display
        detail: Lookup keys, if any
    """
    kind: str
    dataset_name: str
    description: str
    detail: Optional[SourceDetail] = None


@dataclass(frozen=True)
class LifeExpectancyResult:
    """A resolved estimate together with where it came from."""
    years: float
    source: LifeExpectancySource


def resolve_source(country: Optional[str], income_percentile: Optional[int] = None,
                   gender: Optional[str] = None) -> LifeExpectancySource:
    """
    Decide which dataset an estimate is described as coming from.

    Income data is chosen only for USA with a percentile supplied; every other
    combination is country data. A missing country degrades to "Global".

    Args:
        country: ISO alpha-3 code, or None
        income_percentile: Optional percentile (1-100)
        gender: Optional gender, carried into the detail record

    Returns:
        Fresh LifeExpectancySource
    """
    if country == INCOME_COUNTRY and income_percentile is not None:
        return LifeExpectancySource(
            kind='income',
            dataset_name=INCOME_DATASET,
            description=f"US income data ({income_percentile}th percentile)",
            detail=SourceDetail(country=country, income_percentile=income_percentile,
                                gender=gender),
        )

    return LifeExpectancySource(
        kind='country',
        dataset_name=COUNTRY_DATASET,
        description=f"{country} country data" if country else "Global country data",
        detail=SourceDetail(country=country or None, gender=gender),
    )


# =============================================================================
# RESOLVER
# =============================================================================

class LifeExpectancyResolver:
    """
    Table lookups against a LifeTableStore.

    Attributes:
        store: Shared data store (owned by the composition root)
    """

    def __init__(self, store: LifeTableStore):
        self.store = store

    def for_country(self, country: Optional[str], gender: Optional[str]) -> Optional[float]:
        """
        Life expectancy for a country and gender.

        Args:
            country: ISO 3166-1 alpha-3 code, e.g. 'USA', 'JPN'
            gender: 'male', 'female' or 'other' ('other' uses the combined column)

        Returns:
            Years, or None if the country or gender is unknown
        """
        entry = self.store.countries().get(country) if country else None
        if entry is None:
            return None

        normalized = normalize_gender(gender)
        if normalized is None:
            return None
        if normalized == 'other':
            return entry.both
        return entry.male if normalized == 'male' else entry.female

    def with_fallback(self, country: Optional[str], gender: Optional[str]) -> float:
        """Same as for_country, but never None: unknown -> global average."""
        years = self.for_country(country, gender)
        return years if years is not None else GLOBAL_AVERAGE_LIFE_EXPECTANCY

    def for_income(self, gender: Optional[str], percentile) -> Optional[float]:
        """
        Life expectancy for a US household income percentile.

        Args:
            gender: 'male', 'female' or 'other' ('other' averages male and female)
            percentile: Integer percentile in [1, 100]

        Returns:
            Years, or None for invalid input or an unavailable income table
        """
        pctile = validate_percentile(percentile)
        if pctile is None:
            return None

        normalized = normalize_gender(gender)
        if normalized is None:
            return None

        lookup = self.store.income_lookup()
        if lookup is None:
            return None

        if normalized == 'other':
            male = lookup.get(('M', pctile))
            female = lookup.get(('F', pctile))
            if male is None or female is None:
                logger.error(f"[IncomeData] No data found for {normalized}, {pctile}th percentile")
                return None
            return (male + female) / 2

        result = lookup.get((GENDER_CODES[normalized], pctile))
        if result is None:
            logger.error(f"[IncomeData] No data found for {normalized}, {pctile}th percentile")
        return result

    def resolve(self, country: Optional[str], gender: Optional[str],
                income_percentile: Optional[int] = None) -> LifeExpectancyResult:
        """
        Apply the resolution priority: income first when applicable, country
        data (or the global average) otherwise.

        Returns:
            Estimate plus the source that actually produced it
        """
        if country == INCOME_COUNTRY and income_percentile is not None:
            years = self.for_income(gender, income_percentile)
            if years is not None:
                return LifeExpectancyResult(
                    years=years,
                    source=resolve_source(country, income_percentile, gender),
                )
            logger.info("Income-based estimate unavailable, falling back to country data")

        return LifeExpectancyResult(
            years=self.with_fallback(country, gender),
            source=resolve_source(country, None, gender),
        )

    # =========================================================================
    # COUNTRY TABLE HELPERS
    # =========================================================================

    def country_list(self) -> List[Tuple[str, str]]:
        """All (code, name) pairs sorted by country name."""
        countries = self.store.countries()
        return sorted(((code, e.country_name) for code, e in countries.items()),
                      key=lambda pair: pair[1])

    def country_name(self, code: str) -> Optional[str]:
        entry = self.store.countries().get(code)
        return entry.country_name if entry else None

    def is_valid_country_code(self, code: str) -> bool:
        return code in self.store.countries()

    def data_statistics(self) -> Dict[str, float]:
        """
        Summary of the combined ('both') column across all countries.

        Returns:
            Dict with total_countries, highest, lowest, average (zeros if empty)
        """
        values = [e.both for e in self.store.countries().values()]
        if not values:
            return {'total_countries': 0, 'highest': 0.0, 'lowest': 0.0, 'average': 0.0}

        return {
            'total_countries': len(values),
            'highest': max(values),
            'lowest': min(values),
            'average': sum(values) / len(values),
        }


def resolve_life_expectancy(store: LifeTableStore, country: Optional[str],
                            gender: Optional[str],
                            income_percentile: Optional[int] = None) -> LifeExpectancyResult:
    """Convenience wrapper around LifeExpectancyResolver.resolve."""
    return LifeExpectancyResolver(store).resolve(country, gender, income_percentile)
