"""
tests/test_life_expectancy.py - Life Expectancy Resolver Tests

Validates:
1. Income-table monotonicity and the "other" gender average
2. Invalid percentiles resolve to None with a warning
3. Country lookups, fallback to the global average
4. Provenance descriptions
5. Sticky load failure of a malformed income table

Author: LifeClock Project
License: MIT
"""

import json
import logging
import shutil
import threading

import pytest
from lifeclock.data_store import DEFAULT_DATA_DIR, LifeTableStore
from lifeclock.life_expectancy import (
    GLOBAL_AVERAGE_LIFE_EXPECTANCY,
    LifeExpectancyResolver,
    normalize_gender,
    resolve_life_expectancy,
    resolve_source,
    validate_percentile,
)


@pytest.fixture(scope="module")
def resolver():
    return LifeExpectancyResolver(LifeTableStore())


class TestIncomeLifeExpectancy:
    """Lookups against the income percentile table."""

    @pytest.mark.parametrize("gender", ["male", "female"])
    def test_increases_with_percentile(self, resolver, gender):
        values = [resolver.for_income(gender, p) for p in range(1, 101)]

        assert all(v is not None for v in values)
        for p in range(1, 100):
            assert values[p] >= values[p - 1], \
                f"{gender}: percentile {p + 1} ({values[p]}) below percentile {p} ({values[p - 1]})"

    def test_other_is_exact_mean(self, resolver):
        for p in range(1, 101):
            male = resolver.for_income('male', p)
            female = resolver.for_income('female', p)
            assert resolver.for_income('other', p) == (male + female) / 2

    def test_known_values(self, resolver):
        assert resolver.for_income('male', 50) == pytest.approx(81.59)
        assert resolver.for_income('female', 100) == pytest.approx(88.90)
        assert resolver.for_income('M', 1) == pytest.approx(72.70)

    @pytest.mark.parametrize("percentile", [0, 101, 50.5, -5])
    def test_invalid_percentile_is_none(self, resolver, percentile, caplog):
        with caplog.at_level(logging.WARNING):
            assert resolver.for_income('male', percentile) is None
        assert "Invalid percentile" in caplog.text

    def test_integral_float_accepted(self, resolver):
        assert resolver.for_income('female', 50.0) == pytest.approx(84.98)

    def test_bool_and_text_rejected(self):
        assert validate_percentile(True) is None
        assert validate_percentile("50") is None

    def test_unknown_gender_is_none(self, resolver, caplog):
        with caplog.at_level(logging.WARNING):
            assert resolver.for_income('robot', 50) is None
        assert "Unrecognized gender" in caplog.text


class TestCountryLifeExpectancy:
    """Lookups against the country table."""

    def test_gender_columns(self, resolver):
        assert resolver.for_country('JPN', 'male') == pytest.approx(81.5)
        assert resolver.for_country('JPN', 'female') == pytest.approx(86.9)

    def test_other_uses_combined_column(self, resolver):
        """'other' is the dataset's combined figure, not a live average."""
        assert resolver.for_country('USA', 'other') == pytest.approx(78.5)

    def test_unknown_country(self, resolver):
        assert resolver.for_country('XXX', 'male') is None
        assert resolver.for_country(None, 'male') is None
        assert resolver.with_fallback('XXX', 'male') == GLOBAL_AVERAGE_LIFE_EXPECTANCY
        assert resolver.with_fallback('XXX', 'male') == 73.0

    def test_country_helpers(self, resolver):
        countries = resolver.country_list()
        names = [name for _, name in countries]

        assert names == sorted(names), "Country list should be sorted by name"
        assert ('JPN', 'Japan') in countries
        assert resolver.country_name('USA') == 'United States'
        assert resolver.country_name('XXX') is None
        assert resolver.is_valid_country_code('CAN')
        assert not resolver.is_valid_country_code('XXX')

    def test_data_statistics(self, resolver):
        stats = resolver.data_statistics()

        assert stats['total_countries'] == len(resolver.country_list())
        assert stats['lowest'] <= stats['average'] <= stats['highest']


class TestResolution:
    """Source selection and fallback."""

    def test_income_source_for_us_with_percentile(self):
        source = resolve_source('USA', 75, 'female')

        assert source.kind == 'income'
        assert source.dataset_name == 'Health Inequality Project'
        assert source.description == "US income data (75th percentile)"
        assert source.detail.income_percentile == 75

    def test_country_source_otherwise(self):
        assert resolve_source('JPN', 75).kind == 'country'
        assert resolve_source('JPN').description == "JPN country data"
        assert resolve_source('USA').dataset_name == 'WHO'

    def test_missing_country_is_global(self):
        source = resolve_source(None)
        assert source.kind == 'country'
        assert source.description == "Global country data"

    def test_resolve_prefers_income(self, resolver):
        result = resolver.resolve('USA', 'female', 75)
        assert result.years == pytest.approx(87.04)
        assert result.source.kind == 'income'

    def test_resolve_without_percentile_uses_country(self, resolver):
        result = resolver.resolve('USA', 'female')
        assert result.years == pytest.approx(80.7)
        assert result.source.kind == 'country'

    def test_resolve_unknown_country_uses_global_average(self):
        result = resolve_life_expectancy(LifeTableStore(), 'XXX', 'male')
        assert result.years == 73.0

    def test_normalize_gender(self):
        assert normalize_gender('Female') == 'female'
        assert normalize_gender('m') == 'male'
        assert normalize_gender('other') == 'other'
        assert normalize_gender(None) is None


class TestDatasetFailures:
    """Load failures degrade to fallbacks and stay failed."""

    def _store_with_bad_income_table(self, tmp_path):
        shutil.copy(DEFAULT_DATA_DIR / 'life_expectancy.json', tmp_path)
        (tmp_path / 'health_ineq_online_table_1.csv').write_text(
            "gnd,pctile,hh_inc,le_agg\nM,1,400,72.7\nF,1,380,78.8\n", encoding='utf-8'
        )
        return LifeTableStore(tmp_path)

    def test_wrong_row_count_falls_back_to_country(self, tmp_path, caplog):
        store = self._store_with_bad_income_table(tmp_path)

        with caplog.at_level(logging.ERROR):
            result = LifeExpectancyResolver(store).resolve('USA', 'male', 50)

        assert result.years == pytest.approx(76.3)
        assert result.source.kind == 'country'
        assert "CSV load failed" in caplog.text

    def test_failure_is_sticky(self, tmp_path, caplog):
        store = self._store_with_bad_income_table(tmp_path)

        with caplog.at_level(logging.ERROR):
            assert store.income_table() is None
            assert store.income_table() is None
            assert store.income_lookup() is None

        failures = [r for r in caplog.records if "CSV load failed" in r.getMessage()]
        assert len(failures) == 1, f"Expected one load attempt, saw {len(failures)}"

    def test_missing_files(self, tmp_path):
        resolver = LifeExpectancyResolver(LifeTableStore(tmp_path))

        assert resolver.for_income('male', 50) is None
        assert resolver.country_list() == []
        assert resolver.resolve('JPN', 'male').years == 73.0
        assert resolver.data_statistics()['total_countries'] == 0

    def test_implausible_country_entry_skipped(self, tmp_path, caplog):
        (tmp_path / 'life_expectancy.json').write_text(json.dumps({
            'AAA': {'countryName': 'Alpha', 'male': 200, 'female': 80, 'both': 90},
            'BBB': {'countryName': 'Beta', 'male': 70, 'female': 75, 'both': 72.5},
        }), encoding='utf-8')

        with caplog.at_level(logging.WARNING):
            countries = LifeTableStore(tmp_path).countries()

        assert list(countries) == ['BBB']
        assert "implausible" in caplog.text

    def test_concurrent_first_access_loads_once(self):
        store = LifeTableStore()
        results = []

        def load():
            results.append(store.countries())

        threads = [threading.Thread(target=load) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 8
        assert all(r is results[0] for r in results), "All callers should share one parsed table"
