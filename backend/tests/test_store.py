"""Tests for the in-memory time-series store."""

from datetime import date
from unittest.mock import patch

import pytest

from weather_risk.compute.daily import AccumulationDailyAggregate, InstantaneousDailyAggregate
from weather_risk.errors import (
    DataNotLoadedError,
    FormatError,
    InvalidInputError,
    InvalidRangeError,
)
from weather_risk.store import LoadStatus


class TestLoad:
    def test_load_marks_loaded(self, store, write_gldas, wind_rows):
        summary = store.load_variable("wind_speed", write_gldas("wind_speed", wind_rows))

        assert store.is_loaded("wind_speed")
        assert summary.status == "loaded"
        assert summary.days_loaded == 3
        assert summary.records_accepted == 4
        assert summary.first_date == date(2024, 1, 5)
        assert summary.last_date == date(2024, 2, 1)
        assert summary.unit == "m/s"

    def test_sentinel_skipped_zero_counted(self, loaded_store):
        summary = loaded_store.summary("precipitation")

        assert summary.skipped_sentinel == 1
        assert summary.records_accepted == 3
        assert loaded_store.daily_aggregate("precipitation", date(2024, 1, 2)) is None
        zero_day = loaded_store.daily_aggregate("precipitation", date(2024, 1, 3))
        assert zero_day.reading_count == 1
        assert zero_day.derived_total == 0.0

    def test_unknown_variable(self, store, tmp_path):
        with pytest.raises(InvalidInputError):
            store.load_variable("snowfall", tmp_path / "snow.csv")

    def test_failed_load(self, store, tmp_path):
        bad = tmp_path / "bad.csv"
        bad.write_text("no header here\n")

        with pytest.raises(FormatError):
            store.load_variable("humidity", bad)

        assert store.status("humidity") is LoadStatus.FAILED
        assert store.summary("humidity").status == "failed"
        with pytest.raises(DataNotLoadedError):
            store.daily_aggregate("humidity", date(2024, 1, 1))

    def test_reload_replaces_rows(self, store, write_gldas, wind_rows):
        store.load_variable("wind_speed", write_gldas("wind_speed", wind_rows))
        store.load_variable(
            "wind_speed",
            write_gldas("wind_speed", [("2025-01-01 00:00:00", 1.0)], name="new.csv"),
        )

        assert store.daily_aggregate("wind_speed", date(2024, 1, 5)) is None
        assert store.daily_aggregate("wind_speed", date(2025, 1, 1)) is not None
        assert store.summary("wind_speed").days_loaded == 1

    def test_failed_commit_rolls_back(self, store, write_gldas, wind_rows):
        store.load_variable("wind_speed", write_gldas("wind_speed", wind_rows))

        with patch("weather_risk.store.upsert_variable_load", side_effect=RuntimeError("db")):
            with pytest.raises(RuntimeError):
                store.load_variable(
                    "wind_speed",
                    write_gldas("wind_speed", [("2025-01-01 00:00:00", 1.0)], name="new.csv"),
                )

        assert store.status("wind_speed") is LoadStatus.FAILED
        # previous rows survive the rollback
        with store._cursor() as cur:
            count = cur.execute(
                "SELECT COUNT(*) FROM fact_variable_day WHERE variable_id = 'wind_speed'"
            ).fetchone()[0]
        assert count == 3

    def test_not_loaded(self, store):
        with pytest.raises(DataNotLoadedError):
            store.range_query("wind_speed", date(2024, 1, 1), date(2024, 1, 2))

    def test_summaries(self, loaded_store):
        ids = [s.variable_id for s in loaded_store.summaries()]

        assert ids == ["max_temp", "min_temp", "precipitation", "wind_speed"]
        assert loaded_store.loaded_variables() == ids


class TestDailyQueries:
    def test_precipitation_day(self, loaded_store):
        day = loaded_store.daily_aggregate("precipitation", date(2024, 1, 1))

        assert isinstance(day, AccumulationDailyAggregate)
        assert day.reading_count == 2
        assert day.average == pytest.approx(0.54)
        # (0.36 + 0.72) mm/h over 3-hour windows
        assert day.derived_total == pytest.approx(3.24)

    def test_wind_day_category(self, loaded_store):
        day = loaded_store.daily_aggregate("wind_speed", date(2024, 1, 5))

        assert isinstance(day, InstantaneousDailyAggregate)
        assert day.average == pytest.approx(6.0)
        assert day.category == "Moderate Breeze"

    def test_readings_for(self, loaded_store):
        readings = loaded_store.readings_for("wind_speed", date(2024, 1, 5))

        assert [r.obs_time for r in readings] == ["00:00:00", "03:00:00"]
        assert [r.value for r in readings] == [4.0, 8.0]

    def test_readings_for_absent_day(self, loaded_store):
        assert loaded_store.readings_for("wind_speed", date(2024, 1, 7)) == []


class TestRangeQuery:
    def test_days_without_data_omitted(self, store, write_gldas):
        store.load_variable("wind_speed", write_gldas("wind_speed", [
            ("2024-01-02 00:00:00", 3.0),
        ]))

        days = store.range_query("wind_speed", date(2024, 1, 1), date(2024, 1, 3))

        assert len(days) == 1
        assert days[0].obs_date == date(2024, 1, 2)

    def test_ordered_inclusive(self, loaded_store):
        days = loaded_store.range_query("wind_speed", date(2024, 1, 5), date(2024, 2, 1))

        assert [d.obs_date for d in days] == [
            date(2024, 1, 5), date(2024, 1, 6), date(2024, 2, 1),
        ]

    def test_start_after_end(self, loaded_store):
        with pytest.raises(InvalidRangeError):
            loaded_store.range_query("wind_speed", date(2024, 1, 3), date(2024, 1, 1))

    def test_long_range_not_limited(self, loaded_store):
        days = loaded_store.range_query("wind_speed", date(2000, 1, 1), date(2030, 1, 1))

        assert len(days) == 3


class TestMonthlyAggregate:
    def test_precipitation_month(self, loaded_store):
        month = loaded_store.monthly_aggregate("precipitation", 2024, 1)

        assert month.days_with_data == 2
        assert month.total == pytest.approx(3.24)
        assert month.average == pytest.approx(1.62)
        assert month.count_above_threshold == 1

    def test_wind_month(self, loaded_store):
        month = loaded_store.monthly_aggregate("wind_speed", 2024, 1)

        assert month.average == pytest.approx(4.0)
        assert month.max == 8.0
        assert month.min == 2.0
        assert month.count_above_threshold == 1

    def test_empty_month(self, loaded_store):
        assert loaded_store.monthly_aggregate("wind_speed", 2024, 3) is None

    def test_invalid_month(self, loaded_store):
        with pytest.raises(InvalidInputError):
            loaded_store.monthly_aggregate("wind_speed", 2024, 13)

    def test_invalid_year(self, loaded_store):
        with pytest.raises(InvalidInputError):
            loaded_store.monthly_aggregate("wind_speed", 0, 1)


class TestYearlySamples:
    def test_max_temp_uses_daily_max(self, loaded_store):
        sample = loaded_store.yearly_sample("max_temp", 3, 15)

        assert [s.year for s in sample] == list(range(2015, 2025))
        assert [s.value for s in sample] == pytest.approx([10.0 + i for i in range(10)])

    def test_min_temp_uses_daily_min(self, loaded_store):
        sample = loaded_store.yearly_sample("min_temp", 3, 15)

        assert [s.value for s in sample] == pytest.approx([float(i) for i in range(10)])

    def test_year_filter(self, loaded_store):
        sample = loaded_store.yearly_sample("max_temp", 3, 15, start_year=2020, end_year=2021)

        assert [s.year for s in sample] == [2020, 2021]

    def test_day_without_data(self, loaded_store):
        assert loaded_store.yearly_sample("max_temp", 3, 16) == []

    def test_invalid_day(self, loaded_store):
        with pytest.raises(InvalidInputError):
            loaded_store.yearly_sample("max_temp", 2, 30)

    def test_range_sample_sums_precipitation(self, loaded_store):
        sample = loaded_store.yearly_range_sample("precipitation", (1, 1), (1, 31))

        assert len(sample) == 1
        assert sample[0].year == 2024
        assert sample[0].value == pytest.approx(3.24)

    def test_range_sample_wraps_new_year(self, loaded_store):
        sample = loaded_store.yearly_range_sample("wind_speed", (12, 31), (1, 6))

        # Labelled by the year the range starts in; mean of daily averages 6.0 and 2.0
        assert [s.year for s in sample] == [2023]
        assert sample[0].value == pytest.approx(4.0)

    def test_range_sample_invalid_end(self, loaded_store):
        with pytest.raises(InvalidInputError):
            loaded_store.yearly_range_sample("precipitation", (1, 1), (2, 30))
