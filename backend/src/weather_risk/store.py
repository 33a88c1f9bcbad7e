"""In-memory time-series store.

Holds each loaded variable's readings and daily aggregates in an in-memory
DuckDB database. Loads are single-writer: rows are committed in one
transaction and the variable is only marked loaded afterwards. After that the
data is read-only and queries run on their own cursors without locking.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date
from enum import Enum
import logging
from pathlib import Path
import threading
from typing import Iterator

import duckdb
import pandas as pd

from weather_risk.compute.daily import (
    DailyAggregate,
    build_daily_aggregate,
    compute_daily_aggregates,
)
from weather_risk.compute.monthly import MonthlyAggregate, fold_month, month_bounds
from weather_risk.compute.risk import YearValue
from weather_risk.compute.samples import (
    range_reducer,
    reduce_range_by_year,
    validate_month_day,
)
from weather_risk.db.connection import get_memory_connection
from weather_risk.db.queries import (
    get_all_variable_loads,
    get_daily_frame,
    get_daily_row,
    get_daily_rows,
    get_day_of_year_values,
    get_readings,
    get_variable_load,
    replace_daily_aggregates,
    replace_readings,
    upsert_variable_load,
)
from weather_risk.errors import (
    DataNotLoadedError,
    FormatError,
    InvalidInputError,
    InvalidRangeError,
)
from weather_risk.ingest.readings import ParseResult, Reading, parse_reading_file
from weather_risk.variables import VariableDescriptor, describe_variable

logger = logging.getLogger(__name__)


class LoadStatus(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class VariableSummary:
    variable_id: str
    status: str
    source_path: str | None
    unit: str
    data_source_label: str
    days_loaded: int = 0
    records_accepted: int = 0
    lines_scanned: int = 0
    skipped_malformed: int = 0
    skipped_non_numeric: int = 0
    skipped_sentinel: int = 0
    first_date: date | None = None
    last_date: date | None = None
    error: str | None = None


class TimeSeriesStore:
    """Per-variable daily index with range, monthly and yearly-sample queries."""

    def __init__(self, conn: duckdb.DuckDBPyConnection | None = None):
        self._conn = conn if conn is not None else get_memory_connection()
        self._write_lock = threading.Lock()
        self._status: dict[str, LoadStatus] = {}

    def close(self) -> None:
        self._conn.close()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_variable(self, variable_id: str, path: Path | str) -> VariableSummary:
        """Parse a variable's file and replace its index.

        Parsing runs outside the write lock so several variables can load in
        parallel; only the commit is serialized.

        Raises:
            InvalidInputError: unknown variable id.
            FormatError: the file is missing or has no data header. The
                variable is left empty and marked failed.
        """
        descriptor = self.describe(variable_id)
        self._begin_load(variable_id)

        try:
            parsed = parse_reading_file(path, descriptor)
        except FormatError as e:
            self._record_failure(descriptor, path, e)
            raise
        except Exception:
            with self._write_lock:
                self._status[variable_id] = LoadStatus.FAILED
            raise

        daily = compute_daily_aggregates(parsed.readings, descriptor)
        self._commit(descriptor, parsed, daily)
        return self.summary(variable_id)

    def _begin_load(self, variable_id: str) -> None:
        with self._write_lock:
            # A reload keeps serving the previous rows until the commit swaps them
            if self._status.get(variable_id) is not LoadStatus.LOADED:
                self._status[variable_id] = LoadStatus.LOADING

    def _commit(
        self,
        descriptor: VariableDescriptor,
        parsed: ParseResult,
        daily: pd.DataFrame,
    ) -> None:
        variable_id = descriptor.variable_id
        with self._write_lock, self._cursor() as cur:
            cur.begin()
            try:
                replace_readings(cur, variable_id, parsed.readings)
                days = replace_daily_aggregates(cur, variable_id, daily)
                upsert_variable_load(cur, {
                    "variable_id": variable_id,
                    "source_path": parsed.source,
                    "status": LoadStatus.LOADED.value,
                    "header_line": parsed.header_line,
                    "lines_scanned": parsed.lines_scanned,
                    "records_accepted": parsed.records_accepted,
                    "skipped_malformed": parsed.skipped_malformed,
                    "skipped_non_numeric": parsed.skipped_non_numeric,
                    "skipped_sentinel": parsed.skipped_sentinel,
                    "days_loaded": days,
                    "first_obs_date": parsed.first_date,
                    "last_obs_date": parsed.last_date,
                })
                cur.commit()
            except Exception:
                cur.rollback()
                self._status[variable_id] = LoadStatus.FAILED
                raise
            self._status[variable_id] = LoadStatus.LOADED

        logger.info(
            "Loaded %s: %d days, %d records (%d lines skipped)",
            variable_id, days, parsed.records_accepted, parsed.skipped_total,
        )

    def _record_failure(
        self,
        descriptor: VariableDescriptor,
        path: Path | str,
        error: Exception,
    ) -> None:
        variable_id = descriptor.variable_id
        with self._write_lock, self._cursor() as cur:
            cur.begin()
            replace_readings(cur, variable_id, pd.DataFrame())
            replace_daily_aggregates(cur, variable_id, pd.DataFrame())
            upsert_variable_load(cur, {
                "variable_id": variable_id,
                "source_path": str(path),
                "status": LoadStatus.FAILED.value,
                "error": str(error),
            })
            cur.commit()
            self._status[variable_id] = LoadStatus.FAILED
        logger.warning("Failed to load %s from %s: %s", variable_id, path, error)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def describe(self, variable_id: str) -> VariableDescriptor:
        """Return the descriptor, raising InvalidInputError for unknown ids."""
        descriptor = describe_variable(variable_id)
        if descriptor is None:
            raise InvalidInputError(f"Unknown variable: {variable_id!r}")
        return descriptor

    def status(self, variable_id: str) -> LoadStatus | None:
        return self._status.get(variable_id)

    def is_loaded(self, variable_id: str) -> bool:
        return self._status.get(variable_id) is LoadStatus.LOADED

    def loaded_variables(self) -> list[str]:
        return sorted(v for v, s in self._status.items() if s is LoadStatus.LOADED)

    def summary(self, variable_id: str) -> VariableSummary | None:
        """Load summary for a variable, or None if it was never loaded."""
        descriptor = self.describe(variable_id)
        with self._cursor() as cur:
            row = get_variable_load(cur, variable_id)
        if row is None:
            return None
        return _to_summary(descriptor, _clean_row(row))

    def summaries(self) -> list[VariableSummary]:
        with self._cursor() as cur:
            rows = get_all_variable_loads(cur)
        result = []
        for row in rows:
            descriptor = describe_variable(row["variable_id"])
            if descriptor is not None:
                result.append(_to_summary(descriptor, _clean_row(row)))
        return result

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def daily_aggregate(self, variable_id: str, obs_date: date) -> DailyAggregate | None:
        """Aggregate for one day, or None when the day has no readings."""
        descriptor = self._require_loaded(variable_id)
        with self._cursor() as cur:
            row = get_daily_row(cur, variable_id, obs_date)
        if row is None:
            return None
        return build_daily_aggregate(descriptor, *row)

    def readings_for(self, variable_id: str, obs_date: date) -> list[Reading]:
        """The normalized readings behind one day, in file order."""
        self._require_loaded(variable_id)
        with self._cursor() as cur:
            rows = get_readings(cur, variable_id, obs_date)
        return [Reading(obs_time=t, raw_value=raw, value=v) for t, raw, v in rows]

    def range_query(
        self,
        variable_id: str,
        start_date: date,
        end_date: date,
    ) -> list[DailyAggregate]:
        """Daily aggregates for an inclusive date range.

        Days without data are omitted, not zero-filled. The range length is
        not limited here.

        Raises:
            InvalidRangeError: start_date is after end_date.
        """
        if start_date > end_date:
            raise InvalidRangeError(f"Start date {start_date} is after end date {end_date}")
        descriptor = self._require_loaded(variable_id)
        with self._cursor() as cur:
            rows = get_daily_rows(cur, variable_id, start_date, end_date)
        return [build_daily_aggregate(descriptor, *row) for row in rows]

    def monthly_aggregate(
        self,
        variable_id: str,
        year: int,
        month: int,
    ) -> MonthlyAggregate | None:
        """Fold the days of one month. None when no day of the month has data."""
        if not 1 <= month <= 12:
            raise InvalidInputError(f"Month must be between 1 and 12, got {month}")
        if not MINYEAR <= year <= MAXYEAR:
            raise InvalidInputError(f"Year must be between {MINYEAR} and {MAXYEAR}, got {year}")
        descriptor = self._require_loaded(variable_id)
        first, last = month_bounds(year, month)
        return fold_month(self.range_query(variable_id, first, last), descriptor, year, month)

    def yearly_sample(
        self,
        variable_id: str,
        month: int,
        day: int,
        start_year: int | None = None,
        end_year: int | None = None,
    ) -> list[YearValue]:
        """One value per year for a calendar day, from the descriptor's sample field."""
        validate_month_day(month, day)
        descriptor = self._require_loaded(variable_id)
        with self._cursor() as cur:
            rows = get_day_of_year_values(
                cur, variable_id, descriptor.sample_field, month, day, start_year, end_year,
            )
        return [YearValue(year=int(y), value=float(v)) for y, v in rows]

    def yearly_range_sample(
        self,
        variable_id: str,
        start: tuple[int, int],
        end: tuple[int, int],
        start_year: int | None = None,
        end_year: int | None = None,
    ) -> list[YearValue]:
        """One value per year reduced over a (month, day) range."""
        validate_month_day(*start)
        validate_month_day(*end)
        descriptor = self._require_loaded(variable_id)
        with self._cursor() as cur:
            daily = get_daily_frame(cur, variable_id, descriptor.sample_field)
        return reduce_range_by_year(
            daily, start, end, range_reducer(descriptor), start_year, end_year,
        )

    def _require_loaded(self, variable_id: str) -> VariableDescriptor:
        descriptor = self.describe(variable_id)
        status = self._status.get(variable_id)
        if status is not LoadStatus.LOADED:
            raise DataNotLoadedError(variable_id, status.value if status else None)
        return descriptor

    @contextmanager
    def _cursor(self) -> Iterator[duckdb.DuckDBPyConnection]:
        """Per-call cursor (thread-safe)."""
        cursor = self._conn.cursor()
        try:
            yield cursor
        finally:
            cursor.close()


def _to_summary(descriptor: VariableDescriptor, row: dict) -> VariableSummary:
    return VariableSummary(
        variable_id=descriptor.variable_id,
        status=row["status"],
        source_path=row.get("source_path"),
        unit=descriptor.unit,
        data_source_label=descriptor.data_source_label,
        days_loaded=row.get("days_loaded") or 0,
        records_accepted=row.get("records_accepted") or 0,
        lines_scanned=row.get("lines_scanned") or 0,
        skipped_malformed=row.get("skipped_malformed") or 0,
        skipped_non_numeric=row.get("skipped_non_numeric") or 0,
        skipped_sentinel=row.get("skipped_sentinel") or 0,
        first_date=row.get("first_obs_date"),
        last_date=row.get("last_obs_date"),
        error=row.get("error"),
    )


def _clean_row(row: dict) -> dict:
    """Convert a DB row to plain Python values, handling pandas/numpy types."""
    cleaned = {}
    for k, v in row.items():
        try:
            is_missing = v is None or pd.isna(v)
        except (ValueError, TypeError):
            is_missing = False
        if is_missing:
            cleaned[k] = None
        elif isinstance(v, pd.Timestamp):
            cleaned[k] = v.date()
        elif hasattr(v, "item"):  # numpy scalar
            cleaned[k] = v.item()
        else:
            cleaned[k] = v
    return cleaned
