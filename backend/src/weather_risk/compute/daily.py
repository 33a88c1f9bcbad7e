"""Per-day aggregation of sub-daily readings.

Each variable family gets its own aggregate shape: accumulation variables
carry a derived daily total, instantaneous variables may carry a category.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging

import pandas as pd

from weather_risk.variables import VariableDescriptor

logger = logging.getLogger(__name__)

DAILY_COLUMNS = [
    "obs_date", "reading_count", "average", "min", "max", "derived_total", "category",
]


@dataclass(frozen=True)
class DailyAggregate:
    variable_id: str
    obs_date: date
    reading_count: int
    average: float
    min: float
    max: float


@dataclass(frozen=True)
class AccumulationDailyAggregate(DailyAggregate):
    derived_total: float = 0.0


@dataclass(frozen=True)
class InstantaneousDailyAggregate(DailyAggregate):
    category: str | None = None


def compute_daily_aggregates(
    readings: pd.DataFrame,
    descriptor: VariableDescriptor,
) -> pd.DataFrame:
    """Group readings by calendar date and summarize each day.

    Args:
        readings: Frame with at least obs_date and value (normalized) columns.
        descriptor: Variable the readings belong to.

    Returns:
        DataFrame with DAILY_COLUMNS, one row per date with data, sorted by date.
        derived_total is only set for accumulation variables and category only
        for variables with a categorical scale.
    """
    if readings.empty:
        return _empty_df()

    daily = (
        readings.groupby("obs_date", sort=True)["value"]
        .agg(reading_count="count", average="mean", min="min", max="max", total="sum")
        .reset_index()
    )

    if descriptor.is_accumulation:
        # Each reading is a mean rate over its reporting window, so the day's
        # accumulation is sum(rate) * window rather than mean(rate) * 24.
        daily["derived_total"] = daily["total"] * descriptor.reporting_window_hours
    else:
        daily["derived_total"] = None

    if descriptor.categories is not None:
        daily["category"] = daily["average"].map(descriptor.categories.classify)
    else:
        daily["category"] = None

    logger.debug("Aggregated %d days for %s", len(daily), descriptor.variable_id)
    return daily[DAILY_COLUMNS]


def build_daily_aggregate(
    descriptor: VariableDescriptor,
    obs_date: date,
    reading_count: int,
    average: float,
    min_value: float,
    max_value: float,
    derived_total: float | None = None,
    category: str | None = None,
) -> DailyAggregate:
    """Build the aggregate variant that matches the descriptor's family."""
    if descriptor.is_accumulation:
        return AccumulationDailyAggregate(
            variable_id=descriptor.variable_id,
            obs_date=obs_date,
            reading_count=int(reading_count),
            average=float(average),
            min=float(min_value),
            max=float(max_value),
            derived_total=float(derived_total) if pd.notna(derived_total) else 0.0,
        )
    return InstantaneousDailyAggregate(
        variable_id=descriptor.variable_id,
        obs_date=obs_date,
        reading_count=int(reading_count),
        average=float(average),
        min=float(min_value),
        max=float(max_value),
        category=category if isinstance(category, str) else None,
    )


def aggregate_for(
    daily: pd.DataFrame,
    descriptor: VariableDescriptor,
    obs_date: date,
) -> DailyAggregate | None:
    """Look up one day in a frame from compute_daily_aggregates().

    Returns None when the date has no readings.
    """
    if daily.empty:
        return None
    match = daily[daily["obs_date"] == obs_date]
    if match.empty:
        return None
    row = match.iloc[0]
    return build_daily_aggregate(
        descriptor,
        obs_date,
        row["reading_count"],
        row["average"],
        row["min"],
        row["max"],
        row["derived_total"],
        row["category"],
    )


def _empty_df() -> pd.DataFrame:
    return pd.DataFrame(columns=DAILY_COLUMNS)
