"""Yearly samples reduced over a calendar day range.

For each year, collects the daily values between a start and end
(month, day) and reduces them to one value. Ranges whose end falls before
their start wrap into the next year and are labelled by the starting year.
"""

from __future__ import annotations

from datetime import date

import pandas as pd

from weather_risk.compute.risk import YearValue
from weather_risk.errors import InvalidInputError
from weather_risk.variables import SampleField, VariableDescriptor


def range_reducer(descriptor: VariableDescriptor) -> str:
    """How daily values combine across a range: sum, max, min or mean."""
    if descriptor.is_accumulation:
        return "sum"
    if descriptor.sample_field is SampleField.MAX:
        return "max"
    if descriptor.sample_field is SampleField.MIN:
        return "min"
    return "mean"


def validate_month_day(month: int, day: int) -> None:
    """Raise InvalidInputError unless (month, day) exists in some year."""
    try:
        date(2000, month, day)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Invalid month/day: {month}/{day}") from e


def reduce_range_by_year(
    daily: pd.DataFrame,
    start: tuple[int, int],
    end: tuple[int, int],
    reducer: str,
    start_year: int | None = None,
    end_year: int | None = None,
) -> list[YearValue]:
    """Reduce daily values over a (month, day) range for every year.

    Args:
        daily: Frame with obs_date and value columns.
        start: Inclusive (month, day) the range begins on.
        end: Inclusive (month, day) the range ends on.
        reducer: One of "sum", "mean", "max", "min".
        start_year: Optional first year (by range start) to include.
        end_year: Optional last year (by range start) to include.

    Returns:
        YearValue per year that has at least one day of data in its range.
        Years in which the range start does not exist (Feb 29) are skipped;
        a Feb 29 end falls back to Feb 28.
    """
    validate_month_day(*start)
    validate_month_day(*end)
    if reducer not in ("sum", "mean", "max", "min"):
        raise InvalidInputError(f"Unknown reducer: {reducer!r}")

    if daily.empty:
        return []

    frame = daily.copy()
    frame["obs_date"] = pd.to_datetime(frame["obs_date"])
    wraps = end < start

    first = int(frame["obs_date"].dt.year.min())
    last = int(frame["obs_date"].dt.year.max())
    if wraps:
        first -= 1

    sample = []
    for year in range(first, last + 1):
        if start_year is not None and year < start_year:
            continue
        if end_year is not None and year > end_year:
            continue
        try:
            range_start = date(year, *start)
        except ValueError:
            continue
        end_in = year + 1 if wraps else year
        try:
            range_end = date(end_in, *end)
        except ValueError:
            # Feb 29 end in a non-leap year
            range_end = date(end_in, 2, 28)

        mask = (frame["obs_date"] >= pd.Timestamp(range_start)) & (
            frame["obs_date"] <= pd.Timestamp(range_end)
        )
        values = frame.loc[mask, "value"].dropna()
        if values.empty:
            continue
        sample.append(YearValue(year=year, value=float(values.agg(reducer))))

    return sample
