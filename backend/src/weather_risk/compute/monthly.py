"""Monthly rollups folded from daily aggregates.

Monthly values are never stored; they are always recomputed from the days
of that month.
"""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass
from datetime import date

from weather_risk.compute.daily import AccumulationDailyAggregate, DailyAggregate
from weather_risk.variables import VariableDescriptor


@dataclass(frozen=True)
class MonthlyAggregate:
    variable_id: str
    year: int
    month: int
    days_with_data: int
    average: float
    max: float
    total: float | None = None
    min: float | None = None
    count_above_threshold: int | None = None


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    return date(year, month, 1), date(year, month, monthrange(year, month)[1])


def fold_month(
    days: list[DailyAggregate],
    descriptor: VariableDescriptor,
    year: int,
    month: int,
) -> MonthlyAggregate | None:
    """Fold the daily aggregates of one month.

    Accumulation variables sum their daily derived totals; instantaneous
    variables average the daily averages. Days outside the month are ignored.
    Returns None when no day of the month has data.
    """
    in_month = [d for d in days if d.obs_date.year == year and d.obs_date.month == month]
    if not in_month:
        return None

    threshold = descriptor.day_count_threshold

    if descriptor.is_accumulation:
        totals = [
            d.derived_total if isinstance(d, AccumulationDailyAggregate) else 0.0
            for d in in_month
        ]
        total = sum(totals)
        return MonthlyAggregate(
            variable_id=descriptor.variable_id,
            year=year,
            month=month,
            days_with_data=len(in_month),
            average=total / len(in_month),
            max=max(totals),
            total=total,
            count_above_threshold=(
                sum(1 for t in totals if t > threshold) if threshold is not None else None
            ),
        )

    averages = [d.average for d in in_month]
    return MonthlyAggregate(
        variable_id=descriptor.variable_id,
        year=year,
        month=month,
        days_with_data=len(in_month),
        average=sum(averages) / len(averages),
        max=max(d.max for d in in_month),
        min=min(d.min for d in in_month),
        count_above_threshold=(
            sum(1 for a in averages if a > threshold) if threshold is not None else None
        ),
    )
