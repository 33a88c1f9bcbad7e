"""Variable discovery, daily, range and monthly endpoints."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from weather_risk.api.deps import get_store
from weather_risk.api.schemas import (
    DailyAggregateResponse,
    LoadSummaryResponse,
    MonthlyAggregateResponse,
    RangeResponse,
    ReadingResponse,
    VariableResponse,
)
from weather_risk.config import MAX_RANGE_DAYS
from weather_risk.store import TimeSeriesStore
from weather_risk.variables import VariableDescriptor, all_variables, describe_variable

router = APIRouter()


@router.get("", response_model=list[VariableResponse])
def list_variables(store: TimeSeriesStore = Depends(get_store)) -> list[VariableResponse]:
    """List every registered variable and whether it is loaded."""
    return [
        VariableResponse(
            variable_id=d.variable_id,
            unit=d.unit,
            adverse_operator=d.adverse_operator.value,
            data_source_label=d.data_source_label,
            family=d.family.value,
            reading_unit=d.reading_unit,
            loaded=store.is_loaded(d.variable_id),
        )
        for d in all_variables()
    ]


@router.get("/{variable_id}/summary", response_model=LoadSummaryResponse)
def get_summary(
    variable_id: str,
    store: TimeSeriesStore = Depends(get_store),
) -> LoadSummaryResponse:
    """Load status, coverage and skip counters for a variable."""
    _require_variable(variable_id)
    summary = store.summary(variable_id)
    if summary is None:
        raise HTTPException(404, f"No load recorded for {variable_id}")
    return LoadSummaryResponse(**asdict(summary))


@router.get("/{variable_id}/days/{obs_date}", response_model=DailyAggregateResponse)
def get_day(
    variable_id: str,
    obs_date: date,
    include_readings: bool = Query(False, description="Attach the raw readings"),
    store: TimeSeriesStore = Depends(get_store),
) -> DailyAggregateResponse:
    """Daily aggregate for one date."""
    _require_variable(variable_id)
    aggregate = store.daily_aggregate(variable_id, obs_date)
    if aggregate is None:
        raise HTTPException(404, f"No {variable_id} data for {obs_date}")

    response = DailyAggregateResponse(**asdict(aggregate))
    if include_readings:
        response.readings = [
            ReadingResponse(**asdict(r)) for r in store.readings_for(variable_id, obs_date)
        ]
    return response


@router.get("/{variable_id}/range", response_model=RangeResponse)
def get_range(
    variable_id: str,
    start_date: date = Query(...),
    end_date: date = Query(...),
    store: TimeSeriesStore = Depends(get_store),
) -> RangeResponse:
    """Daily aggregates for an inclusive range. Days without data are omitted."""
    _require_variable(variable_id)
    if start_date > end_date:
        raise HTTPException(400, "start_date must not be after end_date")
    if (end_date - start_date).days + 1 > MAX_RANGE_DAYS:
        raise HTTPException(400, f"Range cannot exceed {MAX_RANGE_DAYS} days")

    days = store.range_query(variable_id, start_date, end_date)
    return RangeResponse(
        variable_id=variable_id,
        start_date=start_date,
        end_date=end_date,
        days=[DailyAggregateResponse(**asdict(d)) for d in days],
    )


@router.get("/{variable_id}/monthly/{year}/{month}", response_model=MonthlyAggregateResponse)
def get_monthly(
    variable_id: str,
    year: int,
    month: int,
    store: TimeSeriesStore = Depends(get_store),
) -> MonthlyAggregateResponse:
    """Monthly rollup folded from the month's daily aggregates."""
    _require_variable(variable_id)
    if not 1 <= month <= 12:
        raise HTTPException(400, "month must be between 1 and 12")
    aggregate = store.monthly_aggregate(variable_id, year, month)
    if aggregate is None:
        raise HTTPException(404, f"No {variable_id} data for {year}-{month:02d}")
    return MonthlyAggregateResponse(**asdict(aggregate))


def _require_variable(variable_id: str) -> VariableDescriptor:
    descriptor = describe_variable(variable_id)
    if descriptor is None:
        raise HTTPException(404, f"Variable {variable_id} not found")
    return descriptor
