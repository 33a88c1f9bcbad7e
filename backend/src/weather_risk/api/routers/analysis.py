"""Threshold risk endpoints."""

from __future__ import annotations

from dataclasses import asdict
import logging

from fastapi import APIRouter, Depends, HTTPException

from weather_risk.api.deps import get_store
from weather_risk.api.schemas import (
    RiskRequest,
    RiskResponse,
    SampleRiskRequest,
    YearValueModel,
)
from weather_risk.compute.risk import RiskStatistics, YearValue, compute_risk_statistics
from weather_risk.store import TimeSeriesStore
from weather_risk.variables import describe_variable

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/risk", response_model=RiskResponse)
def analyze_risk(
    body: RiskRequest,
    store: TimeSeriesStore = Depends(get_store),
) -> RiskResponse:
    """Risk statistics for a calendar day, or a day range, over every loaded year.

    With end_month/end_day each year's values across the range are reduced
    to one (summed for precipitation). Ranges ending before they start wrap
    into the next year and are labelled by the starting year.
    """
    if (body.end_month is None) != (body.end_day is None):
        raise HTTPException(400, "end_month and end_day must be given together")

    if body.end_month is None:
        sample = store.yearly_sample(
            body.variable, body.month, body.day, body.start_year, body.end_year,
        )
    else:
        sample = store.yearly_range_sample(
            body.variable,
            (body.month, body.day),
            (body.end_month, body.end_day),
            body.start_year,
            body.end_year,
        )
    logger.info(
        "Risk request %s %02d-%02d threshold=%s: %d years",
        body.variable, body.month, body.day, body.threshold, len(sample),
    )
    stats = compute_risk_statistics(sample, body.threshold, body.variable)
    return _to_response(stats, sample)


@router.post("/risk/sample", response_model=RiskResponse)
def analyze_sample(body: SampleRiskRequest) -> RiskResponse:
    """Risk statistics over a caller-supplied yearly sample."""
    sample = [YearValue(year=p.year, value=p.value) for p in body.sample]
    stats = compute_risk_statistics(sample, body.threshold, body.variable)
    return _to_response(stats)


def _to_response(stats: RiskStatistics, sample: list[YearValue] | None = None) -> RiskResponse:
    descriptor = describe_variable(stats.variable_id)
    return RiskResponse(
        **asdict(stats),
        unit=descriptor.unit,
        adverse_operator=descriptor.adverse_operator.value,
        data_source_label=descriptor.data_source_label,
        sample=[YearValueModel(year=s.year, value=s.value) for s in sample] if sample else None,
    )
