"""Pydantic request and response models for the API."""

from __future__ import annotations

from datetime import date
from pydantic import BaseModel, Field


class VariableResponse(BaseModel):
    variable_id: str
    unit: str
    adverse_operator: str
    data_source_label: str
    family: str
    reading_unit: str | None = None
    loaded: bool = False


class LoadSummaryResponse(BaseModel):
    variable_id: str
    status: str
    source_path: str | None = None
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


class ReadingResponse(BaseModel):
    obs_time: str | None = None
    raw_value: float
    value: float


class DailyAggregateResponse(BaseModel):
    variable_id: str
    obs_date: date
    reading_count: int
    average: float
    min: float
    max: float
    derived_total: float | None = None
    category: str | None = None
    readings: list[ReadingResponse] | None = None


class RangeResponse(BaseModel):
    variable_id: str
    start_date: date
    end_date: date
    days: list[DailyAggregateResponse]


class MonthlyAggregateResponse(BaseModel):
    variable_id: str
    year: int
    month: int
    days_with_data: int
    average: float
    max: float
    total: float | None = None
    min: float | None = None
    count_above_threshold: int | None = None


class YearValueModel(BaseModel):
    year: int
    value: float


class RiskRequest(BaseModel):
    variable: str
    threshold: float
    month: int = Field(..., ge=1, le=12)
    day: int = Field(..., ge=1, le=31)
    end_month: int | None = Field(None, ge=1, le=12)
    end_day: int | None = Field(None, ge=1, le=31)
    start_year: int | None = None
    end_year: int | None = None


class SampleRiskRequest(BaseModel):
    variable: str
    threshold: float
    sample: list[YearValueModel]


class HistogramBinModel(BaseModel):
    lower: float
    upper: float
    midpoint: float


class DistributionModel(BaseModel):
    bins: list[HistogramBinModel]
    frequencies: list[int]
    bin_width: float | None = None


class TrendModel(BaseModel):
    trend_change: float
    description: str
    early_probability: float | None = None
    recent_probability: float | None = None
    early_period: str | None = None
    recent_period: str | None = None


class SummaryModel(BaseModel):
    median: float
    q1: float
    q3: float
    standard_deviation: float
    variance: float
    min: float
    max: float


class RiskResponse(BaseModel):
    variable_id: str
    threshold: float
    unit: str
    adverse_operator: str
    data_source_label: str
    probability_percent: float
    mean: float
    trend_change_percent: float
    trend_description: str
    distribution: DistributionModel
    sample_size: int
    trend: TrendModel
    summary: SummaryModel | None = None
    sample: list[YearValueModel] | None = None
