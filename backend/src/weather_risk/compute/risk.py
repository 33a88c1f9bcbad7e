"""Threshold exceedance statistics over a yearly sample.

Given one value per year for a fixed target day (or day range), computes the
probability of adverse conditions, the sample mean, a split-period trend and
a histogram. Everything here is a pure function of its inputs: no I/O, no
state.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
import logging
import math
from numbers import Integral, Real

import numpy as np

from weather_risk.compute.statements import (
    INSUFFICIENT_TREND_STATEMENT,
    trend_statement,
    year_range_label,
)
from weather_risk.config import (
    MAX_HISTOGRAM_BINS,
    MIN_HISTOGRAM_BINS,
    MIN_TREND_SAMPLE,
    VALUES_PER_BIN,
)
from weather_risk.errors import InvalidInputError
from weather_risk.variables import AdverseOperator, describe_variable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YearValue:
    year: int
    value: float


@dataclass(frozen=True)
class HistogramBin:
    lower: float
    upper: float
    midpoint: float


@dataclass(frozen=True)
class Distribution:
    bins: list[HistogramBin] = field(default_factory=list)
    frequencies: list[int] = field(default_factory=list)
    bin_width: float | None = None


@dataclass(frozen=True)
class TrendAnalysis:
    trend_change: float
    description: str
    early_probability: float | None = None
    recent_probability: float | None = None
    early_period: str | None = None
    recent_period: str | None = None


@dataclass(frozen=True)
class SampleSummary:
    median: float
    q1: float
    q3: float
    standard_deviation: float
    variance: float
    min: float
    max: float


@dataclass(frozen=True)
class RiskStatistics:
    variable_id: str
    threshold: float
    probability_percent: float
    mean: float
    trend_change_percent: float
    trend_description: str
    distribution: Distribution
    sample_size: int
    trend: TrendAnalysis
    summary: SampleSummary | None = None


def compute_risk_statistics(
    sample: Iterable[YearValue | Mapping],
    threshold: float,
    variable_id: str,
) -> RiskStatistics:
    """Compute exceedance probability, mean, trend and distribution.

    Args:
        sample: One value per year. Elements may be YearValue instances or
            mappings with "year" and "value" keys.
        threshold: Threshold compared against each value with the variable's
            adverse operator.
        variable_id: Registered variable id.

    Raises:
        InvalidInputError: threshold is not numeric, the variable is unknown,
            or a sample element has no numeric year/value.
    """
    threshold = _validate_threshold(threshold)
    descriptor = describe_variable(variable_id)
    if descriptor is None:
        raise InvalidInputError(f"Unknown variable: {variable_id!r}")
    entries = coerce_sample(sample)

    operator = descriptor.adverse_operator
    values = [e.value for e in entries]

    probability = exceedance_probability(values, threshold, operator)
    trend = analyze_trend(entries, threshold, operator)

    logger.debug(
        "Risk statistics for %s (threshold %s %s): n=%d p=%.2f",
        variable_id, operator.value, threshold, len(entries), probability,
    )
    return RiskStatistics(
        variable_id=variable_id,
        threshold=threshold,
        probability_percent=round(probability, 2),
        mean=round(sample_mean(values), 2),
        trend_change_percent=round(trend.trend_change, 2),
        trend_description=trend.description,
        distribution=build_distribution(values),
        sample_size=len(entries),
        trend=trend,
        summary=summarize_sample(values),
    )


def exceedance_probability(
    values: Sequence[float],
    threshold: float,
    operator: AdverseOperator,
) -> float:
    """Percentage (0-100) of values meeting the adverse condition. 0 for no values."""
    if not values:
        return 0.0
    adverse = sum(1 for v in values if operator.is_adverse(v, threshold))
    return adverse / len(values) * 100


def sample_mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def analyze_trend(
    sample: Sequence[YearValue],
    threshold: float,
    operator: AdverseOperator,
) -> TrendAnalysis:
    """Compare exceedance probability between the early and recent halves.

    The sample is sorted by year and split at n // 2; with an odd count the
    extra year goes to the recent half. Fewer than MIN_TREND_SAMPLE years
    yields a zero change and no split.
    """
    if len(sample) < MIN_TREND_SAMPLE:
        return TrendAnalysis(trend_change=0.0, description=INSUFFICIENT_TREND_STATEMENT)

    ordered = sorted(sample, key=lambda e: e.year)
    split = len(ordered) // 2
    early, recent = ordered[:split], ordered[split:]

    early_probability = exceedance_probability([e.value for e in early], threshold, operator)
    recent_probability = exceedance_probability([e.value for e in recent], threshold, operator)
    change = recent_probability - early_probability

    early_period = year_range_label(early[0].year, early[-1].year)
    recent_period = year_range_label(recent[0].year, recent[-1].year)

    return TrendAnalysis(
        trend_change=change,
        description=trend_statement(
            change, early_probability, recent_probability,
            early_period, recent_period, len(ordered),
        ),
        early_probability=early_probability,
        recent_probability=recent_probability,
        early_period=early_period,
        recent_period=recent_period,
    )


def build_distribution(values: Sequence[float]) -> Distribution:
    """Histogram of the sample for charting.

    Bin count scales with the sample (one bin per VALUES_PER_BIN values)
    clamped to [MIN_HISTOGRAM_BINS, MAX_HISTOGRAM_BINS]. Bins are half-open
    [lower, upper) except the last one, which is closed so the maximum
    value is always counted.
    """
    if not values:
        return Distribution()

    arr = np.asarray(values, dtype=float)
    lo, hi = float(arr.min()), float(arr.max())

    if hi == lo:
        return Distribution(
            bins=[HistogramBin(lower=lo, upper=hi, midpoint=lo)],
            frequencies=[len(arr)],
            bin_width=0.0,
        )

    n_bins = min(MAX_HISTOGRAM_BINS, max(MIN_HISTOGRAM_BINS, len(arr) // VALUES_PER_BIN))
    width = (hi - lo) / n_bins
    edges = lo + np.arange(n_bins + 1) * width
    edges[-1] = hi

    idx = np.searchsorted(edges, arr, side="right") - 1
    idx = np.clip(idx, 0, n_bins - 1)
    counts = np.bincount(idx, minlength=n_bins)

    bins = [
        HistogramBin(
            lower=float(edges[i]),
            upper=float(edges[i + 1]),
            midpoint=float((edges[i] + edges[i + 1]) / 2),
        )
        for i in range(n_bins)
    ]
    return Distribution(
        bins=bins,
        frequencies=[int(c) for c in counts],
        bin_width=width,
    )


def summarize_sample(values: Sequence[float]) -> SampleSummary | None:
    """Median, quartiles and spread of a sample. None for an empty sample.

    Quartiles are taken at floor(n * 0.25) and floor(n * 0.75) of the sorted
    values; variance and standard deviation are population statistics.
    """
    if not values:
        return None

    ordered = np.sort(np.asarray(values, dtype=float))
    n = len(ordered)
    return SampleSummary(
        median=round(float(np.median(ordered)), 2),
        q1=round(float(ordered[int(n * 0.25)]), 2),
        q3=round(float(ordered[int(n * 0.75)]), 2),
        standard_deviation=round(float(np.std(ordered)), 2),
        variance=round(float(np.var(ordered)), 2),
        min=float(ordered[0]),
        max=float(ordered[-1]),
    )


def coerce_sample(sample: Iterable[YearValue | Mapping]) -> list[YearValue]:
    """Validate sample elements and return them as YearValue.

    Raises:
        InvalidInputError: an element lacks a numeric year or value.
    """
    if sample is None:
        raise InvalidInputError("Sample is required")

    entries = []
    for i, element in enumerate(sample):
        if isinstance(element, YearValue):
            year, value = element.year, element.value
        elif isinstance(element, Mapping):
            year, value = element.get("year"), element.get("value")
        else:
            year, value = getattr(element, "year", None), getattr(element, "value", None)

        if not _is_number(value):
            raise InvalidInputError(f"Sample element {i} has no numeric value: {value!r}")
        if isinstance(year, bool) or not isinstance(year, Integral):
            raise InvalidInputError(f"Sample element {i} has no integer year: {year!r}")
        entries.append(YearValue(year=int(year), value=float(value)))
    return entries


def _validate_threshold(threshold) -> float:
    if not _is_number(threshold):
        raise InvalidInputError(f"Threshold must be a number, got {threshold!r}")
    return float(threshold)


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return not math.isnan(value)
