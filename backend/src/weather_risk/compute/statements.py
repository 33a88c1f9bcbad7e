"""Trend statement generation.

Produces the natural-language trend description for the risk statistics.
The year ranges and both half-period probabilities are part of the output
contract. All statements are deterministic for identical inputs.
"""

from __future__ import annotations

from weather_risk.config import STABLE_TREND_POINTS

INSUFFICIENT_TREND_STATEMENT = "Insufficient data for trend analysis"


def year_range_label(first_year: int, last_year: int) -> str:
    return f"{first_year}-{last_year}"


def trend_statement(
    trend_change: float,
    early_probability: float,
    recent_probability: float,
    early_period: str,
    recent_period: str,
    n_years: int,
) -> str:
    """Describe a split-period trend.

    Args:
        trend_change: recent minus early probability, in percentage points.
        early_probability: Exceedance probability (%) in the early half.
        recent_probability: Exceedance probability (%) in the recent half.
        early_period: Year range label of the early half, e.g. "2014-2018".
        recent_period: Year range label of the recent half.
        n_years: Sample size the halves were drawn from.
    """
    early = f"{early_probability:.1f}%"
    recent = f"{recent_probability:.1f}%"

    if abs(trend_change) < STABLE_TREND_POINTS:
        return (
            f"Probability has remained relatively stable over the last {n_years} years "
            f"({early_period}: {early}, {recent_period}: {recent})."
        )

    direction = "increased" if trend_change > 0 else "decreased"
    return (
        f"Probability has {direction} by {abs(trend_change):.1f} percentage points "
        f"over the last {n_years} years "
        f"(from {early} in {early_period} to {recent} in {recent_period})."
    )
