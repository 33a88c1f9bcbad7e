"""Variable descriptor registry.

Static metadata for every supported variable: unit, the comparison that
defines adverse conditions, where the values come from, and how raw file
values become daily aggregates.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from weather_risk.config import RAINY_DAY_MM, WINDY_DAY_MS


class AdverseOperator(str, Enum):
    AT_LEAST = ">="
    AT_MOST = "<="

    def is_adverse(self, value: float, threshold: float) -> bool:
        if self is AdverseOperator.AT_LEAST:
            return value >= threshold
        return value <= threshold


class VariableFamily(str, Enum):
    ACCUMULATION = "accumulation"
    INSTANTANEOUS = "instantaneous"


class SampleField(str, Enum):
    """Daily aggregate field that feeds yearly samples."""

    AVERAGE = "average"
    MIN = "min"
    MAX = "max"
    DERIVED_TOTAL = "derived_total"


# Beaufort scale approximation on daily mean wind speed (m/s).
# Lower bounds are inclusive; the last category is open-ended.
BEAUFORT_CATEGORIES: tuple[tuple[float, str], ...] = (
    (0.3, "Light Air"),
    (1.6, "Light Breeze"),
    (3.4, "Gentle Breeze"),
    (5.5, "Moderate Breeze"),
    (8.0, "Fresh Breeze"),
    (10.8, "Strong Breeze"),
    (13.9, "Near Gale"),
    (17.2, "Gale"),
    (20.8, "Strong Gale+"),
)
BEAUFORT_BASE_CATEGORY = "Calm"


@dataclass(frozen=True)
class CategoryScale:
    base_label: str
    thresholds: tuple[tuple[float, str], ...]

    def classify(self, value: float) -> str:
        label = self.base_label
        for lower, name in self.thresholds:
            if value >= lower:
                label = name
            else:
                break
        return label


@dataclass(frozen=True)
class VariableDescriptor:
    variable_id: str
    unit: str
    adverse_operator: AdverseOperator
    data_source_label: str
    column_token: str
    family: VariableFamily
    sample_field: SampleField
    scale: float = 1.0
    offset: float = 0.0
    reading_unit: str | None = None
    reporting_window_hours: float | None = None
    categories: CategoryScale | None = None
    day_count_threshold: float | None = None

    def __post_init__(self):
        if self.family is VariableFamily.ACCUMULATION and not self.reporting_window_hours:
            raise ValueError(
                f"Accumulation variable {self.variable_id} needs a reporting window"
            )

    @property
    def is_accumulation(self) -> bool:
        return self.family is VariableFamily.ACCUMULATION

    def normalize(self, raw: float) -> float:
        return raw * self.scale + self.offset


_GLDAS = "NASA GLDAS Model"

_REGISTRY: dict[str, VariableDescriptor] = {
    d.variable_id: d
    for d in (
        VariableDescriptor(
            variable_id="precipitation",
            unit="mm",
            adverse_operator=AdverseOperator.AT_LEAST,
            data_source_label=f"{_GLDAS} - Total precipitation rate 3-hourly 0.25 deg",
            column_token="Rainf",
            family=VariableFamily.ACCUMULATION,
            sample_field=SampleField.DERIVED_TOTAL,
            # kg m-2 s-1 is mm/s; readings are stored as mm/hour
            scale=3600.0,
            reading_unit="mm/hour",
            reporting_window_hours=3.0,
            day_count_threshold=RAINY_DAY_MM,
        ),
        VariableDescriptor(
            variable_id="wind_speed",
            unit="m/s",
            adverse_operator=AdverseOperator.AT_LEAST,
            data_source_label=f"{_GLDAS} - Near surface wind speed 3-hourly 0.25 deg",
            column_token="Wind",
            family=VariableFamily.INSTANTANEOUS,
            sample_field=SampleField.AVERAGE,
            categories=CategoryScale(BEAUFORT_BASE_CATEGORY, BEAUFORT_CATEGORIES),
            day_count_threshold=WINDY_DAY_MS,
        ),
        VariableDescriptor(
            variable_id="humidity",
            unit="kg/kg",
            adverse_operator=AdverseOperator.AT_LEAST,
            data_source_label=f"{_GLDAS} - Specific humidity 3-hourly 0.25 deg",
            column_token="Qair",
            family=VariableFamily.INSTANTANEOUS,
            sample_field=SampleField.AVERAGE,
        ),
        VariableDescriptor(
            variable_id="max_temp",
            unit="°C",
            adverse_operator=AdverseOperator.AT_LEAST,
            data_source_label=f"{_GLDAS} - Air temperature 3-hourly 0.25 deg",
            column_token="Tair",
            family=VariableFamily.INSTANTANEOUS,
            sample_field=SampleField.MAX,
            offset=-273.15,
        ),
        VariableDescriptor(
            variable_id="min_temp",
            unit="°C",
            adverse_operator=AdverseOperator.AT_MOST,
            data_source_label=f"{_GLDAS} - Air temperature 3-hourly 0.25 deg",
            column_token="Tair",
            family=VariableFamily.INSTANTANEOUS,
            sample_field=SampleField.MIN,
            offset=-273.15,
        ),
    )
}

VARIABLE_IDS = list(_REGISTRY)


def describe_variable(variable_id: str) -> VariableDescriptor | None:
    """Return the descriptor for a variable id, or None if unknown."""
    return _REGISTRY.get(variable_id)


def all_variables() -> list[VariableDescriptor]:
    return list(_REGISTRY.values())
