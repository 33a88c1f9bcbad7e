"""GLDAS time-series file parser.

The exported files carry a metadata preamble of unknown length before the
actual column header. The header is the first line that starts with the time
column and names the variable's column. Every data row after it is split into
columns; rows with too few columns, a non-numeric value, or the exact missing
value code are skipped and counted, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging
from pathlib import Path

import pandas as pd

from weather_risk.config import SENTINEL_VALUE, TIME_COLUMN
from weather_risk.errors import FormatError
from weather_risk.variables import VariableDescriptor

logger = logging.getLogger(__name__)

READING_COLUMNS = ["obs_date", "obs_time", "raw_value", "value"]


@dataclass(frozen=True)
class Reading:
    obs_time: str | None
    raw_value: float
    value: float


@dataclass
class ParseResult:
    variable_id: str
    source: str
    readings: pd.DataFrame
    header_line: int
    lines_scanned: int = 0
    skipped_malformed: int = 0
    skipped_non_numeric: int = 0
    skipped_sentinel: int = 0

    @property
    def records_accepted(self) -> int:
        return len(self.readings)

    @property
    def skipped_total(self) -> int:
        return self.skipped_malformed + self.skipped_non_numeric + self.skipped_sentinel

    @property
    def first_date(self) -> date | None:
        if self.readings.empty:
            return None
        return min(self.readings["obs_date"])

    @property
    def last_date(self) -> date | None:
        if self.readings.empty:
            return None
        return max(self.readings["obs_date"])


def parse_reading_file(path: Path | str, descriptor: VariableDescriptor) -> ParseResult:
    """Parse one variable's time-series file.

    Raises:
        FormatError: the file cannot be read or has no data header.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise FormatError(f"Cannot read {descriptor.variable_id} data file {path}: {e}") from e

    return parse_reading_lines(text.splitlines(), descriptor, source=str(path))


def parse_reading_lines(
    lines: list[str],
    descriptor: VariableDescriptor,
    source: str = "<memory>",
) -> ParseResult:
    """Parse already-split file lines. See parse_reading_file()."""
    header_idx = find_header(lines, descriptor)
    time_idx, value_idx = _resolve_columns(lines[header_idx], descriptor)
    logger.info(
        "Found %s data header at line %d of %s",
        descriptor.variable_id, header_idx + 1, source,
    )

    body = [line.strip() for line in lines[header_idx + 1:]]
    body = [line for line in body if line]

    result = ParseResult(
        variable_id=descriptor.variable_id,
        source=source,
        readings=_empty_df(),
        header_line=header_idx + 1,
        lines_scanned=len(body),
    )
    if not body:
        logger.warning("No data rows after header in %s", source)
        return result

    rows = pd.Series(body, dtype="object")
    needed = max(time_idx, value_idx) + 1
    insufficient = (rows.str.count(",") + 1) < needed

    parts = rows.str.split(",", expand=True)
    parts = parts.reindex(columns=range(max(needed, parts.shape[1]))).fillna("").astype(str)
    timestamps = parts[time_idx].str.strip()
    raw_text = parts[value_idx].str.strip()

    # Date part and time-of-day part, split on the first whitespace
    stamp_parts = timestamps.str.split(n=1, expand=True).reindex(columns=[0, 1])
    obs_dates = pd.to_datetime(stamp_parts[0], format="%Y-%m-%d", errors="coerce")
    raw_values = pd.to_numeric(raw_text, errors="coerce")

    malformed = insufficient | (timestamps == "") | obs_dates.isna()
    non_numeric = ~malformed & raw_values.isna()
    # Exact match only: legitimate negative values must survive
    sentinel = ~malformed & ~non_numeric & (raw_values == SENTINEL_VALUE)
    keep = ~(malformed | non_numeric | sentinel)

    result.skipped_malformed = int(malformed.sum())
    result.skipped_non_numeric = int(non_numeric.sum())
    result.skipped_sentinel = int(sentinel.sum())

    if keep.any():
        raw_kept = raw_values[keep].astype(float)
        obs_times = stamp_parts.loc[keep, 1].astype(object)
        result.readings = pd.DataFrame({
            "obs_date": obs_dates[keep].dt.date,
            "obs_time": obs_times.where(obs_times.notna(), None),
            "raw_value": raw_kept,
            "value": descriptor.normalize(raw_kept),
        }).reset_index(drop=True)

    logger.info(
        "Parsed %d %s readings from %s (skipped %d malformed, %d non-numeric, %d missing)",
        result.records_accepted, descriptor.variable_id, source,
        result.skipped_malformed, result.skipped_non_numeric, result.skipped_sentinel,
    )
    return result


def find_header(lines: list[str], descriptor: VariableDescriptor) -> int:
    """Return the index of the data header line.

    Raises:
        FormatError: no line starts with the time column and names the variable column.
    """
    prefix = f"{TIME_COLUMN},"
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith(prefix) and descriptor.column_token in stripped:
            return i
    raise FormatError(
        f"Could not find data header ({TIME_COLUMN!r} + {descriptor.column_token!r}) "
        f"for {descriptor.variable_id}"
    )


def _resolve_columns(header: str, descriptor: VariableDescriptor) -> tuple[int, int]:
    columns = [col.strip() for col in header.split(",")]
    time_idx = next((i for i, col in enumerate(columns) if TIME_COLUMN in col.lower()), None)
    value_idx = next((i for i, col in enumerate(columns) if descriptor.column_token in col), None)
    if time_idx is None or value_idx is None:
        raise FormatError(f"Could not resolve time or {descriptor.column_token} columns in header")
    return time_idx, value_idx


def _empty_df() -> pd.DataFrame:
    return pd.DataFrame(columns=READING_COLUMNS)
