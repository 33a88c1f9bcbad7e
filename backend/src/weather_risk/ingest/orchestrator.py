"""Load orchestrator: parses every configured variable file into the store.

Files are parsed concurrently; a file that cannot be parsed only fails its own
variable and never stops the others.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
import logging
from pathlib import Path

from weather_risk.config import LOAD_WORKERS, VARIABLE_FILES
from weather_risk.errors import WeatherRiskError
from weather_risk.store import TimeSeriesStore

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    variable_id: str
    source_path: str = ""
    records_loaded: int = 0
    days_loaded: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def load_variable(
    store: TimeSeriesStore,
    variable_id: str,
    path: Path | str,
) -> LoadResult:
    """Load one variable file, recording failures instead of raising."""
    result = LoadResult(variable_id=variable_id, source_path=str(path))
    try:
        summary = store.load_variable(variable_id, path)
    except WeatherRiskError as e:
        logger.warning("Skipping %s: %s", variable_id, e)
        result.errors.append(str(e))
        return result
    except Exception:
        logger.exception("Failed to load %s from %s", variable_id, path)
        result.errors.append("Exception during load")
        return result

    if summary is not None:
        result.records_loaded = summary.records_accepted
        result.days_loaded = summary.days_loaded
        result.skipped = (
            summary.skipped_malformed
            + summary.skipped_non_numeric
            + summary.skipped_sentinel
        )
    return result


def load_variables(
    store: TimeSeriesStore,
    files: dict[str, Path] | None = None,
    max_workers: int = LOAD_WORKERS,
) -> list[LoadResult]:
    """Load several variable files in parallel.

    Args:
        store: Store receiving the indices.
        files: variable_id -> file path. Defaults to config.VARIABLE_FILES.
        max_workers: Parser threads.

    Returns:
        One LoadResult per variable, ordered by variable id.
    """
    files = VARIABLE_FILES if files is None else files
    results: list[LoadResult] = []

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(load_variable, store, vid, path): vid
            for vid, path in files.items()
        }
        for future in as_completed(futures):
            results.append(future.result())

    loaded = sum(1 for r in results if r.ok)
    logger.info("Loaded %d/%d variables", loaded, len(results))
    return sorted(results, key=lambda r: r.variable_id)
