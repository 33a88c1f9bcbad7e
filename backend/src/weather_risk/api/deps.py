"""FastAPI dependency injection."""

from __future__ import annotations

from fastapi import Request

from weather_risk.store import TimeSeriesStore


def get_store(request: Request) -> TimeSeriesStore:
    """Provide the process-wide store built at startup.

    The store hands out its own per-call cursors, so it is shared as is.
    """
    return request.app.state.store
