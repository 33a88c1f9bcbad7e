"""Exception types raised by the core.

All of these are caller/input-class errors: they surface immediately and are
never retried.
"""


class WeatherRiskError(Exception):
    """Base class for weather-risk errors."""


class FormatError(WeatherRiskError, ValueError):
    """A source file is malformed or has no recognizable data header."""


class InvalidRangeError(WeatherRiskError, ValueError):
    """A date range was requested with start after end."""


class InvalidInputError(WeatherRiskError, ValueError):
    """Bad threshold, unknown variable, or a non-numeric sample element."""


class DataNotLoadedError(WeatherRiskError):
    """A variable was queried before its load finished successfully."""

    def __init__(self, variable_id: str, status: str | None = None):
        self.variable_id = variable_id
        self.status = status
        detail = f" (status: {status})" if status else ""
        super().__init__(f"Data for {variable_id} is not loaded{detail}")
