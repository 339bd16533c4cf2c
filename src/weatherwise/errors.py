"""Application exception classes."""


class WeatherwiseError(Exception):
    """Base class for errors raised by the climate analysis core."""


class ConfigurationError(WeatherwiseError):
    """Raised when a required provider credential or setting is missing."""


class InvalidRequestError(WeatherwiseError, ValueError):
    """Raised when an analysis request carries no usable location information."""


class DataInsufficientError(WeatherwiseError):
    """Raised when a historical window holds no observations to reduce."""


class ClimateProviderError(WeatherwiseError):
    """Raised when the historical climate provider fails, times out or returns malformed data."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GeocodingError(WeatherwiseError):
    """Raised when a free-text place cannot be resolved to coordinates."""
