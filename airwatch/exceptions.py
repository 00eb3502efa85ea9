"""
AirWatch exceptions.

Simple exception hierarchy for error handling.
"""

from typing import Optional


class AirWatchError(Exception):
    """Base exception for AirWatch."""

    pass


class ConfigurationError(AirWatchError):
    """Configuration is invalid or incomplete."""

    pass


class InsufficientDataError(AirWatchError):
    """Not enough samples to compute a forecast or statistic."""

    def __init__(self, required: int, actual: int):
        self.required = required
        self.actual = actual
        super().__init__(
            f'Insufficient data for prediction. Need at least {required} '
            f'data points, got {actual}.'
        )


class TransportUnavailable(AirWatchError):
    """A single transport probe, transmit or batch flush failed."""

    def __init__(self, transport: str, reason: Optional[str] = None):
        self.transport = transport
        self.reason = reason
        message = f'Transport {transport} unavailable'
        if reason:
            message = f'{message}: {reason}'
        super().__init__(message)


class IngestionError(AirWatchError):
    """Telemetry feed could not be fetched or parsed."""

    pass
