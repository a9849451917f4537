class TelemetryException(Exception):
    """Base exception for sensor telemetry."""
    pass


class StoreConnectionError(TelemetryException):
    """Raised when the InfluxDB connection is missing or cannot be established."""
    pass


class InvalidRangeError(TelemetryException):
    """Raised when a requested time range is empty or inverted."""
    pass


class InvalidDurationError(TelemetryException):
    """Raised when a duration string cannot be parsed."""
    pass


class QueryFailedError(TelemetryException):
    """Raised when a Flux query fails in transport or in the store."""
    pass


class MalformedRowError(TelemetryException):
    """Raised when a returned row lacks a required field."""
    pass
