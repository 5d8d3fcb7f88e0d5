"""
Climate controller exceptions.

Simple exception hierarchy for error handling. Validation errors also
subclass the matching builtin so callers can catch ValueError or
PermissionError without importing this module.
"""


class ClimateError(Exception):
    """Base exception for the climate controller."""

    pass


class ConfigurationError(ClimateError):
    """Configuration is invalid."""

    pass


class InvalidModeError(ClimateError, ValueError):
    """Requested HVAC mode is not one of off/heat/cool/fan."""

    pass


class TemperatureOutOfRangeError(ClimateError, ValueError):
    """Target temperature is outside the permitted range."""

    pass


class UnauthorizedError(ClimateError, PermissionError):
    """Acting user is not allowed to perform the operation."""

    pass


class SensorError(ClimateError):
    """Sensor data is unavailable or invalid."""

    pass


class SensorUnavailableError(SensorError):
    """Sensor provider is marked unhealthy."""

    pass


class SensorFaultError(SensorError):
    """Reading fell outside the hard physical bound."""

    pass


class StorageError(ClimateError):
    """Durable append of an accounting or state row failed."""

    pass
