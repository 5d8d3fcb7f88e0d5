"""
Sensor providers for the climate controller.
"""

from climate.sensors.temperature_sensor import (
    ChannelRange,
    SensorReading,
    SensorSettings,
    SensorStatus,
    TemperatureSensor,
)

__all__ = [
    "TemperatureSensor",
    "SensorSettings",
    "ChannelRange",
    "SensorReading",
    "SensorStatus",
]
