# climate/sensors/temperature_sensor.py
"""
Simulated ambient sensor provider.

Produces temperature, humidity and carbon monoxide readings drawn from a
bounded simulation range. A draw outside the hard physical bound is a
sensor fault: the read fails, the error counter goes up and a warning is
logged. Health only changes through inject_fault() / reset().

Thread-safety:
- Reads overlap freely (shared lock)
- Updates to the last-reading record and the error counter are
  serialised (exclusive lock), so readers never see a half-written record
"""

import math
import random
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from climate.exceptions import (
    ConfigurationError,
    SensorError,
    SensorFaultError,
    SensorUnavailableError,
)
from climate.security.logging_system import (
    EventCategory,
    EventSeverity,
    get_logger,
)
from climate.state.rwlock import ReadWriteLock
from climate.time.simulation_time import SimulationTime

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChannelRange:
    """Simulation and physical bounds for one measured quantity.

    Attributes:
        simulation_low / simulation_high: Range values are drawn from
        physical_low / physical_high: Values outside are a sensor fault
    """

    simulation_low: float
    simulation_high: float
    physical_low: float
    physical_high: float

    def __post_init__(self):
        if self.simulation_low > self.simulation_high:
            raise ConfigurationError(
                f"Inverted simulation range [{self.simulation_low}, {self.simulation_high}]"
            )
        if self.physical_low > self.physical_high:
            raise ConfigurationError(
                f"Inverted physical range [{self.physical_low}, {self.physical_high}]"
            )

    def within_physical(self, value: float) -> bool:
        return self.physical_low <= value <= self.physical_high

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "ChannelRange":
        try:
            sim_low, sim_high = (float(v) for v in cfg["simulation_range"])
            phys_low, phys_high = (float(v) for v in cfg["physical_range"])
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid sensor range configuration: {e}") from e
        return cls(sim_low, sim_high, phys_low, phys_high)


@dataclass(frozen=True)
class SensorSettings:
    """Per-channel ranges and staleness threshold."""

    temperature: ChannelRange = ChannelRange(18.0, 28.0, -40.0, 85.0)
    humidity: ChannelRange = ChannelRange(30.0, 60.0, 0.0, 100.0)
    co: ChannelRange = ChannelRange(0.0, 5.0, 0.0, 1000.0)
    stale_after_seconds: float = 300.0

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "SensorSettings":
        cfg = config.get("sensors", {})
        defaults = cls()
        return cls(
            temperature=(
                ChannelRange.from_config(cfg["temperature"])
                if "temperature" in cfg
                else defaults.temperature
            ),
            humidity=(
                ChannelRange.from_config(cfg["humidity"])
                if "humidity" in cfg
                else defaults.humidity
            ),
            co=ChannelRange.from_config(cfg["co"]) if "co" in cfg else defaults.co,
            stale_after_seconds=float(cfg.get("stale_after_seconds", 300.0)),
        )


@dataclass(frozen=True)
class SensorReading:
    """Last reading record. Fields not read yet are None."""

    temperature: float | None = None
    humidity: float | None = None
    co: float | None = None
    timestamp: datetime | None = None


@dataclass(frozen=True)
class SensorStatus:
    """Health snapshot."""

    is_healthy: bool
    last_reading: datetime | None
    error_count: int


class TemperatureSensor:
    """
    Simulated sensor provider for the climate controller.

    Example:
        >>> sensor = TemperatureSensor(clock)
        >>> sensor.read_temperature()
        23.4
        >>> sensor.inject_fault()
        >>> sensor.read_temperature()
        Traceback (most recent call last):
        ...
        SensorUnavailableError: Temperature sensor unavailable
    """

    def __init__(
        self,
        sim_time: SimulationTime,
        settings: SensorSettings | None = None,
        rng: random.Random | None = None,
    ):
        """Initialise sensor provider.

        Args:
            sim_time: Clock used to timestamp readings
            settings: Channel ranges (uses defaults if None)
            rng: Random source (seed it for reproducible runs)
        """
        self.sim_time = sim_time
        self.settings = settings or SensorSettings()
        self._rng = rng or random.Random()
        self._rng_lock = threading.Lock()

        self._lock = ReadWriteLock()
        self._healthy = True
        self._error_count = 0
        self._last = SensorReading()

    # ----------------------------------------------------------------
    # Reads
    # ----------------------------------------------------------------

    def read_temperature(self) -> float:
        """Read the ambient temperature in Celsius.

        Raises:
            SensorUnavailableError: If the provider is unhealthy
            SensorFaultError: If the reading is outside the physical bound
        """
        value = self._read_channel("temperature", self.settings.temperature)
        self._update_last(temperature=value)
        return value

    def read_humidity(self) -> float:
        """Read relative humidity in percent."""
        value = self._read_channel("humidity", self.settings.humidity)
        self._update_last(humidity=value)
        return value

    def read_co(self) -> float:
        """Read carbon monoxide level in ppm."""
        value = self._read_channel("co", self.settings.co)
        self._update_last(co=value)
        return value

    def read_all(self) -> SensorReading:
        """Read every channel and store the result as one record.

        Nothing is stored if any channel fails.
        """
        temperature = self._read_channel("temperature", self.settings.temperature)
        humidity = self._read_channel("humidity", self.settings.humidity)
        co = self._read_channel("co", self.settings.co)

        reading = SensorReading(
            temperature=temperature,
            humidity=humidity,
            co=co,
            timestamp=self.sim_time.now(),
        )
        with self._lock.write_locked():
            self._last = reading
        return reading

    def _read_channel(self, channel: str, bounds: ChannelRange) -> float:
        with self._lock.read_locked():
            healthy = self._healthy
        if not healthy:
            raise SensorUnavailableError(f"{channel.capitalize()} sensor unavailable")

        with self._rng_lock:
            value = self._rng.uniform(bounds.simulation_low, bounds.simulation_high)
        value = round(value, 2)

        if math.isnan(value) or not bounds.within_physical(value):
            with self._lock.write_locked():
                self._error_count += 1
                error_count = self._error_count
            logger.log_event(
                EventSeverity.WARNING,
                EventCategory.DIAGNOSTIC,
                f"{channel} reading {value} outside physical range "
                f"[{bounds.physical_low}, {bounds.physical_high}] "
                f"(errors={error_count})",
                event_type="sensor_error",
            )
            raise SensorFaultError(f"{channel.capitalize()} reading out of range: {value}")

        return value

    def _update_last(self, **values: float) -> None:
        with self._lock.write_locked():
            self._last = replace(self._last, timestamp=self.sim_time.now(), **values)

    # ----------------------------------------------------------------
    # Health
    # ----------------------------------------------------------------

    def last_reading(self) -> SensorReading:
        with self._lock.read_locked():
            return self._last

    def get_status(self) -> SensorStatus:
        with self._lock.read_locked():
            return SensorStatus(
                is_healthy=self._healthy,
                last_reading=self._last.timestamp,
                error_count=self._error_count,
            )

    def inject_fault(self) -> None:
        """Mark the provider unhealthy; subsequent reads fail."""
        with self._lock.write_locked():
            self._healthy = False
        logger.warning("Sensor fault injected, provider marked unhealthy")

    def reset(self) -> None:
        """Restore health and clear the error counter."""
        with self._lock.write_locked():
            self._healthy = True
            self._error_count = 0
        logger.info("Sensor provider reset")

    def set_temperature_range(self, low: float, high: float | None = None) -> None:
        """Move the temperature simulation range (ambient drift).

        A single value pins the reading, which is how tests and scenarios
        script the room temperature.
        """
        high = low if high is None else high
        bounds = replace(self.settings.temperature, simulation_low=low, simulation_high=high)
        with self._lock.write_locked():
            self.settings = replace(self.settings, temperature=bounds)

    def check_health(self) -> None:
        """Raise if the provider is unhealthy or its data is stale.

        Raises:
            SensorUnavailableError: If the provider is unhealthy
            SensorError: If there is no reading, or it is older than
                stale_after_seconds
        """
        status = self.get_status()
        if not status.is_healthy:
            raise SensorUnavailableError("Sensor system unhealthy")
        if status.last_reading is None:
            raise SensorError("No sensor data yet")

        age = (self.sim_time.now() - status.last_reading).total_seconds()
        if age > self.settings.stale_after_seconds:
            raise SensorError(f"Sensor data stale ({age:.0f}s old)")
