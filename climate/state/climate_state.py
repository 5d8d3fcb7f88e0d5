# climate/state/climate_state.py
"""
Shared climate state for the controller.

Holds the single mutable climate record, the current run interval and
the read-only snapshot handed to callers. Locking is done by the owner
(ClimateController); nothing here takes a lock.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from climate.exceptions import InvalidModeError


class HVACMode(str, Enum):
    """Actuator operating modes."""

    OFF = "off"
    HEAT = "heat"
    COOL = "cool"
    FAN = "fan"

    @classmethod
    def parse(cls, value: "HVACMode | str") -> "HVACMode":
        """Coerce a caller-supplied mode, rejecting anything unknown.

        Raises:
            InvalidModeError: If value is not one of off/heat/cool/fan
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidModeError(f"Invalid HVAC mode: {value!r}")


@dataclass
class RunInterval:
    """Timestamps for the current continuous run.

    Attributes:
        start_time: When the current accounting period began (None = not running)
        last_energy_log_time: When accounting last flushed for this run
        mode: Mode the run was started in; its rate prices the interval
    """

    start_time: datetime | None = None
    last_energy_log_time: datetime | None = None
    mode: HVACMode | None = None

    @property
    def active(self) -> bool:
        return self.start_time is not None

    def begin(self, mode: HVACMode, now: datetime) -> None:
        self.start_time = now
        self.last_energy_log_time = None
        self.mode = mode

    def advance(self, minutes: int, now: datetime) -> None:
        """Move the period start past the minutes just accounted.

        The sub-minute remainder stays in the open period.
        """
        self.start_time = self.start_time + timedelta(minutes=minutes)
        self.last_energy_log_time = now

    def clear(self) -> None:
        self.start_time = None
        self.last_energy_log_time = None
        self.mode = None


@dataclass
class ClimateState:
    """Live operating state.

    Attributes:
        mode: Current operating mode
        target_temp: Setpoint in Celsius, always within the configured range
        current_temp: Last temperature reported by the sensor
        is_running: Whether the actuator is energised
        eco_mode: Whether eco hysteresis bands are in effect
        last_update: Time of the most recent mutation
        run: Current run interval
    """

    mode: HVACMode = HVACMode.OFF
    target_temp: float = 22.0
    current_temp: float = 20.0
    is_running: bool = False
    eco_mode: bool = False
    last_update: datetime = field(default_factory=datetime.now)
    run: RunInterval = field(default_factory=RunInterval)

    def snapshot(self) -> "ClimateStatus":
        return ClimateStatus(
            mode=self.mode,
            target_temp=self.target_temp,
            current_temp=self.current_temp,
            # Off de-energises immediately; the pending flush happens on the next tick
            is_running=self.is_running and self.mode is not HVACMode.OFF,
            eco_mode=self.eco_mode,
            last_update=self.last_update,
            run_started_at=self.run.start_time,
        )


@dataclass(frozen=True)
class ClimateStatus:
    """Read-only snapshot returned by ClimateController.get_status()."""

    mode: HVACMode
    target_temp: float
    current_temp: float
    is_running: bool
    eco_mode: bool
    last_update: datetime
    run_started_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "target_temp": self.target_temp,
            "current_temp": self.current_temp,
            "is_running": self.is_running,
            "eco_mode": self.eco_mode,
            "last_update": self.last_update.isoformat(),
            "run_started_at": (
                self.run_started_at.isoformat() if self.run_started_at else None
            ),
        }
