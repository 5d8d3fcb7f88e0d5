import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

# Configure logging
logger = logging.getLogger(__name__)


# ----------------------------------------------------------------
# Time modes
# ----------------------------------------------------------------
class TimeMode(Enum):
    """Simulation time operation modes."""

    REALTIME = "realtime"
    ACCELERATED = "accelerated"
    STEPPED = "stepped"


@dataclass
class TimeState:
    """State container for simulation time tracking."""

    epoch: datetime
    simulation_seconds: float = 0.0
    wall_time_start: float = 0.0
    mode: TimeMode = TimeMode.REALTIME
    speed_multiplier: float = 1.0


# ----------------------------------------------------------------
# Simulation time manager
# ----------------------------------------------------------------
class SimulationTime:
    """Time authority for the climate controller.

    Every timestamp the controller records (run start, energy flushes,
    state changes) comes from here, so tests can drive the controller
    through minutes of simulated runtime without sleeping.

    Unlike a process-wide singleton, each controller is handed its own
    instance.

    Example:
        `>>> clock = SimulationTime(mode=TimeMode.STEPPED)`
        `>>> start = clock.now()`
        `>>> clock.step(130)`
        `>>> (clock.now() - start).total_seconds()`
        `130.0`
    """

    _MAX_SPEED_MULTIPLIER = 1000.0  # Safety limit

    def __init__(
        self,
        mode: TimeMode = TimeMode.REALTIME,
        speed_multiplier: float = 1.0,
        epoch: datetime | None = None,
    ):
        if speed_multiplier <= 0:
            raise ValueError(f"Speed multiplier must be > 0, got {speed_multiplier}")
        if speed_multiplier > self._MAX_SPEED_MULTIPLIER:
            raise ValueError(
                f"Speed multiplier {speed_multiplier} exceeds maximum {self._MAX_SPEED_MULTIPLIER}"
            )

        self._lock = threading.Lock()
        self.state = TimeState(
            epoch=epoch or datetime.now(),
            wall_time_start=time.monotonic(),
            mode=mode,
            speed_multiplier=speed_multiplier if mode is TimeMode.ACCELERATED else 1.0,
        )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "SimulationTime":
        """Build a clock from the merged configuration dictionary."""
        runtime_cfg = config.get("simulation", {}).get("runtime", {})

        if runtime_cfg.get("stepped", False):
            return cls(mode=TimeMode.STEPPED)

        speed = runtime_cfg.get("time_acceleration", 1.0)
        if speed <= 0:
            logger.warning(f"Invalid time_acceleration {speed}, using default 1.0")
            speed = 1.0
        elif speed > cls._MAX_SPEED_MULTIPLIER:
            logger.warning(
                f"time_acceleration {speed} exceeds maximum {cls._MAX_SPEED_MULTIPLIER}, capping"
            )
            speed = cls._MAX_SPEED_MULTIPLIER

        if runtime_cfg.get("realtime", True) or speed == 1.0:
            clock = cls(mode=TimeMode.REALTIME)
        else:
            clock = cls(mode=TimeMode.ACCELERATED, speed_multiplier=speed)

        logger.info(
            f"SimulationTime configured: mode={clock.state.mode.value}, "
            f"speed={clock.state.speed_multiplier}x"
        )
        return clock

    # ----------------------------------------------------------------
    # Time queries
    # ----------------------------------------------------------------
    def now(self) -> datetime:
        """Get current simulation time.

        Returns:
            Current simulation time as a datetime.
        """
        with self._lock:
            if self.state.mode is TimeMode.REALTIME:
                return datetime.now()
            if self.state.mode is TimeMode.ACCELERATED:
                wall_elapsed = time.monotonic() - self.state.wall_time_start
                self.state.simulation_seconds = wall_elapsed * self.state.speed_multiplier
            return self.state.epoch + timedelta(seconds=self.state.simulation_seconds)

    def elapsed(self) -> float:
        """Get total elapsed simulation time in seconds."""
        return (self.now() - self.state.epoch).total_seconds()

    def speed(self) -> float:
        """Get current speed multiplier (1.0 = realtime)."""
        return self.state.speed_multiplier

    @property
    def mode(self) -> TimeMode:
        return self.state.mode

    # ----------------------------------------------------------------
    # Time control
    # ----------------------------------------------------------------
    def step(self, delta_seconds: float) -> datetime:
        """Manually advance simulation time (STEPPED mode).

        Args:
            delta_seconds: Amount of time to advance in seconds

        Returns:
            The new simulation time

        Raises:
            ValueError: If delta_seconds is negative
            RuntimeError: If not in STEPPED mode
        """
        if delta_seconds < 0:
            raise ValueError(f"Cannot step negative time: {delta_seconds}")

        with self._lock:
            if self.state.mode is not TimeMode.STEPPED:
                raise RuntimeError(
                    f"step() only valid in STEPPED mode, "
                    f"current mode is {self.state.mode.value}"
                )
            self.state.simulation_seconds += delta_seconds
            current = self.state.epoch + timedelta(seconds=self.state.simulation_seconds)

        logger.debug(f"SimulationTime stepped by {delta_seconds}s to {current.isoformat()}")
        return current

    def wall_interval(self, simulation_seconds: float) -> float:
        """Convert a simulation-time period into wall-clock seconds to sleep."""
        return simulation_seconds / self.state.speed_multiplier

    # ----------------------------------------------------------------
    # Status
    # ----------------------------------------------------------------
    def get_status(self) -> dict:
        """Get time system status."""
        return {
            "simulation_time": self.now().isoformat(),
            "elapsed_seconds": self.elapsed(),
            "mode": self.state.mode.value,
            "speed_multiplier": self.state.speed_multiplier,
        }
