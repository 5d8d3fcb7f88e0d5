# climate/control/settings.py
"""
Controller settings built from the merged YAML configuration.

Energy rates and eco savings are simulation constants, not measured
physics: kWh per hour of runtime per mode, and kWh credited for each
cycle eco mode avoids.
"""

from dataclasses import dataclass, field
from typing import Any

from climate.control.hysteresis import HysteresisPolicy
from climate.exceptions import ConfigurationError
from climate.state.climate_state import HVACMode

HEAT_RATE_KWH_PER_HOUR = 2.5
COOL_RATE_KWH_PER_HOUR = 3.0
FAN_RATE_KWH_PER_HOUR = 0.5

HEAT_ECO_SAVINGS_KWH = 0.15
COOL_ECO_SAVINGS_KWH = 0.18

ENERGY_COST_PER_KWH = 0.12

# Hard setpoint limits; configuration may only narrow them
TARGET_TEMP_FLOOR = 10.0
TARGET_TEMP_CEILING = 35.0


def _default_rates() -> dict[HVACMode, float]:
    return {
        HVACMode.HEAT: HEAT_RATE_KWH_PER_HOUR,
        HVACMode.COOL: COOL_RATE_KWH_PER_HOUR,
        HVACMode.FAN: FAN_RATE_KWH_PER_HOUR,
    }


def _default_eco_savings() -> dict[HVACMode, float]:
    return {
        HVACMode.HEAT: HEAT_ECO_SAVINGS_KWH,
        HVACMode.COOL: COOL_ECO_SAVINGS_KWH,
    }


@dataclass(frozen=True)
class ControllerSettings:
    """Controller parameters.

    Attributes:
        device_name: Name used in log context
        initial_mode: Mode at start-up
        initial_target_temp: Setpoint at start-up
        initial_current_temp: Assumed room temperature before the first reading
        min_target_temp: Lowest accepted setpoint
        max_target_temp: Highest accepted setpoint
        tick_interval_seconds: Control loop period (simulation seconds)
        energy_log_interval_seconds: Minimum gap between periodic flushes
        energy_rates: kWh per hour of runtime, per mode
        eco_savings: kWh credited per avoided cycle, per mode
        energy_cost_per_kwh: Price used by usage reports
        hysteresis: Standard and eco bands
    """

    device_name: str = "thermostat_1"
    initial_mode: HVACMode = HVACMode.OFF
    initial_target_temp: float = 22.0
    initial_current_temp: float = 20.0
    min_target_temp: float = TARGET_TEMP_FLOOR
    max_target_temp: float = TARGET_TEMP_CEILING
    tick_interval_seconds: float = 30.0
    energy_log_interval_seconds: float = 120.0
    energy_rates: dict[HVACMode, float] = field(default_factory=_default_rates)
    eco_savings: dict[HVACMode, float] = field(default_factory=_default_eco_savings)
    energy_cost_per_kwh: float = ENERGY_COST_PER_KWH
    hysteresis: HysteresisPolicy = field(default_factory=HysteresisPolicy.default)

    def __post_init__(self):
        if (
            self.min_target_temp < TARGET_TEMP_FLOOR
            or self.max_target_temp > TARGET_TEMP_CEILING
        ):
            raise ConfigurationError(
                f"Target range [{self.min_target_temp}, {self.max_target_temp}] "
                f"exceeds [{TARGET_TEMP_FLOOR}, {TARGET_TEMP_CEILING}]"
            )
        if self.min_target_temp >= self.max_target_temp:
            raise ConfigurationError(
                f"min_target_temp {self.min_target_temp} must be below "
                f"max_target_temp {self.max_target_temp}"
            )
        if not self.min_target_temp <= self.initial_target_temp <= self.max_target_temp:
            raise ConfigurationError(
                f"initial_target_temp {self.initial_target_temp} outside "
                f"[{self.min_target_temp}, {self.max_target_temp}]"
            )
        if self.tick_interval_seconds <= 0:
            raise ConfigurationError(
                f"tick_interval_seconds must be > 0, got {self.tick_interval_seconds}"
            )
        if self.energy_log_interval_seconds < 0:
            raise ConfigurationError(
                f"energy_log_interval_seconds must be >= 0, got "
                f"{self.energy_log_interval_seconds}"
            )
        for mode, rate in {**self.energy_rates, **self.eco_savings}.items():
            if rate < 0:
                raise ConfigurationError(f"Negative energy constant for {mode.value}: {rate}")

    def rate_for(self, mode: HVACMode) -> float:
        return self.energy_rates.get(mode, 0.0)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ControllerSettings":
        """Build settings from ConfigLoader.load_all() output.

        Raises:
            ConfigurationError: If any value is missing a valid type or range
        """
        cfg = config.get("controller", {})
        try:
            rates = {
                HVACMode.parse(mode): float(rate)
                for mode, rate in cfg.get("energy_rates_kwh_per_hour", {}).items()
            }
            savings = {
                HVACMode.parse(mode): float(kwh)
                for mode, kwh in cfg.get("eco_savings_kwh_per_cycle", {}).items()
            }
            return cls(
                device_name=str(cfg.get("device_name", "thermostat_1")),
                initial_mode=HVACMode.parse(cfg.get("initial_mode", "off")),
                initial_target_temp=float(cfg.get("initial_target_temp", 22.0)),
                initial_current_temp=float(cfg.get("initial_current_temp", 20.0)),
                min_target_temp=float(cfg.get("min_target_temp", TARGET_TEMP_FLOOR)),
                max_target_temp=float(cfg.get("max_target_temp", TARGET_TEMP_CEILING)),
                tick_interval_seconds=float(cfg.get("tick_interval_seconds", 30.0)),
                energy_log_interval_seconds=float(
                    cfg.get("energy_log_interval_seconds", 120.0)
                ),
                energy_rates={**_default_rates(), **rates},
                eco_savings={**_default_eco_savings(), **savings},
                energy_cost_per_kwh=float(
                    cfg.get("energy_cost_per_kwh", ENERGY_COST_PER_KWH)
                ),
                hysteresis=HysteresisPolicy.from_config(cfg.get("hysteresis", {})),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid controller configuration: {e}") from e
