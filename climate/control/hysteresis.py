# climate/control/hysteresis.py
"""
Hysteresis bands for the control loop.

Heat starts below target - start_offset and stops above
target + stop_offset. Cool mirrors that. Fan has no band: it runs for as
long as the mode is Fan.

Default offsets (Celsius):

    mode   standard start/stop   eco start/stop
    heat   1.0 / 0.5             2.0 / 1.0
    cool   1.0 / 0.5             2.0 / 1.0

The stop offset is half the start offset in both rows. Kept as found.
"""

from dataclasses import dataclass
from typing import Any

from climate.exceptions import ConfigurationError
from climate.state.climate_state import HVACMode


@dataclass(frozen=True)
class HysteresisBand:
    """Start/stop margins around the target temperature."""

    start_offset: float
    stop_offset: float

    def __post_init__(self):
        if self.start_offset < 0 or self.stop_offset < 0:
            raise ConfigurationError(
                f"Hysteresis offsets must be >= 0, got "
                f"start={self.start_offset} stop={self.stop_offset}"
            )

    def should_start(self, mode: HVACMode, current: float, target: float) -> bool:
        if mode is HVACMode.HEAT:
            return current < target - self.start_offset
        if mode is HVACMode.COOL:
            return current > target + self.start_offset
        return mode is HVACMode.FAN

    def should_stop(self, mode: HVACMode, current: float, target: float) -> bool:
        if mode is HVACMode.HEAT:
            return current > target + self.stop_offset
        if mode is HVACMode.COOL:
            return current < target - self.stop_offset
        return mode is HVACMode.OFF


@dataclass(frozen=True)
class HysteresisPolicy:
    """Standard and eco bands per thermal mode."""

    standard: dict[HVACMode, HysteresisBand]
    eco: dict[HVACMode, HysteresisBand]

    _FAN_BAND = HysteresisBand(start_offset=0.0, stop_offset=0.0)

    def band_for(self, mode: HVACMode, eco_mode: bool) -> HysteresisBand:
        """Band the control loop consults for this mode."""
        table = self.eco if eco_mode else self.standard
        return table.get(mode, self._FAN_BAND)

    @classmethod
    def default(cls) -> "HysteresisPolicy":
        return cls(
            standard={
                HVACMode.HEAT: HysteresisBand(1.0, 0.5),
                HVACMode.COOL: HysteresisBand(1.0, 0.5),
            },
            eco={
                HVACMode.HEAT: HysteresisBand(2.0, 1.0),
                HVACMode.COOL: HysteresisBand(2.0, 1.0),
            },
        )

    @classmethod
    def from_config(cls, hysteresis_cfg: dict[str, Any]) -> "HysteresisPolicy":
        """Build from the controller.yml ``hysteresis`` section."""
        default = cls.default()
        tables = {}
        for row in ("standard", "eco"):
            row_cfg = hysteresis_cfg.get(row, {})
            table = {}
            for mode in (HVACMode.HEAT, HVACMode.COOL):
                fallback = getattr(default, row)[mode]
                mode_cfg = row_cfg.get(mode.value, {})
                table[mode] = HysteresisBand(
                    start_offset=float(mode_cfg.get("start_offset", fallback.start_offset)),
                    stop_offset=float(mode_cfg.get("stop_offset", fallback.stop_offset)),
                )
            tables[row] = table
        return cls(standard=tables["standard"], eco=tables["eco"])
