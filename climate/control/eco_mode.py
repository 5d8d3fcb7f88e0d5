# climate/control/eco_mode.py
"""
Eco-mode modulator.

Switches the control loop between standard and eco hysteresis bands and
tallies estimated savings. Savings are fixed per-cycle credits, not
measured: there is no real actuator to meter.

Callers must hold the controller's exclusive lock for every mutating
call; this class does no locking of its own.
"""

from dataclasses import dataclass, replace
from datetime import datetime

from climate.control.hysteresis import HysteresisBand, HysteresisPolicy
from climate.state.climate_state import HVACMode


@dataclass(frozen=True)
class EcoStats:
    """Eco-mode counters since the last activation.

    Attributes:
        energy_saved_kwh: Cumulative estimated saving
        cycles_avoided: Heat/cool cycles credited as avoided
        activated_at: When eco mode was last enabled (None = never)
    """

    energy_saved_kwh: float = 0.0
    cycles_avoided: int = 0
    activated_at: datetime | None = None


class EcoModeModulator:
    """Chooses hysteresis bands and accounts eco savings."""

    def __init__(self, policy: HysteresisPolicy, savings_per_cycle: dict[HVACMode, float]):
        self.policy = policy
        self.savings_per_cycle = dict(savings_per_cycle)
        self.enabled = False
        self._stats = EcoStats()

    def enable(self, now: datetime) -> None:
        """Turn eco mode on; counters restart from zero."""
        self.enabled = True
        self._stats = EcoStats(activated_at=now)

    def disable(self) -> None:
        """Turn eco mode off; the last totals stay readable."""
        self.enabled = False

    def band_for(self, mode: HVACMode) -> HysteresisBand:
        return self.policy.band_for(mode, self.enabled)

    def record_cycle_end(self, mode: HVACMode) -> float:
        """Credit a completed heat/cool cycle while eco mode is on.

        Returns:
            kWh credited (0.0 when eco mode is off or mode has no credit)
        """
        saving = self.savings_per_cycle.get(mode, 0.0)
        if not self.enabled or saving <= 0:
            return 0.0

        self._stats = replace(
            self._stats,
            energy_saved_kwh=self._stats.energy_saved_kwh + saving,
            cycles_avoided=self._stats.cycles_avoided + 1,
        )
        return saving

    @property
    def stats(self) -> EcoStats:
        return self._stats
