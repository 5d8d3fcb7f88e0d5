# climate/energy/usage_report.py
"""
Energy usage queries over the ledger.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from climate.control.settings import ENERGY_COST_PER_KWH
from climate.state.climate_state import HVACMode
from climate.state.energy_ledger import EnergyLedger
from climate.time.simulation_time import SimulationTime


@dataclass(frozen=True)
class EnergyStats:
    """Aggregated energy usage for a period."""

    total_kwh: float = 0.0
    total_runtime_minutes: int = 0
    heating_kwh: float = 0.0
    cooling_kwh: float = 0.0
    fan_kwh: float = 0.0
    estimated_cost: float = 0.0
    period: str = ""


def get_energy_usage(
    ledger: EnergyLedger,
    sim_time: SimulationTime,
    days: int = 7,
    cost_per_kwh: float = ENERGY_COST_PER_KWH,
) -> EnergyStats:
    """Sum energy records from the last ``days`` days (7 if days <= 0)."""
    if days <= 0:
        days = 7
    cutoff = sim_time.now() - timedelta(days=days)

    by_mode = {HVACMode.HEAT: 0.0, HVACMode.COOL: 0.0, HVACMode.FAN: 0.0}
    total_kwh = 0.0
    total_runtime = 0
    for record in ledger.energy_records(since=cutoff):
        total_kwh += record.estimated_kwh
        total_runtime += record.runtime_minutes
        if record.mode in by_mode:
            by_mode[record.mode] += record.estimated_kwh

    return EnergyStats(
        total_kwh=total_kwh,
        total_runtime_minutes=total_runtime,
        heating_kwh=by_mode[HVACMode.HEAT],
        cooling_kwh=by_mode[HVACMode.COOL],
        fan_kwh=by_mode[HVACMode.FAN],
        estimated_cost=total_kwh * cost_per_kwh,
        period=f"Last {days} days",
    )


def _sum_kwh(ledger: EnergyLedger, start: datetime, end: datetime) -> float:
    return sum(r.estimated_kwh for r in ledger.energy_records(since=start, until=end))


def get_daily_energy_usage(ledger: EnergyLedger, day: date) -> float:
    """Total kWh recorded on a calendar day."""
    start = datetime(day.year, day.month, day.day)
    return _sum_kwh(ledger, start, start + timedelta(days=1))


def get_monthly_energy_usage(ledger: EnergyLedger, year: int, month: int) -> float:
    """Total kWh recorded in a calendar month."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1-12, got {month}")
    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return _sum_kwh(ledger, start, end)


def generate_energy_report(stats: EnergyStats) -> str:
    """Render stats as a plain-text report."""
    lines = [
        "=== ENERGY USAGE REPORT ===",
        f"Period: {stats.period}",
        "",
        f"Total Energy Used: {stats.total_kwh:.2f} kWh",
        f"Total Runtime: {stats.total_runtime_minutes} minutes "
        f"({stats.total_runtime_minutes / 60.0:.1f} hours)",
        "",
        "Breakdown by Mode:",
        f"  Heating: {stats.heating_kwh:.2f} kWh",
        f"  Cooling: {stats.cooling_kwh:.2f} kWh",
        f"  Fan: {stats.fan_kwh:.2f} kWh",
        "",
        f"Estimated Cost: ${stats.estimated_cost:.2f}",
    ]
    return "\n".join(lines) + "\n"
