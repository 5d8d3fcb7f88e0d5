# climate/energy/accountant.py
"""
Energy accountant.

Turns elapsed actuator runtime into EnergyRecord rows:

- Final flush, when a run stops (threshold crossed, mode switched to Off,
  mode changed mid-run, or shutdown). Clears the run interval.
- Periodic flush, while a run continues. Fires once the log interval
  (default 2 minutes) has passed since the previous flush, or on the
  first tick with runtime when nothing has been flushed yet. Advances
  the interval start by the minutes billed, so a run that never stops
  produces non-overlapping records and the partial minute carries over.

Runtime truncates to whole minutes. A slice shorter than one minute
records nothing. Over a whole run the billed minutes equal the run
length truncated once, however many periodic flushes occurred.

Must be called with the controller's exclusive lock held: the interval
reset has to be visible before any other thread can read the old start
time.
"""

import math
from datetime import datetime

from climate.control.settings import ControllerSettings
from climate.security.authentication import SYSTEM_USER
from climate.security.logging_system import ClimateLogger, EventCategory, EventSeverity
from climate.state.climate_state import HVACMode, RunInterval
from climate.state.energy_ledger import EnergyLedger, EnergyRecord


def estimate_energy_usage(rate_kwh_per_hour: float, runtime_minutes: int) -> float:
    """kWh for a slice of runtime at a fixed hourly rate."""
    return rate_kwh_per_hour * (runtime_minutes / 60.0)


def whole_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between two times, never negative."""
    seconds = (end - start).total_seconds()
    return max(0, math.floor(seconds / 60.0))


class EnergyAccountant:
    """Writes EnergyRecords for a controller's run intervals."""

    def __init__(
        self,
        ledger: EnergyLedger,
        settings: ControllerSettings,
        logger: ClimateLogger,
    ):
        self.ledger = ledger
        self.settings = settings
        self.logger = logger

    def flush_final(self, run: RunInterval, now: datetime) -> EnergyRecord | None:
        """Account the remainder of a run and clear the interval.

        The interval is cleared even when nothing is recorded, or when
        the ledger append fails, so the same slice is never written twice.

        Raises:
            StorageError: If the ledger append fails
        """
        if not run.active:
            run.clear()
            return None

        start, mode = run.start_time, run.mode
        run.clear()
        return self._record(mode, start, now)

    def flush_periodic(self, run: RunInterval, now: datetime) -> EnergyRecord | None:
        """Account a continuing run if the log interval has elapsed.

        Raises:
            StorageError: If the ledger append fails
        """
        if not run.active:
            return None

        if run.last_energy_log_time is not None:
            since_last = (now - run.last_energy_log_time).total_seconds()
            if since_last < self.settings.energy_log_interval_seconds:
                return None

        if whole_minutes(run.start_time, now) <= 0:
            return None

        record = self._record(run.mode, run.start_time, now)
        run.advance(record.runtime_minutes, now)
        return record

    def _record(
        self, mode: HVACMode | None, start: datetime, now: datetime
    ) -> EnergyRecord | None:
        runtime = whole_minutes(start, now)
        if runtime <= 0 or mode is None:
            return None

        kwh = estimate_energy_usage(self.settings.rate_for(mode), runtime)
        record = EnergyRecord(
            mode=mode,
            runtime_minutes=runtime,
            estimated_kwh=kwh,
            timestamp=now,
        )
        self.ledger.append_energy_record(record)

        self.logger.log_event(
            EventSeverity.INFO,
            EventCategory.ENERGY,
            f"Tracked {kwh:.2f} kWh for {mode.value} mode ({runtime} minutes)",
            event_type="energy_track",
            timestamp=now,
            user=SYSTEM_USER.username,
            data=record.to_dict(),
        )
        return record
