# climate/control/climate_controller.py
"""
Climate control loop.

Owns the live climate state, the current run interval and eco counters,
all behind one reader/writer lock:

- get_status() and eco_stats() take the shared lock
- tick(), set_mode(), set_target_temperature() and set_eco_mode() take
  the exclusive lock for the whole read-modify-write, including any
  ledger writes the tick triggers

State machine (mode x running):

    Off            -> actuator off; a run still open is flushed first
    Heat/Cool idle -> running when the start threshold is crossed
    Heat/Cool run  -> periodic flush; idle when the stop threshold is crossed
    Fan            -> always running while the mode is Fan

Mutators never start or stop a run. The next tick decides.
"""

import math
from dataclasses import replace
from datetime import datetime

from climate.control.eco_mode import EcoModeModulator, EcoStats
from climate.control.settings import ControllerSettings
from climate.energy.accountant import EnergyAccountant
from climate.exceptions import (
    InvalidModeError,
    SensorError,
    TemperatureOutOfRangeError,
    UnauthorizedError,
)
from climate.security.authentication import (
    SYSTEM_USER,
    Authorizer,
    PermissionType,
    User,
    role_has_permission,
)
from climate.security.logging_system import ClimateLogger, EventCategory, EventSeverity
from climate.sensors.temperature_sensor import TemperatureSensor
from climate.state.climate_state import ClimateState, ClimateStatus, HVACMode
from climate.state.energy_ledger import EnergyLedger, EnergyRecord, StateChangeRecord
from climate.state.rwlock import ReadWriteLock
from climate.time.simulation_time import SimulationTime

_ACTION_NAMES = {
    HVACMode.HEAT: "Heating",
    HVACMode.COOL: "Cooling",
    HVACMode.FAN: "Fan",
}


class ClimateController:
    """
    Thermostat control core.

    Example:
        >>> controller = ClimateController(sensor, ledger, clock)
        >>> controller.set_mode("cool", user)
        >>> controller.set_target_temperature(21.0, user)
        >>> controller.tick()  # called by ControlLoopRunner every period
        >>> controller.get_status().is_running
        True
    """

    def __init__(
        self,
        sensor: TemperatureSensor,
        ledger: EnergyLedger,
        sim_time: SimulationTime,
        settings: ControllerSettings | None = None,
        authorize: Authorizer | None = None,
        logger: ClimateLogger | None = None,
    ):
        """Initialise the controller.

        Args:
            sensor: Temperature source read once per tick
            ledger: Durable sink for energy and state-change rows
            sim_time: Clock for every recorded timestamp
            settings: Controller parameters (uses defaults if None)
            authorize: Callback deciding eco-mode permission
                (defaults to the role-permission table)
            logger: Event logger (a per-controller ClimateLogger if None)
        """
        self.sensor = sensor
        self.ledger = ledger
        self.sim_time = sim_time
        self.settings = settings or ControllerSettings()
        self.authorize = authorize or role_has_permission
        self.logger = logger or ClimateLogger(
            f"{__name__}.{self.settings.device_name}",
            device=self.settings.device_name,
            sim_time=sim_time,
        )

        self._lock = ReadWriteLock()
        self._state = ClimateState(
            mode=self.settings.initial_mode,
            target_temp=self.settings.initial_target_temp,
            current_temp=self.settings.initial_current_temp,
            last_update=sim_time.now(),
        )
        self._eco = EcoModeModulator(self.settings.hysteresis, self.settings.eco_savings)
        self.accountant = EnergyAccountant(ledger, self.settings, self.logger)

        self.logger.log_event(
            EventSeverity.INFO,
            EventCategory.SYSTEM,
            "HVAC system initialized",
            event_type="hvac_init",
            user=SYSTEM_USER.username,
        )

    # ----------------------------------------------------------------
    # Queries
    # ----------------------------------------------------------------

    def get_status(self) -> ClimateStatus:
        """Read-only snapshot of the climate state."""
        with self._lock.read_locked():
            return self._state.snapshot()

    def eco_stats(self) -> EcoStats:
        """Eco counters since the last activation."""
        with self._lock.read_locked():
            return self._eco.stats

    # ----------------------------------------------------------------
    # Mutators
    # ----------------------------------------------------------------

    def set_mode(self, mode: HVACMode | str, acting_user: User) -> None:
        """Change the operating mode.

        Raises:
            InvalidModeError: If mode is not off/heat/cool/fan
            StorageError: If the state-change row cannot be written
        """
        try:
            new_mode = HVACMode.parse(mode)
        except InvalidModeError:
            self.logger.log_security(
                f"Invalid HVAC mode attempted: {mode!r}",
                event_type="invalid_mode",
                user=acting_user.username,
            )
            raise

        with self._lock.write_locked():
            now = self.sim_time.now()
            old_mode = self._state.mode
            self._commit(acting_user, now, mode=new_mode)

        self.logger.log_audit(
            f"Mode changed from {old_mode.value} to {new_mode.value}",
            user=acting_user.username,
            event_type="hvac_mode_change",
            result="ALLOWED",
            timestamp=now,
        )

    def set_target_temperature(self, value: float, acting_user: User) -> None:
        """Change the setpoint.

        Raises:
            TemperatureOutOfRangeError: If value is outside the permitted range
            StorageError: If the state-change row cannot be written
        """
        low, high = self.settings.min_target_temp, self.settings.max_target_temp
        try:
            temp = float(value)
        except (TypeError, ValueError):
            temp = math.nan

        if math.isnan(temp) or not low <= temp <= high:
            self.logger.log_security(
                f"Invalid temperature attempted: {value}",
                event_type="invalid_temp",
                user=acting_user.username,
            )
            raise TemperatureOutOfRangeError(
                f"Temperature {value} outside permitted range [{low}, {high}]"
            )

        with self._lock.write_locked():
            now = self.sim_time.now()
            old_temp = self._state.target_temp
            self._commit(acting_user, now, target_temp=temp)

        self.logger.log_audit(
            f"Target temp changed from {old_temp:.1f} to {temp:.1f}",
            user=acting_user.username,
            event_type="hvac_temp_change",
            result="ALLOWED",
            timestamp=now,
        )

    def set_eco_mode(self, enabled: bool, acting_user: User) -> None:
        """Switch eco hysteresis bands on or off.

        Enabling resets the eco counters. Neither direction starts or
        stops a run.

        Raises:
            UnauthorizedError: If the authorisation callback refuses
            StorageError: If the state-change row cannot be written
        """
        enabled = bool(enabled)
        if not self.authorize(acting_user, PermissionType.CONTROL_ECO_MODE):
            self.logger.log_security(
                f"Eco mode change refused for role {acting_user.role.name}",
                event_type="eco_mode_change",
                user=acting_user.username,
                data={"result": "DENIED", "requested": enabled},
            )
            raise UnauthorizedError(
                f"User {acting_user.username} may not change eco mode"
            )

        with self._lock.write_locked():
            now = self.sim_time.now()
            self._commit(acting_user, now, eco_mode=enabled)
            if enabled:
                self._eco.enable(now)
            else:
                self._eco.disable()

        self.logger.log_audit(
            f"Eco mode {'enabled' if enabled else 'disabled'}",
            user=acting_user.username,
            event_type="eco_mode_change",
            result="ALLOWED",
            timestamp=now,
        )

    def _commit(self, acting_user: User, now: datetime, **changes) -> None:
        """Append the state-change row, then apply the change.

        Nothing is mutated if the append fails. Caller holds the write lock.
        """
        updated = replace(self._state, last_update=now, **changes)
        self.ledger.append_state_change(
            StateChangeRecord(
                mode=updated.mode,
                target_temp=updated.target_temp,
                current_temp=updated.current_temp,
                is_running=updated.is_running,
                eco_mode=updated.eco_mode,
                username=acting_user.username,
                timestamp=now,
            )
        )
        for name, value in changes.items():
            setattr(self._state, name, value)
        self._state.last_update = now

    # ----------------------------------------------------------------
    # Control loop
    # ----------------------------------------------------------------

    def tick(self) -> list[EnergyRecord]:
        """Run one control-loop evaluation.

        Returns:
            Energy records written during this tick

        Raises:
            SensorError: If the sensor read fails (state left unchanged)
            StorageError: If an energy record cannot be written
        """
        try:
            current = self.sensor.read_temperature()
        except SensorError as e:
            self.logger.log_event(
                EventSeverity.WARNING,
                EventCategory.DIAGNOSTIC,
                f"HVAC update skipped: {e}",
                event_type="hvac_error",
                user=SYSTEM_USER.username,
            )
            raise

        with self._lock.write_locked():
            now = self.sim_time.now()
            state = self._state
            state.current_temp = current
            records: list[EnergyRecord] = []

            if state.mode is HVACMode.OFF:
                if state.is_running:
                    self._stop_run(now, records, reason="mode off")
            else:
                if state.is_running and state.run.mode is not state.mode:
                    # Mode changed mid-run: close the old run under its own rate
                    self._stop_run(now, records, reason=f"mode changed to {state.mode.value}")
                self._evaluate(now, current, records)

            state.last_update = now
            return records

    def _evaluate(self, now: datetime, current: float, records: list[EnergyRecord]) -> None:
        state = self._state
        band = self._eco.band_for(state.mode)

        if not state.is_running:
            if band.should_start(state.mode, current, state.target_temp):
                state.is_running = True
                state.run.begin(state.mode, now)
                self.logger.log_event(
                    EventSeverity.INFO,
                    EventCategory.PROCESS,
                    f"{_ACTION_NAMES[state.mode]} started",
                    event_type="hvac_start",
                    timestamp=now,
                    user=SYSTEM_USER.username,
                    data={"current_temp": current, "target_temp": state.target_temp},
                )
            return

        if band.should_stop(state.mode, current, state.target_temp):
            mode = state.mode
            # Cycle credit stands even if the final record fails
            saving = self._eco.record_cycle_end(mode)
            self._stop_run(now, records, reason="threshold reached")
            if saving:
                self.logger.log_event(
                    EventSeverity.INFO,
                    EventCategory.ENERGY,
                    f"Eco mode avoided a {mode.value} cycle ({saving:.2f} kWh saved)",
                    event_type="eco_saving",
                    timestamp=now,
                    user=SYSTEM_USER.username,
                )
            return

        record = self.accountant.flush_periodic(state.run, now)
        if record:
            records.append(record)

    def _stop_run(self, now: datetime, records: list[EnergyRecord], reason: str) -> None:
        """Final flush, then de-energise. Caller holds the write lock."""
        state = self._state
        mode = state.run.mode or state.mode
        try:
            record = self.accountant.flush_final(state.run, now)
        finally:
            state.is_running = False

        if record:
            records.append(record)
        self.logger.log_event(
            EventSeverity.INFO,
            EventCategory.PROCESS,
            f"{_ACTION_NAMES.get(mode, 'HVAC')} stopped ({reason})",
            event_type="hvac_stop",
            timestamp=now,
            user=SYSTEM_USER.username,
        )

    # ----------------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------------

    def shutdown(self) -> EnergyRecord | None:
        """Flush any open run before the process exits.

        Leaves the mode untouched; the actuator is marked idle.
        """
        with self._lock.write_locked():
            if not self._state.is_running:
                return None
            now = self.sim_time.now()
            records: list[EnergyRecord] = []
            self._stop_run(now, records, reason="shutdown")
            self._state.last_update = now
            return records[0] if records else None
