# climate/state/energy_ledger.py
"""
Durable-append sink for energy accounting and state-change rows.

The controller only ever appends; retention and reporting are handled
by readers of the ledger (see climate.energy.usage_report).

Two implementations:
- InMemoryEnergyLedger: list-backed, used by tests and short simulations
- SQLiteEnergyLedger: sqlite3 file with the energy_logs / hvac_state schema
"""

from __future__ import annotations

import sqlite3
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from climate.exceptions import StorageError
from climate.security.logging_system import get_logger
from climate.state.climate_state import HVACMode

logger = get_logger(__name__)


@dataclass(frozen=True)
class EnergyRecord:
    """One accounted slice of actuator runtime.

    Attributes:
        mode: Mode whose rate priced the slice
        runtime_minutes: Whole minutes of runtime (>= 0)
        estimated_kwh: Derived energy estimate (>= 0)
        timestamp: When the slice was flushed
    """

    mode: HVACMode
    runtime_minutes: int
    estimated_kwh: float
    timestamp: datetime

    def __post_init__(self):
        if self.runtime_minutes < 0:
            raise ValueError(f"runtime_minutes must be >= 0, got {self.runtime_minutes}")
        if self.estimated_kwh < 0:
            raise ValueError(f"estimated_kwh must be >= 0, got {self.estimated_kwh}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "runtime_minutes": self.runtime_minutes,
            "estimated_kwh": self.estimated_kwh,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class StateChangeRecord:
    """Row appended on every accepted mode/setpoint/eco change."""

    mode: HVACMode
    target_temp: float
    current_temp: float
    is_running: bool
    eco_mode: bool
    username: str
    timestamp: datetime


class EnergyLedger(ABC):
    """Append-only store for EnergyRecord and StateChangeRecord rows.

    Implementations must be safe to call from several threads and must
    raise StorageError when an append cannot be made durable.
    """

    @abstractmethod
    def append_energy_record(self, record: EnergyRecord) -> None:
        """Persist one energy record."""

    @abstractmethod
    def append_state_change(self, record: StateChangeRecord) -> None:
        """Persist one state-change row."""

    @abstractmethod
    def energy_records(
        self, since: datetime | None = None, until: datetime | None = None
    ) -> list[EnergyRecord]:
        """Return energy records with since <= timestamp < until, oldest first."""

    @abstractmethod
    def state_changes(self, limit: int = 100) -> list[StateChangeRecord]:
        """Return the most recent state-change rows, oldest first."""

    def close(self) -> None:
        """Release any underlying resources."""


class InMemoryEnergyLedger(EnergyLedger):
    """List-backed ledger."""

    def __init__(self):
        self._lock = threading.Lock()
        self._energy: list[EnergyRecord] = []
        self._changes: list[StateChangeRecord] = []

    def append_energy_record(self, record: EnergyRecord) -> None:
        with self._lock:
            self._energy.append(record)

    def append_state_change(self, record: StateChangeRecord) -> None:
        with self._lock:
            self._changes.append(record)

    def energy_records(
        self, since: datetime | None = None, until: datetime | None = None
    ) -> list[EnergyRecord]:
        with self._lock:
            records = list(self._energy)
        return [
            r
            for r in records
            if (since is None or r.timestamp >= since)
            and (until is None or r.timestamp < until)
        ]

    def state_changes(self, limit: int = 100) -> list[StateChangeRecord]:
        with self._lock:
            return list(self._changes[-limit:]) if limit > 0 else []


class SQLiteEnergyLedger(EnergyLedger):
    """sqlite3-backed ledger.

    One connection shared across threads, serialised by a lock.

    Example:
        >>> ledger = SQLiteEnergyLedger("thermostat.db")
        >>> ledger.append_energy_record(record)
        >>> ledger.close()
    """

    _SCHEMA = (
        """CREATE TABLE IF NOT EXISTS energy_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            timestamp TEXT NOT NULL,
            hvac_mode TEXT NOT NULL,
            runtime_minutes INTEGER NOT NULL CHECK(runtime_minutes >= 0),
            estimated_kwh REAL NOT NULL CHECK(estimated_kwh >= 0)
        )""",
        """CREATE TABLE IF NOT EXISTS hvac_state (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            timestamp TEXT NOT NULL,
            mode TEXT NOT NULL,
            target_temp REAL,
            current_temp REAL,
            is_running INTEGER DEFAULT 0,
            eco_mode INTEGER DEFAULT 0,
            username TEXT
        )""",
        "CREATE INDEX IF NOT EXISTS idx_energy_timestamp ON energy_logs(timestamp)",
    )

    def __init__(self, database_path: str | Path):
        self.database_path = str(database_path)
        if self.database_path != ":memory:":
            Path(self.database_path).parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(
                self.database_path, isolation_level=None, check_same_thread=False
            )
            for statement in self._SCHEMA:
                self._conn.execute(statement)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to open ledger {self.database_path}: {e}") from e

        logger.info(f"Energy ledger opened: {self.database_path}")

    def _execute(self, sql: str, params: tuple = ()) -> list[tuple]:
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise StorageError(f"Ledger query failed: {e}") from e

    def append_energy_record(self, record: EnergyRecord) -> None:
        self._execute(
            "INSERT INTO energy_logs (timestamp, hvac_mode, runtime_minutes, estimated_kwh) "
            "VALUES (?, ?, ?, ?)",
            (
                record.timestamp.isoformat(),
                record.mode.value,
                record.runtime_minutes,
                record.estimated_kwh,
            ),
        )

    def append_state_change(self, record: StateChangeRecord) -> None:
        self._execute(
            "INSERT INTO hvac_state "
            "(timestamp, mode, target_temp, current_temp, is_running, eco_mode, username) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                record.timestamp.isoformat(),
                record.mode.value,
                record.target_temp,
                record.current_temp,
                int(record.is_running),
                int(record.eco_mode),
                record.username,
            ),
        )

    def energy_records(
        self, since: datetime | None = None, until: datetime | None = None
    ) -> list[EnergyRecord]:
        sql = "SELECT hvac_mode, runtime_minutes, estimated_kwh, timestamp FROM energy_logs"
        clauses, params = [], []
        if since is not None:
            clauses.append("timestamp >= ?")
            params.append(since.isoformat())
        if until is not None:
            clauses.append("timestamp < ?")
            params.append(until.isoformat())
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY id"

        return [
            EnergyRecord(
                mode=HVACMode(mode),
                runtime_minutes=runtime,
                estimated_kwh=kwh,
                timestamp=datetime.fromisoformat(ts),
            )
            for mode, runtime, kwh, ts in self._execute(sql, tuple(params))
        ]

    def state_changes(self, limit: int = 100) -> list[StateChangeRecord]:
        if limit <= 0:
            return []
        rows = self._execute(
            "SELECT mode, target_temp, current_temp, is_running, eco_mode, username, timestamp "
            "FROM hvac_state ORDER BY id DESC LIMIT ?",
            (limit,),
        )
        return [
            StateChangeRecord(
                mode=HVACMode(mode),
                target_temp=target,
                current_temp=current,
                is_running=bool(running),
                eco_mode=bool(eco),
                username=username or "",
                timestamp=datetime.fromisoformat(ts),
            )
            for mode, target, current, running, eco, username, ts in reversed(rows)
        ]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
        logger.info(f"Energy ledger closed: {self.database_path}")
