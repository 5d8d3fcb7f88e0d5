# tests/unit/state/test_energy_ledger.py
"""Unit tests for the in-memory and sqlite energy ledgers.

Both implementations run through the same behaviour tests via a
parametrised fixture.
"""

import sqlite3
import threading
from datetime import datetime, timedelta

import pytest

from climate.exceptions import StorageError
from climate.state.climate_state import HVACMode
from climate.state.energy_ledger import (
    EnergyRecord,
    InMemoryEnergyLedger,
    SQLiteEnergyLedger,
    StateChangeRecord,
)

T0 = datetime(2026, 1, 15, 8, 0, 0)


def _record(minutes_after: int, mode=HVACMode.HEAT, runtime=2, kwh=0.0833) -> EnergyRecord:
    return EnergyRecord(
        mode=mode,
        runtime_minutes=runtime,
        estimated_kwh=kwh,
        timestamp=T0 + timedelta(minutes=minutes_after),
    )


@pytest.fixture(params=["memory", "sqlite"])
def any_ledger(request, tmp_path):
    if request.param == "memory":
        ledger = InMemoryEnergyLedger()
    else:
        ledger = SQLiteEnergyLedger(tmp_path / "data" / "thermostat.db")
    yield ledger
    ledger.close()


class TestEnergyRecord:
    """Test EnergyRecord validation."""

    def test_negative_runtime_rejected(self):
        with pytest.raises(ValueError):
            EnergyRecord(HVACMode.HEAT, -1, 0.0, T0)

    def test_negative_kwh_rejected(self):
        with pytest.raises(ValueError):
            EnergyRecord(HVACMode.HEAT, 1, -0.1, T0)

    def test_to_dict(self):
        data = _record(0, mode=HVACMode.COOL, runtime=2, kwh=0.1).to_dict()

        assert data == {
            "mode": "cool",
            "runtime_minutes": 2,
            "estimated_kwh": 0.1,
            "timestamp": "2026-01-15T08:00:00",
        }


class TestLedgerBehaviour:
    """Behaviour shared by every ledger implementation."""

    def test_empty_ledger(self, any_ledger):
        assert any_ledger.energy_records() == []
        assert any_ledger.state_changes() == []

    def test_append_and_read_back(self, any_ledger):
        record = _record(5, mode=HVACMode.FAN, runtime=10, kwh=0.0833)

        any_ledger.append_energy_record(record)

        assert any_ledger.energy_records() == [record]

    def test_records_returned_oldest_first(self, any_ledger):
        records = [_record(i) for i in (1, 2, 3)]
        for r in records:
            any_ledger.append_energy_record(r)

        assert any_ledger.energy_records() == records

    def test_since_inclusive_until_exclusive(self, any_ledger):
        """Test window bounds.

        WHY: Daily and monthly sums must not double count the boundary.
        """
        for minutes in (0, 10, 20, 30):
            any_ledger.append_energy_record(_record(minutes))

        window = any_ledger.energy_records(
            since=T0 + timedelta(minutes=10), until=T0 + timedelta(minutes=30)
        )

        assert [r.timestamp for r in window] == [
            T0 + timedelta(minutes=10),
            T0 + timedelta(minutes=20),
        ]

    def test_state_changes_limit_keeps_most_recent(self, any_ledger):
        for i in range(5):
            any_ledger.append_state_change(
                StateChangeRecord(
                    mode=HVACMode.HEAT,
                    target_temp=20.0 + i,
                    current_temp=19.0,
                    is_running=False,
                    eco_mode=bool(i % 2),
                    username="alice",
                    timestamp=T0 + timedelta(minutes=i),
                )
            )

        recent = any_ledger.state_changes(limit=2)

        assert [c.target_temp for c in recent] == [23.0, 24.0]
        assert recent[0].eco_mode is True
        assert recent[0].username == "alice"

    def test_state_changes_zero_limit(self, any_ledger):
        assert any_ledger.state_changes(limit=0) == []

    def test_concurrent_appends(self, any_ledger):
        """Test appends from several threads are all stored.

        WHY: Scheduler and foreground callers share one ledger.
        """

        def writer(offset):
            for i in range(25):
                any_ledger.append_energy_record(_record(offset * 100 + i, runtime=1, kwh=0.01))

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(any_ledger.energy_records()) == 100


class TestSQLiteLedger:
    """sqlite-specific behaviour."""

    def test_schema_created(self, tmp_path):
        path = tmp_path / "thermostat.db"
        SQLiteEnergyLedger(path).close()

        conn = sqlite3.connect(path)
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = {row[0] for row in rows}
        conn.close()

        assert {"energy_logs", "hvac_state"} <= tables

    def test_records_survive_reopen(self, tmp_path):
        """Test appends are durable.

        WHY: Energy history must outlive the process.
        """
        path = tmp_path / "thermostat.db"
        ledger = SQLiteEnergyLedger(path)
        ledger.append_energy_record(_record(0, mode=HVACMode.COOL, runtime=2, kwh=0.1))
        ledger.close()

        reopened = SQLiteEnergyLedger(path)
        records = reopened.energy_records()
        reopened.close()

        assert len(records) == 1
        assert records[0].mode is HVACMode.COOL
        assert records[0].estimated_kwh == pytest.approx(0.1)

    def test_append_after_close_raises_storage_error(self, tmp_path):
        ledger = SQLiteEnergyLedger(tmp_path / "thermostat.db")
        ledger.close()

        with pytest.raises(StorageError):
            ledger.append_energy_record(_record(0))

    def test_unopenable_path_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")

        with pytest.raises((StorageError, OSError)):
            SQLiteEnergyLedger(blocker / "thermostat.db")
