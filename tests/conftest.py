# tests/conftest.py
"""Shared pytest fixtures for climate controller tests.

This file provides common fixtures used across all test modules,
following the bottom-up testing strategy where foundation components
are tested with real dependencies wherever possible.
"""

import random
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import Generator

import pytest
import yaml

from climate.control.climate_controller import ClimateController
from climate.control.settings import ControllerSettings
from climate.security.authentication import User, UserRole
from climate.security.logging_system import ClimateLogger
from climate.sensors.temperature_sensor import TemperatureSensor
from climate.state.energy_ledger import InMemoryEnergyLedger
from climate.time.simulation_time import SimulationTime, TimeMode

# Fixed epoch so recorded timestamps are predictable
TEST_EPOCH = datetime(2026, 1, 15, 8, 0, 0)


# ----------------------------------------------------------------
# Configuration fixtures
# ----------------------------------------------------------------
@pytest.fixture
def temp_config_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test configuration files.

    Yields:
        Path to temporary configuration directory
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir)
        yield config_path


@pytest.fixture
def write_config_file(temp_config_dir):
    """Factory fixture for writing YAML configuration files.

    Args:
        temp_config_dir: Temporary directory for config files

    Returns:
        Function that writes config dict to YAML file
    """

    def _write_config(config: dict, filename: str = "controller.yml") -> Path:
        """Write configuration to YAML file.

        Args:
            config: Configuration dictionary
            filename: Name of the config file

        Returns:
            Path to written configuration file
        """
        config_file = temp_config_dir / filename
        with open(config_file, "w") as f:
            yaml.dump(config, f)
        return config_file

    return _write_config


# ----------------------------------------------------------------
# Time fixtures
# ----------------------------------------------------------------
@pytest.fixture
def clock() -> SimulationTime:
    """Stepped clock starting at TEST_EPOCH.

    Time only moves when the test calls clock.step().
    """
    return SimulationTime(mode=TimeMode.STEPPED, epoch=TEST_EPOCH)


# ----------------------------------------------------------------
# Component fixtures (real components, NO MOCKING)
# ----------------------------------------------------------------
@pytest.fixture
def sensor(clock) -> TemperatureSensor:
    """Sensor pinned to 22.0 C; tests move it with set_temperature_range()."""
    provider = TemperatureSensor(clock, rng=random.Random(42))
    provider.set_temperature_range(22.0)
    return provider


@pytest.fixture
def ledger() -> InMemoryEnergyLedger:
    return InMemoryEnergyLedger()


@pytest.fixture
def quiet_logger(clock) -> ClimateLogger:
    """Controller logger with no console output, audit trail kept."""
    return ClimateLogger(
        "tests.climate", device="test_thermostat", enable_console=False, sim_time=clock
    )


@pytest.fixture
def homeowner() -> User:
    return User(username="alice", role=UserRole.HOMEOWNER)


@pytest.fixture
def guest() -> User:
    return User(username="visitor", role=UserRole.GUEST)


@pytest.fixture
def technician() -> User:
    return User(username="tech", role=UserRole.TECHNICIAN)


@pytest.fixture
def make_controller(sensor, ledger, clock, quiet_logger):
    """Factory fixture for controllers sharing the test clock, sensor and ledger.

    Returns:
        Function accepting optional settings/authorize/ledger overrides
    """

    def _create(settings: ControllerSettings | None = None, **kwargs) -> ClimateController:
        kwargs.setdefault("logger", quiet_logger)
        return ClimateController(
            sensor,
            kwargs.pop("ledger", ledger),
            clock,
            settings=settings,
            **kwargs,
        )

    return _create


@pytest.fixture
def controller(make_controller) -> ClimateController:
    """Controller with default settings (Off, target 22.0)."""
    return make_controller()


# ----------------------------------------------------------------
# Thread utilities
# ----------------------------------------------------------------
@pytest.fixture
def wait_for_condition():
    """Provide utility for waiting on conditions set by other threads.

    Returns:
        Function that polls a condition until true or timeout
    """

    def _wait(
        condition_fn,
        timeout: float = 2.0,
        poll_interval: float = 0.01,
        error_msg: str = "Condition not met within timeout",
    ):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if condition_fn():
                return
            time.sleep(poll_interval)
        raise AssertionError(error_msg)

    return _wait
