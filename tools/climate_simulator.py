#!/usr/bin/env python3
# tools/climate_simulator.py
"""
Climate Simulator Manager - process entry point.

Wires the controller together from configuration:
- SimulationTime for every timestamp
- TemperatureSensor as the sensor provider
- EnergyLedger (in-memory or sqlite) as the durable sink
- ClimateController with its hysteresis and eco-mode bands
- ControlLoopRunner calling tick() every period

Runs until SIGINT/SIGTERM, then stops the loop, flushes any open run
and closes the ledger.
"""

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import Any

from climate.control.climate_controller import ClimateController
from climate.control.scheduler import ControlLoopRunner
from climate.control.settings import ControllerSettings
from climate.energy.usage_report import generate_energy_report, get_energy_usage
from climate.exceptions import ClimateError, ConfigurationError
from climate.security.logging_system import configure_logging, get_logger
from climate.sensors.temperature_sensor import SensorSettings, TemperatureSensor
from climate.state.energy_ledger import (
    EnergyLedger,
    InMemoryEnergyLedger,
    SQLiteEnergyLedger,
)
from climate.time.simulation_time import SimulationTime
from config.config_loader import ConfigLoader

logger = get_logger(__name__)


def create_ledger(storage_cfg: dict[str, Any]) -> EnergyLedger:
    """Build the ledger named by the storage section.

    Raises:
        ConfigurationError: If the backend is unknown
    """
    backend = storage_cfg.get("backend", "memory")
    if backend == "memory":
        return InMemoryEnergyLedger()
    if backend == "sqlite":
        return SQLiteEnergyLedger(storage_cfg.get("database_path", "thermostat.db"))
    raise ConfigurationError(f"Unknown storage backend: {backend}")


class ClimateSimulatorManager:
    """
    Main orchestrator for the climate controller simulation.

    Example:
        >>> manager = ClimateSimulatorManager(config_dir="config")
        >>> manager.initialise()
        >>> manager.start()
        >>> # Control loop runs...
        >>> manager.stop()
    """

    def __init__(self, config_dir: str = "config", log_dir: str | None = None):
        """Initialise simulator manager.

        Args:
            config_dir: Directory containing configuration files
            log_dir: Directory for JSON log files (None = console only)
        """
        self.config_dir = Path(config_dir)
        self.log_dir = Path(log_dir) if log_dir else None

        self.config: dict[str, Any] = {}
        self.sim_time: SimulationTime | None = None
        self.sensor: TemperatureSensor | None = None
        self.ledger: EnergyLedger | None = None
        self.controller: ClimateController | None = None
        self.runner: ControlLoopRunner | None = None

        self._initialised = False
        self._running = False
        self._shutdown_event = threading.Event()

    # ----------------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------------

    def initialise(self) -> None:
        """Load configuration and build every component.

        Raises:
            ConfigurationError: If configuration is invalid
            StorageError: If the ledger cannot be opened
        """
        if self._initialised:
            logger.warning("Simulator already initialised")
            return

        self.config = ConfigLoader(str(self.config_dir)).load_all()

        logging_cfg = self.config.get("logging", {})
        configure_logging(
            log_dir=self.log_dir or logging_cfg.get("log_dir"),
            level=logging_cfg.get("level", "INFO"),
        )

        self.sim_time = SimulationTime.from_config(self.config)
        settings = ControllerSettings.from_config(self.config)
        self.sensor = TemperatureSensor(
            self.sim_time, SensorSettings.from_config(self.config)
        )
        self.ledger = create_ledger(self.config.get("storage", {}))
        self.controller = ClimateController(
            self.sensor, self.ledger, self.sim_time, settings=settings
        )
        self.runner = ControlLoopRunner(self.controller)

        self._initialised = True
        logger.info(
            f"Initialised {settings.device_name}: mode={settings.initial_mode.value}, "
            f"target={settings.initial_target_temp}, "
            f"storage={self.config['storage']['backend']}"
        )

    def start(self) -> None:
        """Start the control loop.

        Raises:
            RuntimeError: If not initialised
        """
        if not self._initialised:
            raise RuntimeError("Cannot start: simulator not initialised")
        if self._running:
            logger.warning("Simulator already running")
            return

        logger.info("=== Starting Climate Controller ===")
        self.runner.start()
        self._running = True

    def stop(self) -> None:
        """Stop the loop, flush any open run and close the ledger."""
        if not self._running:
            logger.warning("Simulator not running")
            return

        logger.info("=== Stopping Climate Controller ===")
        self._running = False

        self.runner.stop()
        try:
            self.controller.shutdown()
        except ClimateError as e:
            logger.error(f"Final energy flush failed: {e}")

        self._log_final_statistics()
        self.ledger.close()
        logger.info("Climate controller stopped")

    def get_status(self) -> dict[str, Any]:
        """Controller, sensor and loop status."""
        if not self._initialised:
            return {"initialised": False}

        sensor_status = self.sensor.get_status()
        return {
            "initialised": True,
            "running": self._running,
            "time": self.sim_time.get_status(),
            "climate": self.controller.get_status().to_dict(),
            "sensor": {
                "is_healthy": sensor_status.is_healthy,
                "error_count": sensor_status.error_count,
            },
            "ticks": self.runner.tick_count,
        }

    def _log_final_statistics(self) -> None:
        stats = get_energy_usage(
            self.ledger,
            self.sim_time,
            cost_per_kwh=self.controller.settings.energy_cost_per_kwh,
        )
        logger.info(
            f"Ticks: {self.runner.tick_count} "
            f"(sensor failures={self.runner.sensor_failures}, "
            f"storage failures={self.runner.storage_failures})"
        )
        for line in generate_energy_report(stats).splitlines():
            logger.info(line)

    # ----------------------------------------------------------------
    # Signal handling
    # ----------------------------------------------------------------

    def setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""

        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}")
            self._shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        logger.info("Signal handlers configured")

    def request_shutdown(self) -> None:
        self._shutdown_event.set()

    def wait_for_shutdown(self) -> None:
        """Block until a shutdown signal arrives."""
        while not self._shutdown_event.wait(0.5):
            pass

    # ----------------------------------------------------------------
    # Main run method
    # ----------------------------------------------------------------

    def run(self) -> int:
        """Run the complete lifecycle until interrupted.

        Returns:
            Process exit code
        """
        exit_code = 0
        try:
            self.setup_signal_handlers()
            self.initialise()
            self.start()

            logger.info("Climate controller running. Press Ctrl+C to stop.")
            self.wait_for_shutdown()

        except KeyboardInterrupt:
            logger.info("KeyboardInterrupt received")
        except ClimateError as e:
            logger.error(f"Fatal error: {e}")
            exit_code = 1
        finally:
            if self._running:
                self.stop()

        return exit_code


# ----------------------------------------------------------------
# Command-line interface
# ----------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Home climate controller simulator")
    parser.add_argument(
        "--config-dir",
        default="config",
        help="Directory containing YAML configuration (default: config)",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for rotating JSON logs (default: from logging.yml)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logger.info("=== Home Climate Controller ===")

    manager = ClimateSimulatorManager(config_dir=args.config_dir, log_dir=args.log_dir)
    return manager.run()


if __name__ == "__main__":
    sys.exit(main())
