# climate/control/scheduler.py
"""
Background timer driving the control loop.

One daemon thread calls ClimateController.tick() every tick interval.
A failed tick never stops the loop: sensor errors are logged as warnings
and retried on the next period, storage errors are logged as errors.
"""

import threading

from climate.control.climate_controller import ClimateController
from climate.exceptions import SensorError, StorageError
from climate.security.logging_system import get_logger

logger = get_logger(__name__)


class ControlLoopRunner:
    """Runs a controller's tick() on a fixed period.

    The period is in simulation seconds; with an accelerated clock the
    thread sleeps proportionally less wall time.

    Example:
        >>> runner = ControlLoopRunner(controller)
        >>> runner.start()
        >>> ...
        >>> runner.stop()
    """

    def __init__(self, controller: ClimateController, interval_seconds: float | None = None):
        if interval_seconds is None:
            interval_seconds = controller.settings.tick_interval_seconds
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")

        self.controller = controller
        self.interval_seconds = interval_seconds

        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._stats_lock = threading.Lock()
        self.tick_count = 0
        self.sensor_failures = 0
        self.storage_failures = 0

    # ------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            logger.warning("Control loop already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="climate-control-loop", daemon=True
        )
        self._thread.start()
        logger.info(f"Control loop started (every {self.interval_seconds}s)")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the loop and wait for an in-flight tick to finish."""
        if self._thread is None:
            return

        self._stop_event.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.error(f"Control loop did not stop within {timeout}s")
                return

        self._thread = None
        logger.info(f"Control loop stopped after {self.tick_count} ticks")

    # ------------------------------------------------------------
    # loop
    # ------------------------------------------------------------

    def _run(self) -> None:
        wait = self.controller.sim_time.wall_interval(self.interval_seconds)
        while not self._stop_event.wait(wait):
            self.run_once()

    def run_once(self) -> bool:
        """Run a single tick, absorbing recoverable errors.

        Returns:
            True if the tick completed
        """
        with self._stats_lock:
            self.tick_count += 1
        try:
            self.controller.tick()
            return True
        except SensorError as e:
            with self._stats_lock:
                self.sensor_failures += 1
            logger.warning(f"HVAC update failed: {e}")
        except StorageError as e:
            with self._stats_lock:
                self.storage_failures += 1
            logger.error(f"Energy accounting failed: {e}")
        return False
