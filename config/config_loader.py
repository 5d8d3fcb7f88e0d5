# config/config_loader.py
"""
Config loader module for modular YAML configuration.
"""

from pathlib import Path

import yaml

DEFAULT_CONTROLLER = {
    "device_name": "thermostat_1",
    "initial_mode": "off",
    "initial_target_temp": 22.0,
    "initial_current_temp": 20.0,
    "min_target_temp": 10.0,
    "max_target_temp": 35.0,
    "tick_interval_seconds": 30.0,
    "energy_log_interval_seconds": 120.0,
    "energy_rates_kwh_per_hour": {"heat": 2.5, "cool": 3.0, "fan": 0.5},
    "eco_savings_kwh_per_cycle": {"heat": 0.15, "cool": 0.18},
    "energy_cost_per_kwh": 0.12,
    "hysteresis": {
        "standard": {
            "heat": {"start_offset": 1.0, "stop_offset": 0.5},
            "cool": {"start_offset": 1.0, "stop_offset": 0.5},
        },
        "eco": {
            "heat": {"start_offset": 2.0, "stop_offset": 1.0},
            "cool": {"start_offset": 2.0, "stop_offset": 1.0},
        },
    },
}

DEFAULT_SENSORS = {
    "temperature": {"simulation_range": [18.0, 28.0], "physical_range": [-40.0, 85.0]},
    "humidity": {"simulation_range": [30.0, 60.0], "physical_range": [0.0, 100.0]},
    "co": {"simulation_range": [0.0, 5.0], "physical_range": [0.0, 1000.0]},
    "stale_after_seconds": 300.0,
}


class ConfigLoader:
    """Loads and merges modular configuration files."""

    def __init__(self, config_dir="config"):
        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load_all(self):
        """Load all configuration files and merge them."""
        config = {}

        # Load controller config
        controller_path = self.config_dir / "controller.yml"
        if controller_path.exists():
            with open(controller_path) as f:
                controller_data = yaml.safe_load(f) or {}
                config["controller"] = _merge(
                    DEFAULT_CONTROLLER, controller_data.get("controller", {})
                )
        else:
            config["controller"] = _merge(DEFAULT_CONTROLLER, {})
            self._save_controller(config["controller"])

        # Load sensors config
        sensors_path = self.config_dir / "sensors.yml"
        if sensors_path.exists():
            with open(sensors_path) as f:
                sensors_data = yaml.safe_load(f) or {}
                config["sensors"] = _merge(
                    DEFAULT_SENSORS, sensors_data.get("sensors", {})
                )
        else:
            config["sensors"] = _merge(DEFAULT_SENSORS, {})

        # Load storage config
        storage_path = self.config_dir / "storage.yml"
        if storage_path.exists():
            with open(storage_path) as f:
                storage_data = yaml.safe_load(f) or {}
                storage = storage_data.get("storage", {})
                config["storage"] = {
                    "backend": storage.get("backend", "memory"),
                    "database_path": storage.get("database_path", "thermostat.db"),
                }
        else:
            config["storage"] = {
                "backend": "memory",
                "database_path": "thermostat.db",
            }

        # Load simulation config
        simulation_path = self.config_dir / "simulation.yml"
        if simulation_path.exists():
            with open(simulation_path) as f:
                simulation_data = yaml.safe_load(f) or {}
                config["simulation"] = simulation_data.get("simulation", {})
        else:
            config["simulation"] = {}

        # Load logging config
        logging_path = self.config_dir / "logging.yml"
        if logging_path.exists():
            with open(logging_path) as f:
                logging_data = yaml.safe_load(f) or {}
                config["logging"] = {
                    "level": logging_data.get("level", "INFO"),
                    "log_dir": logging_data.get("log_dir", "logs"),
                }
        else:
            config["logging"] = {
                "level": "INFO",
                "log_dir": "logs",
            }

        return config

    def _save_controller(self, controller):
        """Save controller configuration to file."""
        controller_path = self.config_dir / "controller.yml"
        with open(controller_path, "w") as f:
            yaml.dump({"controller": controller}, f, default_flow_style=False)
        print(f"[INFO] Created default controller config at {controller_path}")


def _merge(defaults, overrides):
    """Recursively overlay overrides onto a copy of defaults."""
    merged = {}
    for key, value in defaults.items():
        if isinstance(value, dict):
            merged[key] = _merge(value, (overrides or {}).get(key) or {})
        elif isinstance(value, list):
            merged[key] = list((overrides or {}).get(key, value))
        else:
            merged[key] = (overrides or {}).get(key, value)
    for key, value in (overrides or {}).items():
        if key not in merged:
            merged[key] = value
    return merged
