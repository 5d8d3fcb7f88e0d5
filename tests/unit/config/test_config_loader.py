# tests/unit/config/test_config_loader.py
import yaml

from config.config_loader import DEFAULT_CONTROLLER, DEFAULT_SENSORS, ConfigLoader


def test_missing_controller_file_writes_default(tmp_path):
    loader = ConfigLoader(config_dir=tmp_path)
    config = loader.load_all()

    controller_path = tmp_path / "controller.yml"
    assert controller_path.exists()

    with open(controller_path) as f:
        data = yaml.safe_load(f)
    assert data["controller"] == DEFAULT_CONTROLLER
    assert config["controller"] == DEFAULT_CONTROLLER


def test_defaults_for_missing_files(tmp_path):
    config = ConfigLoader(config_dir=tmp_path).load_all()

    assert config["sensors"] == DEFAULT_SENSORS
    assert config["storage"] == {"backend": "memory", "database_path": "thermostat.db"}
    assert config["simulation"] == {}
    assert config["logging"] == {"level": "INFO", "log_dir": "logs"}


def test_controller_overrides_merged(temp_config_dir, write_config_file):
    write_config_file(
        {
            "controller": {
                "initial_mode": "heat",
                "energy_rates_kwh_per_hour": {"heat": 3.0},
                "hysteresis": {"eco": {"cool": {"start_offset": 2.5}}},
            }
        }
    )

    controller = ConfigLoader(config_dir=temp_config_dir).load_all()["controller"]

    assert controller["initial_mode"] == "heat"
    assert controller["initial_target_temp"] == 22.0
    assert controller["energy_rates_kwh_per_hour"] == {"heat": 3.0, "cool": 3.0, "fan": 0.5}
    assert controller["hysteresis"]["eco"]["cool"] == {"start_offset": 2.5, "stop_offset": 1.0}
    assert controller["hysteresis"]["standard"]["heat"]["start_offset"] == 1.0


def test_existing_controller_file_not_overwritten(temp_config_dir, write_config_file):
    path = write_config_file({"controller": {"device_name": "hallway"}})
    before = path.read_text()

    ConfigLoader(config_dir=temp_config_dir).load_all()

    assert path.read_text() == before


def test_sensor_ranges_loaded(temp_config_dir, write_config_file):
    write_config_file(
        {"sensors": {"temperature": {"simulation_range": [16.0, 24.0]}}},
        filename="sensors.yml",
    )

    sensors = ConfigLoader(config_dir=temp_config_dir).load_all()["sensors"]

    assert sensors["temperature"]["simulation_range"] == [16.0, 24.0]
    assert sensors["temperature"]["physical_range"] == [-40.0, 85.0]
    assert sensors["co"] == DEFAULT_SENSORS["co"]


def test_storage_and_simulation_loaded(temp_config_dir, write_config_file):
    write_config_file(
        {"storage": {"backend": "sqlite", "database_path": "/var/lib/thermostat.db"}},
        filename="storage.yml",
    )
    write_config_file(
        {"simulation": {"runtime": {"realtime": False, "time_acceleration": 60}}},
        filename="simulation.yml",
    )

    config = ConfigLoader(config_dir=temp_config_dir).load_all()

    assert config["storage"] == {
        "backend": "sqlite",
        "database_path": "/var/lib/thermostat.db",
    }
    assert config["simulation"]["runtime"]["time_acceleration"] == 60


def test_empty_yaml_file_uses_defaults(temp_config_dir):
    (temp_config_dir / "sensors.yml").write_text("")

    config = ConfigLoader(config_dir=temp_config_dir).load_all()

    assert config["sensors"] == DEFAULT_SENSORS


def test_logging_section(temp_config_dir, write_config_file):
    write_config_file({"level": "DEBUG", "log_dir": "/tmp/climate"}, filename="logging.yml")

    config = ConfigLoader(config_dir=temp_config_dir).load_all()

    assert config["logging"] == {"level": "DEBUG", "log_dir": "/tmp/climate"}
