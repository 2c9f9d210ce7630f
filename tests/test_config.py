"""
Tests for EngineConfig and logging setup.

Tests cover:
- Defaults and normalization
- Validation of numeric settings and log levels
- Loading from dict, JSON and environment / .env files
- Package logger configuration
"""

import json
import logging
import os
from pathlib import Path

import pytest

from starcoords.config import ENV_PREFIX, EngineConfig
from starcoords.errors import ValidationError
from starcoords.logging_config import setup_logging


ENV_KEYS = ["CATALOG", "DEFAULT_ACCEL_G", "TOLERANCE_KM", "LOG_LEVEL", "LOG_FILE"]


def _clear_env():
    for key in ENV_KEYS:
        os.environ.pop(ENV_PREFIX + key, None)


@pytest.fixture
def clean_env(monkeypatch):
    """
    Remove any STARCOORDS_* variables before and after a test.

    load_dotenv writes straight into os.environ, so monkeypatch alone
    would not undo it.
    """
    saved = {k: v for k, v in os.environ.items() if k.startswith(ENV_PREFIX)}
    _clear_env()
    yield monkeypatch
    _clear_env()
    os.environ.update(saved)


@pytest.fixture
def empty_dotenv(tmp_path):
    path = tmp_path / ".env"
    path.write_text("")
    return path


class TestEngineConfig:
    """Tests for EngineConfig construction."""

    def test_defaults(self):
        config = EngineConfig()
        assert config.catalog_path is None
        assert config.default_acceleration_g == 1.0
        assert config.position_tolerance_km == 1e-6
        assert config.log_level == "WARNING"
        assert config.log_level_value == logging.WARNING
        assert config.log_file is None

    def test_paths_normalized(self):
        config = EngineConfig(catalog_path="data/mora_system.json", log_file="nav.log")
        assert config.catalog_path == Path("data/mora_system.json")
        assert config.log_file == Path("nav.log")

    def test_log_level_case_insensitive(self):
        config = EngineConfig(log_level="debug")
        assert config.log_level == "DEBUG"
        assert config.log_level_value == logging.DEBUG

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError, match="log level"):
            EngineConfig(log_level="LOUD")

    @pytest.mark.parametrize("value", [0, -1.0, float("nan"), float("inf"), "fast", True])
    def test_invalid_acceleration(self, value):
        with pytest.raises(ValidationError):
            EngineConfig(default_acceleration_g=value)

    @pytest.mark.parametrize("value", [0, -1e-6])
    def test_invalid_tolerance(self, value):
        with pytest.raises(ValidationError):
            EngineConfig(position_tolerance_km=value)

    def test_from_dict(self):
        config = EngineConfig.from_dict({
            "catalog_path": "systems/regina.json",
            "default_acceleration_g": 2,
            "log_level": "info",
        })
        assert config.catalog_path == Path("systems/regina.json")
        assert config.default_acceleration_g == 2.0
        assert config.log_level == "INFO"
        assert config.position_tolerance_km == 1e-6

    def test_from_json(self, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text(json.dumps({"default_acceleration_g": 4.5, "position_tolerance_km": 0.01}))
        config = EngineConfig.from_json(str(path))
        assert config.default_acceleration_g == 4.5
        assert config.position_tolerance_km == 0.01

    def test_from_json_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EngineConfig.from_json(str(tmp_path / "missing.json"))


class TestConfigFromEnv:
    """Tests for EngineConfig.from_env."""

    def test_no_variables_gives_defaults(self, clean_env, empty_dotenv):
        config = EngineConfig.from_env(str(empty_dotenv))
        assert config == EngineConfig()

    def test_reads_environment(self, clean_env, empty_dotenv):
        clean_env.setenv("STARCOORDS_CATALOG", "data/mora_system.json")
        clean_env.setenv("STARCOORDS_DEFAULT_ACCEL_G", "3")
        clean_env.setenv("STARCOORDS_LOG_LEVEL", "debug")
        config = EngineConfig.from_env(str(empty_dotenv))
        assert config.catalog_path == Path("data/mora_system.json")
        assert config.default_acceleration_g == 3.0
        assert config.log_level == "DEBUG"

    def test_reads_dotenv_file(self, clean_env, tmp_path):
        dotenv = tmp_path / ".env"
        dotenv.write_text(
            "STARCOORDS_TOLERANCE_KM=0.5\n"
            "STARCOORDS_LOG_FILE=nav.log\n"
        )
        config = EngineConfig.from_env(str(dotenv))
        assert config.position_tolerance_km == 0.5
        assert config.log_file == Path("nav.log")

    def test_environment_wins_over_dotenv(self, clean_env, tmp_path):
        dotenv = tmp_path / ".env"
        dotenv.write_text("STARCOORDS_DEFAULT_ACCEL_G=6\n")
        clean_env.setenv("STARCOORDS_DEFAULT_ACCEL_G", "2")
        assert EngineConfig.from_env(str(dotenv)).default_acceleration_g == 2.0

    def test_non_numeric_value(self, clean_env, empty_dotenv):
        clean_env.setenv("STARCOORDS_DEFAULT_ACCEL_G", "fast")
        with pytest.raises(ValidationError, match="STARCOORDS_DEFAULT_ACCEL_G"):
            EngineConfig.from_env(str(empty_dotenv))


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def reset_logger(self):
        yield
        logger = logging.getLogger("starcoords")
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)

    def test_configures_package_logger(self):
        logger = setup_logging(logging.INFO)
        assert logger.name == "starcoords"
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1

    def test_repeated_calls_do_not_duplicate_handlers(self):
        setup_logging(logging.INFO)
        logger = setup_logging(logging.DEBUG)
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "nav.log"
        logger = setup_logging(logging.INFO, log_file)
        logging.getLogger("starcoords.locations").info("Loaded catalog 'Mora'")
        for handler in logger.handlers:
            handler.flush()
        assert "Loaded catalog 'Mora'" in log_file.read_text()

    def test_reconfigure_closes_file_handler(self, tmp_path):
        first = setup_logging(logging.INFO, tmp_path / "first.log").handlers[-1]
        logger = setup_logging(logging.INFO)
        assert first not in logger.handlers
        assert first.stream is None
