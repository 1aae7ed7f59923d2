"""Тесты для конфигурации."""

import pytest
from pydantic import ValidationError

from robofleet.config import CalibrationConfig, Config, FleetConfig, LoggingConfig, ServerConfig


def test_config_defaults() -> None:
    """Проверка дефолтных значений Config."""
    config = Config()

    assert config.server.port == 3000
    assert config.fleet.initial_battery_level == 100
    assert config.fleet.default_location == "unknown"
    assert config.calibration.seed is None
    assert config.calibration.offset_ratio == 0.05
    assert config.calibration.drift_ratio == 0.10
    assert config.logging.level == "INFO"


def test_calibration_config_seed() -> None:
    """Seed можно задать для воспроизводимой калибровки."""
    config = CalibrationConfig(seed=42)

    assert config.seed == 42


@pytest.mark.parametrize("level", [-1, 101])
def test_fleet_config_rejects_battery_out_of_range(level: float) -> None:
    """Начальный заряд ограничен диапазоном 0..100."""
    with pytest.raises(ValidationError):
        FleetConfig(initial_battery_level=level)


def test_server_config_rejects_bad_port() -> None:
    with pytest.raises(ValidationError):
        ServerConfig(port=70000)


def test_calibration_config_rejects_zero_ratio() -> None:
    with pytest.raises(ValidationError):
        CalibrationConfig(drift_ratio=0)


def test_logging_config_rejects_unknown_level() -> None:
    """Уровень логов должен быть стандартным."""
    with pytest.raises(ValidationError):
        LoggingConfig(level="VERBOSE")
