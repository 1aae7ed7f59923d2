"""Доменные движки: команды робота и калибровка датчиков."""

from robofleet.engine.calibration import (
    CHANNELS,
    CalibrationEngine,
    ChannelRange,
    validate_sensor_health,
)
from robofleet.engine.commands import (
    available_commands,
    clamp_battery,
    execute_command,
    register_command,
)

__all__ = [
    "CHANNELS",
    "CalibrationEngine",
    "ChannelRange",
    "available_commands",
    "clamp_battery",
    "execute_command",
    "register_command",
    "validate_sensor_health",
]
