from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class RobotStatus(str, Enum):
    IDLE = "idle"
    MOVING = "moving"
    ROTATING = "rotating"
    GRABBING = "grabbing"
    RELEASING = "releasing"
    CHARGING = "charging"


class CommandError(str, Enum):
    UNKNOWN_COMMAND = "unknown_command"
    BATTERY_DEPLETED = "battery_depleted"
    INVALID_PARAMETER = "invalid_parameter"
    UNSUPPORTED_FOR_TYPE = "unsupported_for_type"


class ReadingStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"


class CalibrationStatus(str, Enum):
    SUCCESS = "success"
    COMPLETED_WITH_WARNINGS = "completed_with_warnings"


@dataclass(frozen=True)
class CalibrationReading:
    type: str
    raw_value: float
    calibrated_value: Optional[float]  # None until the channel has data
    offset: float  # calibrated_value - raw_value
    unit: str
    status: ReadingStatus = ReadingStatus.OK
    message: Optional[str] = None
    timestamp: str = field(default_factory=utc_now_iso)

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type,
            "rawValue": self.raw_value,
            "calibratedValue": self.calibrated_value,
            "offset": self.offset,
            "unit": self.unit,
            "status": self.status.value,
            "timestamp": self.timestamp,
        }
        if self.message is not None:
            data["message"] = self.message
        return data


@dataclass(frozen=True)
class RobotSnapshot:
    id: str
    name: str
    type: str
    location: str = "unknown"
    status: RobotStatus = RobotStatus.IDLE
    battery_level: float = 100.0  # 0..100
    sensors: Mapping[str, Optional[CalibrationReading]] = field(default_factory=dict)
    created_at: Optional[str] = None
    last_calibration: Optional[str] = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "location": self.location,
            "status": self.status.value,
            "batteryLevel": self.battery_level,
            "sensors": {
                channel: reading.as_dict() if reading is not None else None
                for channel, reading in self.sensors.items()
            },
            "createdAt": self.created_at,
            "lastCalibration": self.last_calibration,
        }


@dataclass(frozen=True)
class CommandResult:
    success: bool
    action: Optional[str] = None
    details: Mapping[str, Any] = field(default_factory=dict)
    new_battery_level: Optional[float] = None
    error: Optional[str] = None
    error_kind: Optional[CommandError] = None
    available_commands: Optional[tuple[str, ...]] = None

    @classmethod
    def failure(
        cls,
        kind: CommandError,
        error: str,
        available_commands: Optional[tuple[str, ...]] = None,
    ) -> "CommandResult":
        return cls(success=False, error=error, error_kind=kind, available_commands=available_commands)

    def as_dict(self) -> dict[str, Any]:
        if not self.success:
            data: dict[str, Any] = {
                "success": False,
                "error": self.error,
                "errorKind": self.error_kind.value if self.error_kind else None,
            }
            if self.available_commands is not None:
                data["availableCommands"] = list(self.available_commands)
            return data
        return {
            "success": True,
            "action": self.action,
            **self.details,
            "newBatteryLevel": self.new_battery_level,
        }


@dataclass(frozen=True)
class CalibrationReport:
    robot_id: str
    robot_name: str
    timestamp: str
    sensors: Mapping[str, CalibrationReading]
    status: CalibrationStatus
    warnings: tuple[str, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {
            "robotId": self.robot_id,
            "robotName": self.robot_name,
            "timestamp": self.timestamp,
            "sensors": {channel: reading.as_dict() for channel, reading in self.sensors.items()},
            "status": self.status.value,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class HealthReport:
    healthy: bool
    issues: tuple[str, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {"healthy": self.healthy, "issues": list(self.issues)}


@dataclass(frozen=True)
class CommandEvent:
    robot_id: str
    command: str
    result: CommandResult
