"""In-memory реестр роботов."""

import asyncio
import dataclasses
import logging
import uuid
from typing import Any, Mapping, Optional

from robofleet.bus import EventBus
from robofleet.config import FleetConfig
from robofleet.engine.calibration import CHANNELS, CalibrationEngine, validate_sensor_health
from robofleet.engine.commands import execute_command
from robofleet.messages import (
    CalibrationReport,
    CommandEvent,
    CommandResult,
    HealthReport,
    RobotSnapshot,
    utc_now_iso,
)

logger = logging.getLogger(__name__)


class RobotNotFoundError(LookupError):
    """Робот с указанным идентификатором не зарегистрирован."""

    def __init__(self, robot_id: str) -> None:
        super().__init__(f"Robot not found: {robot_id}")
        self.robot_id = robot_id


class FleetRegistry:
    """
    Реестр флота: хранит последний снимок каждого робота.

    Команды и калибровка выполняются под общим замком, поэтому каждая
    следующая команда видит состояние, записанное предыдущей.
    """

    def __init__(
        self,
        bus: Optional[EventBus] = None,
        calibration: Optional[CalibrationEngine] = None,
        settings: Optional[FleetConfig] = None,
    ) -> None:
        self._robots: dict[str, RobotSnapshot] = {}
        self._lock = asyncio.Lock()
        self._bus = bus
        self._calibration = calibration or CalibrationEngine()
        self._settings = settings or FleetConfig()

    async def register(self, name: str, robot_type: str, location: Optional[str] = None) -> RobotSnapshot:
        robot = RobotSnapshot(
            id=str(uuid.uuid4()),
            name=name,
            type=robot_type,
            location=location or self._settings.default_location,
            battery_level=self._settings.initial_battery_level,
            sensors={channel: None for channel in CHANNELS},
            created_at=utc_now_iso(),
        )
        async with self._lock:
            self._robots[robot.id] = robot

        logger.info("Registered new robot: %s (%s)", robot.name, robot.id)
        if self._bus:
            await self._bus.robot_registered(robot)
        return robot

    async def list_robots(self) -> list[RobotSnapshot]:
        async with self._lock:
            robots = list(self._robots.values())
        logger.info("Listed %d robots", len(robots))
        return robots

    async def get(self, robot_id: str) -> RobotSnapshot:
        async with self._lock:
            return self._get(robot_id)

    async def delete(self, robot_id: str) -> None:
        async with self._lock:
            self._get(robot_id)
            del self._robots[robot_id]

        logger.info("Deleted robot %s", robot_id)
        if self._bus:
            await self._bus.robot_deleted(robot_id)

    async def execute(
        self,
        robot_id: str,
        command: str,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> CommandResult:
        async with self._lock:
            robot, result = execute_command(self._get(robot_id), command, parameters)
            self._robots[robot_id] = robot

        logger.info("Executed command '%s' on robot %s", command, robot_id)
        if self._bus:
            await self._bus.command_executed(robot_id, CommandEvent(robot_id=robot_id, command=command, result=result))
        return result

    async def calibrate(self, robot_id: str) -> CalibrationReport:
        async with self._lock:
            robot = self._get(robot_id)
            report = self._calibration.calibrate(robot)
            self._robots[robot_id] = dataclasses.replace(
                robot,
                sensors={**robot.sensors, **report.sensors},
                last_calibration=report.timestamp,
            )

        logger.info("Calibrated sensors for robot %s", robot_id)
        if self._bus:
            await self._bus.robot_calibrated(report)
        return report

    async def sensor_health(self, robot_id: str) -> HealthReport:
        robot = await self.get(robot_id)
        return validate_sensor_health(robot.sensors)

    def _get(self, robot_id: str) -> RobotSnapshot:
        robot = self._robots.get(robot_id)
        if robot is None:
            raise RobotNotFoundError(robot_id)
        return robot
