"""Движок команд робота: валидация, смена состояния и учёт заряда батареи."""

import dataclasses
import logging
import math
from collections.abc import Callable
from typing import Any, Mapping, Optional

from robofleet.messages import CommandError, CommandResult, RobotSnapshot, RobotStatus

logger = logging.getLogger(__name__)

CommandHandler = Callable[[RobotSnapshot, Mapping[str, Any]], tuple[RobotSnapshot, CommandResult]]

MIN_BATTERY = 0.0
MAX_BATTERY = 100.0

VALID_DIRECTIONS = ("forward", "backward", "left", "right")
MANIPULATOR_TYPES = ("arm", "manipulator")

_COMMANDS: dict[str, CommandHandler] = {}


def register_command(name: str):
    """
    Декоратор для регистрации обработчика команды.

    Порядок регистрации определяет порядок в списке доступных команд.

    Args:
        name: Имя команды, как его присылает клиент

    Returns:
        Декоратор функции
    """

    def decorator(handler: CommandHandler) -> CommandHandler:
        _COMMANDS[name] = handler
        return handler

    return decorator


def available_commands() -> tuple[str, ...]:
    """Имена всех зарегистрированных команд в порядке регистрации."""
    return tuple(_COMMANDS)


def clamp_battery(level: float) -> float:
    return max(MIN_BATTERY, min(MAX_BATTERY, level))


def execute_command(
    robot: RobotSnapshot,
    command: str,
    parameters: Optional[Mapping[str, Any]] = None,
) -> tuple[RobotSnapshot, CommandResult]:
    """
    Выполнить одну команду над снимком состояния робота.

    Исходный снимок не изменяется: при успехе возвращается новый снимок,
    при отказе - тот же самый. Исключений функция не бросает, все ошибки
    описываются через CommandResult.success=False.

    Args:
        robot: Текущее состояние робота
        command: Имя команды (move, stop, rotate, grab, release, charge)
        parameters: Параметры команды, по умолчанию пустые

    Returns:
        Пара (новый снимок, результат команды)
    """
    handler = _COMMANDS.get(command)
    if handler is None:
        logger.debug("Rejected unknown command %r for robot %s", command, robot.id)
        return robot, CommandResult.failure(
            CommandError.UNKNOWN_COMMAND,
            f"Unknown command: {command}",
            available_commands=available_commands(),
        )

    # Guard order matters: an unknown command is reported before an empty battery
    if robot.battery_level <= 0 and command != "charge":
        logger.debug("Rejected %r for robot %s: battery depleted", command, robot.id)
        return robot, CommandResult.failure(
            CommandError.BATTERY_DEPLETED,
            "Battery depleted. Please charge the robot.",
        )

    return handler(robot, parameters or {})


def _apply(robot: RobotSnapshot, status: RobotStatus, battery_level: float) -> RobotSnapshot:
    return dataclasses.replace(robot, status=status, battery_level=clamp_battery(battery_level))


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    if not math.isfinite(number):
        return None
    return number


def _supports_manipulation(robot: RobotSnapshot) -> bool:
    return robot.type in MANIPULATOR_TYPES


def _invalid(message: str) -> CommandResult:
    return CommandResult.failure(CommandError.INVALID_PARAMETER, message)


@register_command("move")
def move(robot: RobotSnapshot, params: Mapping[str, Any]) -> tuple[RobotSnapshot, CommandResult]:
    direction = params.get("direction", "forward")
    distance = params.get("distance", 1)

    if direction not in VALID_DIRECTIONS:
        return robot, _invalid(f"Invalid direction. Use: {', '.join(VALID_DIRECTIONS)}")
    cost = _as_number(distance)
    if cost is None:
        return robot, _invalid("Invalid distance. Must be a number")

    updated = _apply(robot, RobotStatus.MOVING, robot.battery_level - cost * 2)
    return updated, CommandResult(
        success=True,
        action="move",
        details={"direction": direction, "distance": distance},
        new_battery_level=updated.battery_level,
    )


@register_command("stop")
def stop(robot: RobotSnapshot, params: Mapping[str, Any]) -> tuple[RobotSnapshot, CommandResult]:
    updated = _apply(robot, RobotStatus.IDLE, robot.battery_level)
    return updated, CommandResult(
        success=True,
        action="stop",
        details={"status": updated.status.value},
        new_battery_level=updated.battery_level,
    )


@register_command("rotate")
def rotate(robot: RobotSnapshot, params: Mapping[str, Any]) -> tuple[RobotSnapshot, CommandResult]:
    degrees = params.get("degrees", 90)
    angle = _as_number(degrees)
    if angle is None:
        return robot, _invalid("Invalid degrees. Must be a number")

    updated = _apply(robot, RobotStatus.ROTATING, robot.battery_level - abs(angle) / 90)
    return updated, CommandResult(
        success=True,
        action="rotate",
        details={"degrees": degrees},
        new_battery_level=updated.battery_level,
    )


@register_command("grab")
def grab(robot: RobotSnapshot, params: Mapping[str, Any]) -> tuple[RobotSnapshot, CommandResult]:
    if not _supports_manipulation(robot):
        return robot, CommandResult.failure(
            CommandError.UNSUPPORTED_FOR_TYPE,
            "This robot type does not support grab operations",
        )

    updated = _apply(robot, RobotStatus.GRABBING, robot.battery_level - 5)
    return updated, CommandResult(success=True, action="grab", new_battery_level=updated.battery_level)


@register_command("release")
def release(robot: RobotSnapshot, params: Mapping[str, Any]) -> tuple[RobotSnapshot, CommandResult]:
    if not _supports_manipulation(robot):
        return robot, CommandResult.failure(
            CommandError.UNSUPPORTED_FOR_TYPE,
            "This robot type does not support release operations",
        )

    updated = _apply(robot, RobotStatus.RELEASING, robot.battery_level - 2)
    return updated, CommandResult(success=True, action="release", new_battery_level=updated.battery_level)


@register_command("charge")
def charge(robot: RobotSnapshot, params: Mapping[str, Any]) -> tuple[RobotSnapshot, CommandResult]:
    updated = _apply(robot, RobotStatus.CHARGING, MAX_BATTERY)
    return updated, CommandResult(success=True, action="charge", new_battery_level=updated.battery_level)
