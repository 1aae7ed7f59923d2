"""Шина событий флота: регистрация, команды, калибровка, удаление роботов."""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

TOPIC_REGISTERED = "robot/registered"
TOPIC_COMMAND = "robot/command"
TOPIC_CALIBRATED = "robot/calibrated"
TOPIC_DELETED = "robot/deleted"

ALL_TOPICS = (TOPIC_REGISTERED, TOPIC_COMMAND, TOPIC_CALIBRATED, TOPIC_DELETED)

# Подписка на все топики сразу
WILDCARD = "*"


@dataclass(frozen=True)
class FleetEvent:
    topic: str
    robot_id: str
    payload: Any = None


Handler = Callable[[FleetEvent], Coroutine[Any, Any, None]]


class EventBus:
    """
    Асинхронная шина событий флота.

    Обработчики подписываются на конкретный топик или на WILDCARD.
    Обработчики одного события выполняются параллельно.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def subscribe(self, topic: str, handler: Handler) -> None:
        if topic != WILDCARD and topic not in ALL_TOPICS:
            raise ValueError(f"Unknown fleet topic: {topic}")
        async with self._lock:
            self._handlers[topic].append(handler)

    async def subscribe_all(self, handler: Handler) -> None:
        await self.subscribe(WILDCARD, handler)

    async def publish(self, event: FleetEvent) -> int:
        """
        Разослать событие подписчикам топика и WILDCARD.

        Returns:
            Количество вызванных обработчиков
        """
        async with self._lock:
            handlers = [*self._handlers.get(event.topic, ()), *self._handlers.get(WILDCARD, ())]
        if handlers:
            await asyncio.gather(*(handler(event) for handler in handlers))
        logger.debug("Event %s for robot %s delivered to %d handlers", event.topic, event.robot_id, len(handlers))
        return len(handlers)

    async def robot_registered(self, robot: Any) -> int:
        return await self.publish(FleetEvent(TOPIC_REGISTERED, robot.id, robot))

    async def command_executed(self, robot_id: str, command_event: Any) -> int:
        return await self.publish(FleetEvent(TOPIC_COMMAND, robot_id, command_event))

    async def robot_calibrated(self, report: Any) -> int:
        return await self.publish(FleetEvent(TOPIC_CALIBRATED, report.robot_id, report))

    async def robot_deleted(self, robot_id: str) -> int:
        return await self.publish(FleetEvent(TOPIC_DELETED, robot_id))
