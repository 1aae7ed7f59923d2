"""Калибровка датчиков робота (симуляция)."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

import numpy as np

from robofleet.messages import (
    CalibrationReading,
    CalibrationReport,
    CalibrationStatus,
    HealthReport,
    ReadingStatus,
    RobotSnapshot,
    utc_now_iso,
)

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Источник случайных чисел; numpy.random.Generator подходит напрямую."""

    def uniform(self, low: float, high: float) -> float:
        ...


@dataclass(frozen=True)
class ChannelRange:
    min: float
    max: float
    unit: str

    @property
    def width(self) -> float:
        return self.max - self.min


CHANNELS: dict[str, ChannelRange] = {
    "temperature": ChannelRange(-40.0, 85.0, "C"),
    "proximity": ChannelRange(0.0, 500.0, "cm"),
    "pressure": ChannelRange(0.0, 1000.0, "kPa"),
}

# Модель шума для базового значения: (центр, полуширина)
_BASE_VALUE_MODELS: dict[str, tuple[float, float]] = {
    "temperature": (22.0, 5.0),  # 17-27 C
    "proximity": (200.0, 100.0),  # 100-300 cm
    "pressure": (101.3, 5.0),  # ~атмосферное давление, kPa
}


class CalibrationEngine:
    """
    Движок калибровки датчиков.

    Для каждого канала из таблицы генерирует "сырое" значение, добавляет
    случайное смещение калибровки и проверяет результат на выход за
    допустимый диапазон и на дрейф. Снимок робота не изменяется.
    """

    def __init__(
        self,
        rng: Optional[RandomSource] = None,
        channels: Optional[Mapping[str, ChannelRange]] = None,
        offset_ratio: float = 0.05,
        drift_ratio: float = 0.10,
        clock: Optional[Callable[[], str]] = None,
    ) -> None:
        """
        Инициализация движка.

        Args:
            rng: Генератор случайных чисел (по умолчанию numpy default_rng без seed)
            channels: Таблица каналов {имя: диапазон}, по умолчанию CHANNELS
            offset_ratio: Максимальное смещение калибровки как доля ширины диапазона
            drift_ratio: Порог дрейфа как доля ширины диапазона
            clock: Функция, возвращающая текущее время в ISO формате
        """
        self.rng = rng if rng is not None else np.random.default_rng()
        self.channels = dict(channels) if channels is not None else dict(CHANNELS)
        self.offset_ratio = offset_ratio
        self.drift_ratio = drift_ratio
        self._clock = clock or utc_now_iso

    def calibrate(self, robot: RobotSnapshot) -> CalibrationReport:
        """
        Откалибровать все каналы робота.

        Args:
            robot: Снимок состояния робота

        Returns:
            Отчёт о калибровке со всеми каналами таблицы
        """
        sensors: dict[str, CalibrationReading] = {}
        warnings: list[str] = []

        for sensor_type, channel in self.channels.items():
            reading = self.calibrate_sensor(sensor_type, channel)
            sensors[sensor_type] = reading
            if reading.status == ReadingStatus.WARNING:
                warnings.append(f"{sensor_type}: {reading.message}")

        status = CalibrationStatus.COMPLETED_WITH_WARNINGS if warnings else CalibrationStatus.SUCCESS
        if warnings:
            logger.info("Calibration of robot %s finished with %d warnings", robot.id, len(warnings))

        return CalibrationReport(
            robot_id=robot.id,
            robot_name=robot.name,
            timestamp=self._clock(),
            sensors=sensors,
            status=status,
            warnings=tuple(warnings),
        )

    def calibrate_sensor(self, sensor_type: str, channel: ChannelRange) -> CalibrationReading:
        raw_value = self.generate_base_value(sensor_type)
        offset = self.calculate_offset(channel)
        calibrated_value = raw_value + offset

        status = ReadingStatus.OK
        message = None

        if calibrated_value < channel.min or calibrated_value > channel.max:
            status = ReadingStatus.WARNING
            message = f"Value {calibrated_value}{channel.unit} outside normal range"

        # Drift is checked last, its message wins when both fire
        if abs(offset) > channel.width * self.drift_ratio:
            status = ReadingStatus.WARNING
            message = f"Significant sensor drift detected: {offset:.2f}{channel.unit}"

        if message:
            logger.debug("Sensor %s: %s", sensor_type, message)

        return CalibrationReading(
            type=sensor_type,
            raw_value=raw_value,
            calibrated_value=calibrated_value,
            offset=calibrated_value - raw_value,
            unit=channel.unit,
            status=status,
            message=message,
            timestamp=self._clock(),
        )

    def generate_base_value(self, sensor_type: str) -> float:
        """Сырое значение датчика; для неизвестного канала 0."""
        model = _BASE_VALUE_MODELS.get(sensor_type)
        if model is None:
            return 0.0
        center, spread = model
        return float(self.rng.uniform(center - spread, center + spread))

    def calculate_offset(self, channel: ChannelRange) -> float:
        max_offset = channel.width * self.offset_ratio
        return float(self.rng.uniform(-max_offset, max_offset))


def _status_and_message(data: Any) -> Optional[tuple[Any, Any]]:
    """(status, message) показания или None, если данных нет."""
    if isinstance(data, CalibrationReading):
        if data.calibrated_value is None:
            return None
        return data.status, data.message
    if isinstance(data, Mapping):
        # A dict without a calibratedValue key still counts as data
        if "calibratedValue" in data and data["calibratedValue"] is None:
            return None
        return data.get("status"), data.get("message")
    return None


def validate_sensor_health(readings: Mapping[str, Any]) -> HealthReport:
    """
    Проверить состояние датчиков по последним показаниям.

    Показания могут быть как CalibrationReading, так и словарями в формате
    API (calibratedValue, status, message). Всё остальное (None, числа,
    строки) считается отсутствием данных.

    Args:
        readings: Словарь {канал: показание или None}

    Returns:
        HealthReport; healthy=True только если нет ни одной проблемы
    """
    issues: list[str] = []

    for sensor, data in readings.items():
        view = _status_and_message(data)
        if view is None:
            issues.append(f"{sensor}: No data available")
            continue
        status, message = view
        if status == ReadingStatus.WARNING:
            issues.append(f"{sensor}: {message}")

    return HealthReport(healthy=not issues, issues=tuple(issues))
