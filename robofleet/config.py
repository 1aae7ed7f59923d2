from typing import Optional

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Настройки веб-сервера"""
    host: str = Field("0.0.0.0", description="Адрес для привязки сервера")
    port: int = Field(3000, ge=1, le=65535, description="Порт сервера")
    reload: bool = Field(False, description="Auto-reload при изменении кода (для разработки)")


class FleetConfig(BaseModel):
    """Настройки реестра роботов"""
    initial_battery_level: float = Field(100.0, ge=0.0, le=100.0, description="Заряд нового робота (%)")
    default_location: str = Field("unknown", description="Локация, если не указана при регистрации")


class CalibrationConfig(BaseModel):
    """Настройки симуляции калибровки датчиков"""
    # Генератор случайных чисел
    seed: Optional[int] = Field(None, description="Seed для воспроизводимой калибровки (None = случайный)")

    # Пороги
    offset_ratio: float = Field(0.05, gt=0.0, le=1.0, description="Макс. смещение калибровки, доля ширины диапазона")
    drift_ratio: float = Field(0.10, gt=0.0, le=1.0, description="Порог дрейфа датчика, доля ширины диапазона")


class LoggingConfig(BaseModel):
    """Настройки логирования"""
    level: str = Field("INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", description="Уровень логов пакета")


class Config(BaseModel):
    """Главная конфигурация приложения"""
    server: ServerConfig = ServerConfig()
    fleet: FleetConfig = FleetConfig()
    calibration: CalibrationConfig = CalibrationConfig()
    logging: LoggingConfig = LoggingConfig()


# Глобальный экземпляр конфигурации
config = Config()
