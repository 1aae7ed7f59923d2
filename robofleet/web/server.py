import logging
from typing import Any, Optional

import numpy as np
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from robofleet import __version__, event_bus
from robofleet.bus import TOPIC_CALIBRATED, TOPIC_COMMAND, FleetEvent
from robofleet.config import config
from robofleet.engine.calibration import CalibrationEngine
from robofleet.messages import utc_now_iso
from robofleet.registry import FleetRegistry, RobotNotFoundError

logger = logging.getLogger(__name__)

app = FastAPI(title="robofleet")

registry = FleetRegistry(
    bus=event_bus,
    calibration=CalibrationEngine(
        rng=np.random.default_rng(config.calibration.seed),
        offset_ratio=config.calibration.offset_ratio,
        drift_ratio=config.calibration.drift_ratio,
    ),
    settings=config.fleet,
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def audit_event(event: FleetEvent) -> None:
    """Журнал аудита флота: одна строка на событие."""
    if event.topic == TOPIC_COMMAND:
        result = event.payload.result
        outcome = "ok" if result.success else result.error_kind.value
        logger.info("[AUDIT] robot %s command '%s': %s", event.robot_id, event.payload.command, outcome)
    elif event.topic == TOPIC_CALIBRATED:
        logger.info("[AUDIT] robot %s calibrated: %s", event.robot_id, event.payload.status.value)
    else:
        logger.info("[AUDIT] robot %s %s", event.robot_id, event.topic.split("/", 1)[1])


@app.on_event("startup")
async def on_startup() -> None:
    await event_bus.subscribe_all(audit_event)


@app.exception_handler(RobotNotFoundError)
async def robot_not_found_handler(request: Request, exc: RobotNotFoundError) -> JSONResponse:
    return _error(404, "Robot not found")


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Тело запроса отсутствует или поля неверного типа: 400 вместо 422
    fields = {str(loc) for error in exc.errors() for loc in error.get("loc", ())}
    if request.url.path.endswith("/command"):
        if "parameters" in fields:
            return _error(400, "Parameters must be an object")
        return _error(400, "Command is required")
    if request.url.path == "/api/robots":
        if "location" in fields:
            return _error(400, "Location must be a string")
        return _error(400, "Name and type are required")
    return _error(400, "Invalid request")


class RobotCreate(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    location: Optional[str] = None


class CommandRequest(BaseModel):
    command: Optional[str] = None
    parameters: Optional[dict[str, Any]] = None


@app.get("/health")
async def health() -> dict[str, str]:
    return {
        "status": "healthy",
        "timestamp": utc_now_iso(),
        "version": __version__,
    }


@app.get("/api/robots")
async def list_robots() -> list[dict[str, Any]]:
    return [robot.as_dict() for robot in await registry.list_robots()]


@app.get("/api/robots/{robot_id}")
async def get_robot(robot_id: str) -> dict[str, Any]:
    robot = await registry.get(robot_id)
    return robot.as_dict()


@app.post("/api/robots", status_code=201, response_model=None)
async def register_robot(body: RobotCreate) -> dict[str, Any] | JSONResponse:
    if not body.name or not body.type:
        return _error(400, "Name and type are required")

    robot = await registry.register(body.name, body.type, body.location)
    return robot.as_dict()


@app.post("/api/robots/{robot_id}/command", response_model=None)
async def send_command(robot_id: str, body: CommandRequest) -> dict[str, Any] | JSONResponse:
    if not body.command:
        return _error(400, "Command is required")

    result = await registry.execute(robot_id, body.command, body.parameters)
    return result.as_dict()


@app.post("/api/robots/{robot_id}/calibrate")
async def calibrate_robot(robot_id: str) -> dict[str, Any]:
    report = await registry.calibrate(robot_id)
    return report.as_dict()


@app.get("/api/robots/{robot_id}/sensors/health")
async def sensor_health(robot_id: str) -> dict[str, Any]:
    report = await registry.sensor_health(robot_id)
    return report.as_dict()


@app.delete("/api/robots/{robot_id}", status_code=204)
async def delete_robot(robot_id: str) -> Response:
    await registry.delete(robot_id)
    return Response(status_code=204)
