"""Интеграционные тесты HTTP API."""

import importlib
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Свежий сервер с пустым реестром для каждого теста."""
    server = importlib.reload(importlib.import_module("robofleet.web.server"))
    with TestClient(server.app) as test_client:
        yield test_client


def _create(client: TestClient, name: str = "Command-Test-Bot", robot_type: str = "mobile") -> str:
    response = client.post("/api/robots", json={"name": name, "type": robot_type})
    assert response.status_code == 201
    return response.json()["id"]


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert "timestamp" in body
    assert "version" in body


def test_register_robot(client: TestClient) -> None:
    """POST /api/robots создаёт робота."""
    response = client.post(
        "/api/robots",
        json={"name": "Assembly-Bot-001", "type": "arm", "location": "Factory Floor A"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Assembly-Bot-001"
    assert body["type"] == "arm"
    assert body["status"] == "idle"
    assert body["batteryLevel"] == 100
    assert body["sensors"] == {"temperature": None, "proximity": None, "pressure": None}
    assert body["lastCalibration"] is None
    assert "id" in body


@pytest.mark.parametrize("payload", [{"name": "Test"}, {"type": "arm"}, {}, {"name": "", "type": "arm"}])
def test_register_requires_name_and_type(client: TestClient, payload: dict) -> None:
    response = client.post("/api/robots", json=payload)

    assert response.status_code == 400
    assert "required" in response.json()["error"]


def test_list_and_get(client: TestClient) -> None:
    robot_id = _create(client, "Test-Bot")

    listed = client.get("/api/robots")
    fetched = client.get(f"/api/robots/{robot_id}")

    assert listed.status_code == 200
    assert [r["id"] for r in listed.json()] == [robot_id]
    assert fetched.status_code == 200
    assert fetched.json()["id"] == robot_id


def test_get_missing_robot(client: TestClient) -> None:
    response = client.get("/api/robots/non-existent-id")

    assert response.status_code == 404
    assert response.json() == {"error": "Robot not found"}


def test_move_command(client: TestClient) -> None:
    robot_id = _create(client)

    response = client.post(
        f"/api/robots/{robot_id}/command",
        json={"command": "move", "parameters": {"direction": "forward", "distance": 5}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["action"] == "move"
    assert body["direction"] == "forward"
    assert body["newBatteryLevel"] == 90
    robot = client.get(f"/api/robots/{robot_id}").json()
    assert robot["status"] == "moving"
    assert robot["batteryLevel"] == 90


def test_stop_command_without_parameters(client: TestClient) -> None:
    robot_id = _create(client)

    response = client.post(f"/api/robots/{robot_id}/command", json={"command": "stop"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["action"] == "stop"
    assert response.json()["status"] == "idle"


def test_unknown_command_is_modeled_failure(client: TestClient) -> None:
    """Ошибка команды - это 200 с success=false."""
    robot_id = _create(client)

    response = client.post(f"/api/robots/{robot_id}/command", json={"command": "fly"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert "Unknown command" in body["error"]
    assert body["availableCommands"] == ["move", "stop", "rotate", "grab", "release", "charge"]


def test_command_is_required(client: TestClient) -> None:
    robot_id = _create(client)

    response = client.post(f"/api/robots/{robot_id}/command", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Command is required"}


def test_register_without_body(client: TestClient) -> None:
    """POST без тела - 400, а не 422."""
    response = client.post("/api/robots")

    assert response.status_code == 400
    assert response.json() == {"error": "Name and type are required"}


@pytest.mark.parametrize("payload", [{"name": 5, "type": "arm"}, {"name": "Bot", "type": ["arm"]}])
def test_register_rejects_non_string_fields(client: TestClient, payload: dict) -> None:
    response = client.post("/api/robots", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Name and type are required"}


def test_command_without_body(client: TestClient) -> None:
    robot_id = _create(client)

    response = client.post(f"/api/robots/{robot_id}/command")

    assert response.status_code == 400
    assert response.json() == {"error": "Command is required"}


def test_command_non_string_command(client: TestClient) -> None:
    robot_id = _create(client)

    response = client.post(f"/api/robots/{robot_id}/command", json={"command": 42})

    assert response.status_code == 400
    assert response.json() == {"error": "Command is required"}


def test_command_parameters_must_be_object(client: TestClient) -> None:
    robot_id = _create(client)

    response = client.post(f"/api/robots/{robot_id}/command", json={"command": "move", "parameters": 5})

    assert response.status_code == 400
    assert response.json() == {"error": "Parameters must be an object"}


def test_oversized_distance_is_modeled_failure(client: TestClient) -> None:
    """Огромное целое в distance - ошибка параметра, а не 500."""
    robot_id = _create(client)

    response = client.post(
        f"/api/robots/{robot_id}/command",
        content='{"command": "move", "parameters": {"distance": ' + "9" * 400 + "}}",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["errorKind"] == "invalid_parameter"
    assert client.get(f"/api/robots/{robot_id}").json()["batteryLevel"] == 100


def test_command_on_missing_robot(client: TestClient) -> None:
    response = client.post("/api/robots/non-existent-id/command", json={"command": "stop"})

    assert response.status_code == 404


def test_calibrate(client: TestClient) -> None:
    robot_id = _create(client, "Calibration-Test-Bot", "sensor-array")

    response = client.post(f"/api/robots/{robot_id}/calibrate")

    assert response.status_code == 200
    body = response.json()
    assert set(body["sensors"]) == {"temperature", "proximity", "pressure"}
    for key in ("rawValue", "calibratedValue", "offset", "unit"):
        assert key in body["sensors"]["temperature"]

    robot = client.get(f"/api/robots/{robot_id}").json()
    assert robot["lastCalibration"] == body["timestamp"]
    assert robot["sensors"]["pressure"]["calibratedValue"] == body["sensors"]["pressure"]["calibratedValue"]


def test_sensor_health_endpoint(client: TestClient) -> None:
    robot_id = _create(client, "Health-Bot", "sensor-array")

    before = client.get(f"/api/robots/{robot_id}/sensors/health").json()
    client.post(f"/api/robots/{robot_id}/calibrate")
    after = client.get(f"/api/robots/{robot_id}/sensors/health").json()

    assert before["healthy"] is False
    assert "temperature: No data available" in before["issues"]
    assert after == {"healthy": True, "issues": []}


def test_delete_robot(client: TestClient) -> None:
    robot_id = _create(client, "Delete-Test-Bot")

    assert client.delete(f"/api/robots/{robot_id}").status_code == 204
    assert client.get(f"/api/robots/{robot_id}").status_code == 404
    assert client.delete(f"/api/robots/{robot_id}").status_code == 404
