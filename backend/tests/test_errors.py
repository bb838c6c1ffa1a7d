import pytest
from fastapi.testclient import TestClient

from auction_api.main import create_app
from auction_api.models.vehicle import VehicleInspection
from conftest import make_settings


@pytest.mark.parametrize(
    ("app_env", "exposes_error"),
    [
        ("development", True),
        ("production", False),
    ],
)
def test_database_failure_answers_500(app_env: str, exposes_error: bool) -> None:
    app = create_app(make_settings(app_env=app_env))
    with TestClient(app) as client:
        client.post("/api/vehicles/upsert", json={"mgmt_number": "DB1"})
        VehicleInspection.__table__.drop(app.state.engine)

        response = client.get("/api/vehicles")

    assert response.status_code == 500
    body = response.json()
    assert body["detail"] == "Database error"
    assert ("error" in body) is exposes_error
    if exposes_error:
        assert "vehicle_inspections" in body["error"]
