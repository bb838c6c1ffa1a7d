from collections.abc import Iterator
from typing import Any, Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from auction_api.core.config import Settings
from auction_api.main import create_app


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "app_env": "test",
        "database_url": "sqlite:///:memory:",
        "db_pool_size": 5,
        "db_max_overflow": 10,
        "db_auto_create": True,
        "jwt_secret": "test-access-secret",
        "jwt_refresh_secret": "test-refresh-secret",
        "jwt_access_expiry_mins": 15,
        "jwt_refresh_expiry_days": 7,
        "cookie_secure": False,
        "cookie_domain": None,
        "smtp_host": None,
        "smtp_port": 587,
        "smtp_user": None,
        "smtp_password": None,
        "smtp_from": "noreply@example.com",
        "app_base_url": "http://localhost:4321",
        "log_level": "INFO",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def sent_emails(app: FastAPI, monkeypatch: pytest.MonkeyPatch) -> list[dict[str, str]]:
    sent: list[dict[str, str]] = []

    def fake_send(to_email: str, to_name: str, token: str) -> None:
        sent.append({"to_email": to_email, "to_name": to_name, "token": token})

    monkeypatch.setattr(app.state.email_service, "send_verification_email", fake_send)
    return sent


@pytest.fixture
def client(app: FastAPI, sent_emails: list[dict[str, str]]) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(client: TestClient) -> Iterator[Session]:
    session = client.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def upsert_vehicle(client: TestClient) -> Callable[..., dict[str, Any]]:
    def _upsert(**payload: Any) -> dict[str, Any]:
        response = client.post("/api/vehicles/upsert", json=payload)
        assert response.status_code == 200, response.text
        return response.json()

    return _upsert


@pytest.fixture
def register_user(client: TestClient) -> Callable[..., dict[str, Any]]:
    def _register(
        email: str = "driver@example.com",
        password: str = "s3cret-pass",
        name: str = "Test Driver",
    ) -> dict[str, Any]:
        response = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def auth_headers(register_user: Callable[..., dict[str, Any]]) -> dict[str, str]:
    body = register_user()
    return {"Authorization": f"Bearer {body['access_token']}"}
