import pytest

from auction_api.core import config

SECRET_VARS = ("JWT_SECRET", "JWT_REFRESH_SECRET")


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    for name in (*SECRET_VARS, "APP_ENV", "DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.mark.parametrize(
    ("configured", "missing"),
    [
        ({"JWT_REFRESH_SECRET": "real-refresh"}, "JWT_SECRET"),
        ({"JWT_SECRET": "real-access"}, "JWT_REFRESH_SECRET"),
    ],
)
def test_production_requires_both_jwt_secrets(env: pytest.MonkeyPatch, configured: dict[str, str], missing: str) -> None:
    env.setenv("APP_ENV", "production")
    for name, value in configured.items():
        env.setenv(name, value)

    with pytest.raises(RuntimeError, match=missing):
        config.load_settings()


def test_production_accepts_configured_secrets(env: pytest.MonkeyPatch) -> None:
    env.setenv("APP_ENV", "Production")
    env.setenv("JWT_SECRET", "real-access")
    env.setenv("JWT_REFRESH_SECRET", "real-refresh")

    settings = config.load_settings()

    assert settings.is_production
    assert settings.jwt_refresh_secret == "real-refresh"


def test_development_allows_placeholder_secrets(env: pytest.MonkeyPatch) -> None:
    settings = config.load_settings()

    assert settings.jwt_secret == config.PLACEHOLDER_JWT_SECRET
    assert settings.jwt_refresh_secret == config.PLACEHOLDER_JWT_REFRESH_SECRET


def test_database_url_reads_dotenv_and_keeps_percent_signs(env: pytest.MonkeyPatch) -> None:
    def fake_load_dotenv() -> None:
        env.setenv("DATABASE_URL", "postgres://user:p%25w@db:5432/auction")

    env.setattr(config, "load_dotenv", fake_load_dotenv)

    assert config.load_database_url() == "postgresql+psycopg2://user:p%25w@db:5432/auction"


def test_database_url_built_from_postgres_parts(env: pytest.MonkeyPatch) -> None:
    env.setenv("POSTGRES_USER", "bidder")
    env.setenv("POSTGRES_PASSWORD", "pw")
    env.setenv("POSTGRES_HOST", "localhost")
    env.setenv("POSTGRES_PORT", "6543")
    env.setenv("POSTGRES_DB", "lots")

    assert config.load_database_url() == "postgresql+psycopg2://bidder:pw@localhost:6543/lots"
