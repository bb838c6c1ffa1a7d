import os
from dataclasses import dataclass

from dotenv import load_dotenv

PLACEHOLDER_JWT_SECRET = "your-super-secret-key-change-in-production"
PLACEHOLDER_JWT_REFRESH_SECRET = "your-refresh-secret-key-change-in-production"


def _env(name: str, default: str | None = None) -> str:
    value = os.getenv(name, default)
    if value is None:
        raise RuntimeError(f"Missing required env var: {name}")
    return value


def _optional(name: str) -> str | None:
    value = os.getenv(name)
    if value and value.strip():
        return value.strip()
    return None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"Env var {name} must be an integer, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_env: str
    database_url: str
    db_pool_size: int
    db_max_overflow: int
    db_auto_create: bool
    jwt_secret: str
    jwt_refresh_secret: str
    jwt_access_expiry_mins: int
    jwt_refresh_expiry_days: int
    cookie_secure: bool
    cookie_domain: str | None
    smtp_host: str | None
    smtp_port: int
    smtp_user: str | None
    smtp_password: str | None
    smtp_from: str
    app_base_url: str
    log_level: str

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def smtp_enabled(self) -> bool:
        return self.smtp_host is not None and self.smtp_user is not None

    @property
    def access_token_max_age(self) -> int:
        return self.jwt_access_expiry_mins * 60

    @property
    def refresh_token_max_age(self) -> int:
        return self.jwt_refresh_expiry_days * 24 * 60 * 60


def build_database_url() -> str:
    explicit = _optional("DATABASE_URL")
    if explicit is not None:
        # SQLAlchemy 2.x does not accept the bare 'postgres://' scheme.
        if explicit.startswith("postgres://"):
            return explicit.replace("postgres://", "postgresql+psycopg2://", 1)
        return explicit

    postgres_user = _env("POSTGRES_USER", "auction_user")
    postgres_password = _env("POSTGRES_PASSWORD", "auction_pass")
    postgres_host = _env("POSTGRES_HOST", "db")
    postgres_port = _env("POSTGRES_PORT", "5432")
    postgres_db = _env("POSTGRES_DB", "auto_auction")
    return f"postgresql+psycopg2://{postgres_user}:{postgres_password}@{postgres_host}:{postgres_port}/{postgres_db}"


def load_database_url() -> str:
    load_dotenv()
    return build_database_url()


def load_settings() -> Settings:
    load_dotenv()

    settings = Settings(
        app_env=_env("APP_ENV", "development").strip().lower(),
        database_url=build_database_url(),
        db_pool_size=_env_int("DB_POOL_SIZE", 5),
        db_max_overflow=_env_int("DB_MAX_OVERFLOW", 10),
        db_auto_create=_env_bool("DB_AUTO_CREATE", True),
        jwt_secret=_env("JWT_SECRET", PLACEHOLDER_JWT_SECRET),
        jwt_refresh_secret=_env("JWT_REFRESH_SECRET", PLACEHOLDER_JWT_REFRESH_SECRET),
        jwt_access_expiry_mins=_env_int("JWT_ACCESS_EXPIRY_MINS", 15),
        jwt_refresh_expiry_days=_env_int("JWT_REFRESH_EXPIRY_DAYS", 7),
        cookie_secure=_env_bool("COOKIE_SECURE", False),
        cookie_domain=_optional("COOKIE_DOMAIN"),
        smtp_host=_optional("SMTP_HOST"),
        smtp_port=_env_int("SMTP_PORT", 587),
        smtp_user=_optional("SMTP_USER"),
        smtp_password=_optional("SMTP_PASSWORD"),
        smtp_from=_env("SMTP_FROM", "noreply@auto-auction.local"),
        app_base_url=_env("APP_BASE_URL", "http://localhost:4321").rstrip("/"),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
    )

    if settings.is_production:
        if settings.jwt_secret == PLACEHOLDER_JWT_SECRET:
            raise RuntimeError("JWT_SECRET must be set in production")
        if settings.jwt_refresh_secret == PLACEHOLDER_JWT_REFRESH_SECRET:
            raise RuntimeError("JWT_REFRESH_SECRET must be set in production")
    return settings
