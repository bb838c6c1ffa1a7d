import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from auction_api.core.config import Settings
from auction_api.core.errors import InvalidTokenError

JWT_ALGORITHM = "HS256"
JWT_ISSUER = "auto-auction"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"
VERIFICATION_TOKEN_BYTES = 32
VERIFICATION_TOKEN_TTL = timedelta(hours=24)

# bcrypt only looks at the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class AccessClaims:
    user_id: int
    email: str
    name: str


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


def new_verification_token() -> str:
    return secrets.token_hex(VERIFICATION_TOKEN_BYTES)


def _encode(claims: dict[str, object], secret: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iss": JWT_ISSUER, "iat": now, "exp": now + lifetime}
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def _decode(token: str, secret: str, token_type: str) -> dict[str, object]:
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM], issuer=JWT_ISSUER)
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc
    if payload.get("type") != token_type:
        raise InvalidTokenError(f"expected a {token_type} token")
    return payload


def _subject_to_user_id(payload: dict[str, object]) -> int:
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject.isdigit():
        raise InvalidTokenError("token subject is not a user id")
    return int(subject)


def create_access_token(*, user_id: int, email: str, name: str, settings: Settings) -> str:
    claims = {"sub": str(user_id), "email": email, "name": name, "type": ACCESS_TOKEN_TYPE}
    return _encode(claims, settings.jwt_secret, timedelta(minutes=settings.jwt_access_expiry_mins))


def create_refresh_token(*, user_id: int, settings: Settings) -> str:
    claims = {"sub": str(user_id), "type": REFRESH_TOKEN_TYPE}
    return _encode(claims, settings.jwt_refresh_secret, timedelta(days=settings.jwt_refresh_expiry_days))


def decode_access_token(token: str, settings: Settings) -> AccessClaims:
    payload = _decode(token, settings.jwt_secret, ACCESS_TOKEN_TYPE)
    return AccessClaims(
        user_id=_subject_to_user_id(payload),
        email=str(payload.get("email") or ""),
        name=str(payload.get("name") or ""),
    )


def decode_refresh_token(token: str, settings: Settings) -> int:
    payload = _decode(token, settings.jwt_refresh_secret, REFRESH_TOKEN_TYPE)
    return _subject_to_user_id(payload)
