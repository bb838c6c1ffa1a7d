from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from auction_api.core.config import Settings
from auction_api.core.errors import InvalidTokenError
from auction_api.core.security import AccessClaims, decode_access_token
from auction_api.db.session import get_db
from auction_api.repositories.favorites import FavoritesRepository
from auction_api.repositories.market import MarketMappingRepository
from auction_api.repositories.users import UserRepository
from auction_api.repositories.vehicles import VehicleRepository
from auction_api.services.email import EmailService

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_email_service(request: Request) -> EmailService:
    return request.app.state.email_service


def get_vehicle_repository(db: Session = Depends(get_db)) -> VehicleRepository:
    return VehicleRepository(db)


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_favorites_repository(db: Session = Depends(get_db)) -> FavoritesRepository:
    return FavoritesRepository(db)


def get_market_repository(db: Session = Depends(get_db)) -> MarketMappingRepository:
    return MarketMappingRepository(db)


def get_current_claims(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
) -> AccessClaims:
    if not token:
        token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_access_token(token, settings)
    except InvalidTokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
