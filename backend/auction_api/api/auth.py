import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError

from auction_api.api.deps import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_current_claims,
    get_email_service,
    get_settings,
    get_user_repository,
)
from auction_api.core.config import Settings
from auction_api.core.errors import DuplicateEmailError, InvalidTokenError, VerificationTokenError
from auction_api.core.security import (
    VERIFICATION_TOKEN_TTL,
    AccessClaims,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    new_verification_token,
    verify_password,
)
from auction_api.db.base import utcnow
from auction_api.models.user import User
from auction_api.repositories.users import UserRepository
from auction_api.schemas.auth import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    UserOut,
)
from auction_api.services.email import EmailService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

REFRESH_COOKIE_PATH = "/api/auth"


def _set_auth_cookies(response: Response, *, access_token: str, refresh_token: str, settings: Settings) -> None:
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        access_token,
        max_age=settings.access_token_max_age,
        path="/",
        domain=settings.cookie_domain,
        secure=settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        refresh_token,
        max_age=settings.refresh_token_max_age,
        path=REFRESH_COOKIE_PATH,
        domain=settings.cookie_domain,
        secure=settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )


def _clear_auth_cookies(response: Response, settings: Settings) -> None:
    for key, path in ((ACCESS_TOKEN_COOKIE, "/"), (REFRESH_TOKEN_COOKIE, REFRESH_COOKIE_PATH)):
        response.delete_cookie(
            key,
            path=path,
            domain=settings.cookie_domain,
            secure=settings.cookie_secure,
            httponly=True,
            samesite="lax",
        )


def _issue_tokens(response: Response, user: User, settings: Settings) -> str:
    access_token = create_access_token(user_id=user.id, email=user.email, name=user.name, settings=settings)
    refresh_token = create_refresh_token(user_id=user.id, settings=settings)
    _set_auth_cookies(response, access_token=access_token, refresh_token=refresh_token, settings=settings)
    return access_token


def _queue_verification_email(
    user: User,
    repo: UserRepository,
    email_service: EmailService,
    background_tasks: BackgroundTasks,
) -> bool:
    token = new_verification_token()
    try:
        repo.create_verification_token(user_id=user.id, token=token, expires_at=utcnow() + VERIFICATION_TOKEN_TTL)
    except SQLAlchemyError:
        # The account stays usable; the user can ask for another link later.
        repo.db.rollback()
        logger.exception("Failed to store verification token for user id=%s.", user.id)
        return False

    background_tasks.add_task(email_service.send_verification_email, user.email, user.name, token)
    return True


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    repo: UserRepository = Depends(get_user_repository),
    email_service: EmailService = Depends(get_email_service),
    settings: Settings = Depends(get_settings),
) -> RegisterResponse:
    try:
        user = repo.create(email=payload.email, password_hash=hash_password(payload.password), name=payload.name)
    except DuplicateEmailError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="email already registered") from exc

    logger.info("Registered user id=%s.", user.id)
    sent = _queue_verification_email(user, repo, email_service, background_tasks)
    access_token = _issue_tokens(response, user, settings)
    return RegisterResponse(
        access_token=access_token,
        expires_in=settings.access_token_max_age,
        user=UserOut.model_validate(user),
        email_verification_sent=sent,
        email=user.email,
    )


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    response: Response,
    repo: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings),
) -> TokenResponse:
    user = repo.get_by_email(payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid credentials")

    access_token = _issue_tokens(response, user, settings)
    return TokenResponse(
        access_token=access_token,
        expires_in=settings.access_token_max_age,
        user=UserOut.model_validate(user),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, settings: Settings = Depends(get_settings)) -> MessageResponse:
    _clear_auth_cookies(response, settings)
    return MessageResponse(message="logged out")


@router.post("/refresh", response_model=TokenResponse)
def refresh(
    request: Request,
    response: Response,
    repo: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings),
) -> TokenResponse:
    token = request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="refresh token missing")
    try:
        user_id = decode_refresh_token(token, settings)
    except InvalidTokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid refresh token") from exc

    user = repo.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="user not found")

    access_token = _issue_tokens(response, user, settings)
    return TokenResponse(
        access_token=access_token,
        expires_in=settings.access_token_max_age,
        user=UserOut.model_validate(user),
    )


@router.get("/verify-email", response_model=MessageResponse)
def verify_email(
    token: str | None = Query(None),
    repo: UserRepository = Depends(get_user_repository),
) -> MessageResponse:
    if not token or not token.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="token is required")
    try:
        repo.verify_email(token.strip())
    except VerificationTokenError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return MessageResponse(message="email verified")


@router.get("/me", response_model=UserOut)
def me(
    claims: AccessClaims = Depends(get_current_claims),
    repo: UserRepository = Depends(get_user_repository),
) -> UserOut:
    user = repo.get_by_id(claims.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user not found")
    return UserOut.model_validate(user)


@router.post("/resend-verification", response_model=MessageResponse)
def resend_verification(
    background_tasks: BackgroundTasks,
    claims: AccessClaims = Depends(get_current_claims),
    repo: UserRepository = Depends(get_user_repository),
    email_service: EmailService = Depends(get_email_service),
) -> MessageResponse:
    user = repo.get_by_id(claims.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user not found")
    if user.email_verified:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="email already verified")

    if not _queue_verification_email(user, repo, email_service, background_tasks):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="failed to create verification token")
    return MessageResponse(message="verification email sent")
