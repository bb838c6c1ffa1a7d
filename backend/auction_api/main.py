import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from auction_api.api.auth import router as auth_router
from auction_api.api.favorites import router as favorites_router
from auction_api.api.stats import router as stats_router
from auction_api.api.vehicles import router as vehicles_router
from auction_api.core.config import Settings, load_settings
from auction_api.db.init_db import init_db
from auction_api.db.session import build_engine, build_session_factory
from auction_api.services.email import EmailService

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    content = {"detail": "Database error"}
    settings: Settings = request.app.state.settings
    if not settings.is_production:
        content["error"] = str(getattr(exc, "orig", None) or exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.db_auto_create:
            init_db(engine)
        logger.info("Auto Auction API started (env=%s).", settings.app_env)
        yield
        engine.dispose()

    app = FastAPI(title="Auto Auction API", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.email_service = EmailService(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)

    app.include_router(auth_router)
    app.include_router(vehicles_router)
    app.include_router(favorites_router)
    app.include_router(stats_router)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app


app = create_app()
