import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mistock.api.v1.api import api_router
from mistock.core.config import Settings, settings as default_settings
from mistock.core.errors import (
    CapacityError,
    MistockError,
    NotFoundError,
    PermissionDenied,
    StateError,
    ValidationError,
)
from mistock.core.logging import configure_logging
from mistock.db.mongo import MongoDatabase
from mistock.services.container import build_services

logger = logging.getLogger(__name__)


def status_for(exc: MistockError) -> int:
    """HTTP status for a domain error. Subclasses are checked before their bases."""
    if isinstance(exc, PermissionDenied):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, CapacityError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(exc, StateError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


async def mistock_error_handler(request: Request, exc: MistockError) -> JSONResponse:
    code = status_for(exc)
    logger.info("%s %s -> %d %s: %s", request.method, request.url.path, code, exc.code, exc.message)
    return JSONResponse(status_code=code, content={"detail": exc.message, "code": exc.code})


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or default_settings
    configure_logging(app_settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        mongo = None
        db = None
        if app_settings.STORAGE_BACKEND == "mongo":
            mongo = MongoDatabase(app_settings)
            db = await mongo.connect()
        app.state.services = build_services(app_settings, db)
        logger.info("Started %s with %s storage", app_settings.PROJECT_NAME, app_settings.STORAGE_BACKEND)
        yield
        if mongo is not None:
            await mongo.disconnect()

    app = FastAPI(
        title=app_settings.PROJECT_NAME,
        version=app_settings.PROJECT_VERSION,
        description=app_settings.DESCRIPTION,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MistockError, mistock_error_handler)

    @app.get("/")
    async def root():
        return {"message": f"Welcome to {app_settings.PROJECT_NAME}"}

    @app.get("/health")
    async def health():
        return {"status": "ok", "storage": app_settings.STORAGE_BACKEND}

    app.include_router(api_router, prefix=app_settings.API_V1_STR)
    return app


app = create_app()
