# src/gatecha/main.py
"""Main entry point for the GateCHA gateway."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from gatecha.api.v1 import (
    auth_router,
    challenge_router,
    keys_router,
    public_router,
    stats_router,
    system_router,
)
from gatecha.core.errors import GatechaError, InternalError
from gatecha.core.logging_config import setup_logging
from gatecha.core.settings import settings
from gatecha.db.session import SessionLocal, create_tables
from gatecha.services.credentials import CredentialManager
from gatecha.services.reaper import Reaper

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Self-hosted proof-of-work captcha verification gateway",
    version=settings.app_version,
)

# Browser widgets call the public API cross-origin; reflect the caller unless allow-all is set.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.cors_allow_all else [],
    allow_origin_regex=None if settings.cors_allow_all else ".*",
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Include API routers
app.include_router(challenge_router, prefix="/api/v1")
app.include_router(public_router, prefix="/api/public")
app.include_router(auth_router, prefix="/api/admin")
app.include_router(keys_router, prefix="/api/admin")
app.include_router(stats_router, prefix="/api/admin")
app.include_router(system_router)


@app.exception_handler(GatechaError)
async def gatecha_error_handler(request: Request, exc: GatechaError) -> JSONResponse:
    """Render service errors as ``{"error": message}`` with the error's status."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"error": "invalid request"}
    )


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.on_event("startup")
async def on_startup() -> None:
    setup_logging(settings.log_level)
    if settings.generated_secret_key:
        logger.warning(
            "GATECHA_SECRET_KEY is not set; generated a random key. "
            "Admin sessions will not survive a restart."
        )

    create_tables()
    with SessionLocal() as db:
        created = CredentialManager(db).ensure_admin(
            settings.admin_username, settings.admin_password
        )
    if created and settings.generated_admin_password:
        logger.warning(
            "GATECHA_ADMIN_PASSWORD is not set; created admin %r with generated password: %s",
            settings.admin_username,
            settings.admin_password,
        )

    reaper = Reaper(settings.cleanup_interval_seconds)
    await reaper.start()
    app.state.reaper = reaper
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    reaper: Reaper | None = getattr(app.state, "reaper", None)
    if reaper:
        await reaper.stop()
    logger.info("%s stopped", settings.app_name)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
