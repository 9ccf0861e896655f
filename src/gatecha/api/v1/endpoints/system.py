# src/gatecha/api/v1/endpoints/system.py
"""Liveness endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from gatecha.api.v1.dependencies import SessionDep

router = APIRouter(tags=["system"])
logger = logging.getLogger(__name__)


@router.get("/healthz")
async def healthz(db: SessionDep) -> JSONResponse:
    """Report healthy only when the store answers a trivial query."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Health check failed: %s", e)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"status": "unhealthy"}
        )
    return JSONResponse(status_code=status.HTTP_200_OK, content={"status": "healthy"})
