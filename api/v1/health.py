"""Liveness and readiness endpoints."""

import logging
import os
from pathlib import Path

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from api.deps import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness: the process is up. Does not touch the database."""
    return {
        "status": "ok",
        "env": config.settings.ENV,
        "watchers": config.settings.ENABLE_WATCHERS,
    }


def _storage_state(path: str) -> str:
    root = Path(path)
    if not root.is_dir():
        return "missing"
    return "ok" if os.access(root, os.W_OK) else "read-only"


@router.get("/health/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """
    Readiness: the database answers and both storage roots are writable.

    Returns 503 with the per-check breakdown when anything is not ``ok``.
    """
    checks = {
        "files": _storage_state(config.settings.FILE_STORAGE_DIR),
        "recycle_bin": _storage_state(config.settings.RECYCLE_BIN_DIR),
    }
    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        logger.warning("Readiness database check failed: %s", e)
        checks["database"] = "unavailable"

    ready = all(state == "ok" for state in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )
