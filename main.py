"""FastAPI application factory and main entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
import logging_config
from api import router as api_router
from db import AsyncSessionLocal, close_db, init_db
from services.recycle_bin_service import run_scheduled_cleanup

logging_config.setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Prepare tables and storage, run the recycle bin cleanup in the background,
    and dispose of the engine on shutdown.
    """
    await init_db()

    stop = asyncio.Event()
    cleanup_task = None
    interval_hours = config.settings.RECYCLE_BIN_CLEANUP_INTERVAL_HOURS
    if interval_hours > 0:
        cleanup_task = asyncio.create_task(
            run_scheduled_cleanup(
                AsyncSessionLocal, interval_seconds=interval_hours * 3600, stop=stop
            )
        )
    logger.info(
        "Roof Take-offs backend started (env=%s, recycle bin cleanup every %sh)",
        config.settings.ENV,
        interval_hours or "never",
    )
    yield

    stop.set()
    if cleanup_task is not None:
        await cleanup_task
    await close_db()


app = FastAPI(
    title="Roof Take-offs Backend",
    description="Projects, clients, files and invoices for roofing take-offs",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router.api_router, prefix=config.settings.API_PREFIX)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Roof Take-offs Backend API",
        "version": "0.1.0",
    }
