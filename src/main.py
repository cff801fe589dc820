"""Flow Index API — FastAPI application entry point.

Run locally:
    uvicorn src.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config import get_settings
from src.cycles.config_loader import get_cycle_config, reload_cycle_config
from src.cycles.dates import InvalidDateError
from src.models.base import ErrorDetail
from src.routers import cycles, health

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("flowindex")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings = get_settings()
    logger.info(
        "Starting Flow Index API v%s [%s]",
        settings.app_version,
        settings.environment,
    )
    # Fail at startup rather than on the first request if the YAML is bad
    if settings.cycle_config_path is not None:
        reload_cycle_config(settings.cycle_config_path)
    else:
        get_cycle_config()
    yield
    logger.info("Flow Index API shut down")


# ---------- Error handlers ----------

async def invalid_date_handler(request: Request, exc: InvalidDateError) -> JSONResponse:
    logger.warning("Rejected request to %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content=ErrorDetail(detail=str(exc)).model_dump())


# ---------- App factory ----------

def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Flow Index API",
        description=(
            "Menstrual cycle tracking engine — cycle detection from daily logs, "
            "smart cycle length, regularity, calendar predictions and current phase."
        ),
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_exception_handler(InvalidDateError, invalid_date_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Health check (outside v1 prefix — always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    v1_prefix = "/api/v1"

    app.include_router(cycles.router, prefix=v1_prefix)

    return app


app = create_app()
