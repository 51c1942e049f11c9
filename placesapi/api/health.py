"""
Health and service info endpoints.

Safe to expose: no secrets, no file system paths.
"""

import logging
import os

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from placesapi import __version__
from placesapi.core.config import settings

logger = logging.getLogger("placesapi")

root_router = APIRouter(tags=["health"])


@root_router.get("/")
def root():
    return {"status": "OK", "name": "Places To Visit API", "version": __version__}


@root_router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}


@root_router.get("/readyz")
def readyz():
    """Readiness check: data directory present and writable."""
    data_dir = settings.DATA_DIR
    countries_dir = os.path.join(data_dir, "countries")
    if not os.path.isdir(countries_dir):
        logger.warning("[readyz] countries directory missing")
        return JSONResponse(status_code=503, content={"status": "error", "detail": "data directory missing"})
    if not os.access(data_dir, os.W_OK):
        logger.warning("[readyz] data directory not writable")
        return JSONResponse(status_code=503, content={"status": "error", "detail": "data directory not writable"})
    return {"status": "ok"}
