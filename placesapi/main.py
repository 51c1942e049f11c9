import logging
import os
import time
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

package_dir = os.path.dirname(os.path.abspath(__file__))
if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv(dotenv_path=os.path.join(package_dir, ".env"))

# Import after dotenv is loaded
from placesapi.core.config import settings, validate_config  # noqa: E402
from placesapi.core.errors import (  # noqa: E402
    AppError,
    app_error_handler,
    http_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from placesapi.core.logging import configure_logging  # noqa: E402
from placesapi.core.middleware.request_id import RequestIdMiddleware  # noqa: E402
from placesapi.core.middleware.tracing import TracingMiddleware  # noqa: E402
from placesapi.core.tracing import setup_tracing  # noqa: E402
from placesapi.core.validation import validate_env  # noqa: E402
from placesapi.api import ai, auth, cities, geo, health, payments  # noqa: E402

configure_logging(settings.ENV)
validate_env()
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))
setup_tracing(enabled=settings.OTEL_ENABLED)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("placesapi")
    logger.info("Starting Places To Visit API...")
    app.state.startup_time = time.time()
    try:
        yield
    finally:
        logging.getLogger("placesapi").info("Stopping Places To Visit API...")


app = FastAPI(title="Places To Visit API", lifespan=lifespan)

# Middlewares
app.add_middleware(RequestIdMiddleware)
app.add_middleware(TracingMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


def cors_options(raw_origins: str) -> dict:
    """CORS origins from a comma list; credentials only with an explicit allow-list."""
    origins = [origin.strip() for origin in (raw_origins or "").split(",") if origin.strip()] or ["*"]
    return {"allow_origins": origins, "allow_credentials": "*" not in origins}


app.add_middleware(
    CORSMiddleware,
    **cors_options(settings.CORS_ORIGINS),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.root_router)
app.include_router(auth.router)
app.include_router(cities.router)
app.include_router(geo.router)
app.include_router(ai.router)
app.include_router(payments.router)
