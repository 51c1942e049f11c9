"""Error normalization and handlers."""

import logging
import builtins
from typing import Optional
from uuid import uuid4

from starlette.exceptions import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.requests import Request

from placesapi.core.logging import get_request_id


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None, request_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.request_id = request_id


class ValidationError(AppError, ValueError):
    code = "validation_error"
    status_code = 400


class PaymentRejectedError(ValidationError):
    """A payment capture failed one of the reconciliation gates."""
    code = "payment_rejected"


class UnauthorizedError(AppError):
    code = "unauthorized"
    status_code = 401


class PermissionError(AppError, builtins.PermissionError):
    code = "forbidden"
    status_code = 403


class NotFoundError(AppError, ValueError):
    code = "not_found"
    status_code = 404


class ConflictError(AppError):
    code = "conflict"
    status_code = 409


class GoneError(AppError):
    code = "gone"
    status_code = 410


class ConfigurationError(AppError):
    """A required secret or credential is missing."""
    code = "configuration_error"
    status_code = 500


class InvalidGenerationError(AppError):
    """The generation oracle returned unparseable or schema-violating content."""
    code = "invalid_generation"
    status_code = 502


class UpstreamUnavailableError(AppError):
    """An oracle could not be reached, timed out or answered non-2xx."""
    code = "upstream_unavailable"
    status_code = 503


class StoreBusyError(AppError):
    """A record lock could not be taken before the lock timeout."""
    code = "store_busy"
    status_code = 503


class CorruptRecordError(AppError):
    """A stored document does not have the expected shape."""
    code = "corrupt_record"
    status_code = 500


# Messages that must not reach clients verbatim
_REDACTED = {
    ConfigurationError.code: "Service is not configured",
}


def _extract_request_id(request: Request, fallback: Optional[str] = None) -> str:
    return (
        getattr(request.state, "request_id", None)
        or get_request_id()
        or fallback
        or str(uuid4())
    )


def _tag_error(request: Request, code: str) -> None:
    # Read back by the request log line and the HTTP span
    request.state.error_code = code


def _error_payload(code: str, message: str, request_id: str) -> dict:
    return {
        "error": {"code": code, "message": message, "request_id": request_id},
        "detail": message,
    }


async def app_error_handler(request: Request, exc: AppError):
    rid = exc.request_id or _extract_request_id(request)
    _tag_error(request, exc.code)
    message = _REDACTED.get(exc.code, exc.message)
    payload = _error_payload(exc.code, message, rid)
    logger = logging.getLogger("placesapi")
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        "app.error",
        extra={"request_id": rid, "error_code": exc.code, "error_message": exc.message, "status": exc.status_code},
    )
    response = JSONResponse(status_code=exc.status_code, content=payload)
    response.headers["x-request-id"] = rid
    return response


async def http_error_handler(request: Request, exc: HTTPException):
    rid = _extract_request_id(request)
    code = "not_found" if exc.status_code == 404 else "http_error"
    _tag_error(request, code)
    message = exc.detail if exc.detail else "HTTP error"
    payload = _error_payload(code, message, rid)
    logger = logging.getLogger("placesapi")
    logger.warning("http.error", extra={"request_id": rid, "error_code": code, "status": exc.status_code})
    response = JSONResponse(status_code=exc.status_code, content=payload)
    response.headers["x-request-id"] = rid
    return response


async def request_validation_handler(request: Request, exc: RequestValidationError):
    rid = _extract_request_id(request)
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid {field}: {first.get('msg')}" if field else "Invalid request"
    _tag_error(request, ValidationError.code)
    payload = _error_payload(ValidationError.code, message, rid)
    logging.getLogger("placesapi").warning(
        "request.invalid",
        extra={"request_id": rid, "error_code": ValidationError.code, "status": 400},
    )
    response = JSONResponse(status_code=400, content=payload)
    response.headers["x-request-id"] = rid
    return response


async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = _extract_request_id(request)
    logger = logging.getLogger("placesapi")
    logger.error("unhandled.exception", exc_info=True, extra={"request_id": rid, "error_code": "internal_error"})
    _tag_error(request, "internal_error")
    payload = _error_payload("internal_error", "Unexpected error", rid)
    response = JSONResponse(status_code=500, content=payload)
    response.headers["x-request-id"] = rid
    return response
