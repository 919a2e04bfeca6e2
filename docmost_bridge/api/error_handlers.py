"""Error Handlers — how bridge failures reach HTTP callers.

Invariants:
    - BridgeError → its own http_status; body carries the remote status and remote body
      so the calling tool can show the Docmost message
    - Malformed shim requests → 400 with one entry per offending field
    - Anything else → 500 with a fixed message; the traceback only goes to the log

Design Decisions:
    - Registered from main.py through register_error_handlers(app)
    - HTTPException (shim-key 401) is left to FastAPI's default handler
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from docmost_bridge.core.errors import BridgeError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    _register_bridge_error_handler(app)
    _register_validation_error_handler(app)
    _register_fallback_handler(app)


def _register_bridge_error_handler(app: FastAPI) -> None:

    @app.exception_handler(BridgeError)
    async def bridge_error_handler(request: Request, exc: BridgeError):
        logger.error(
            f"{exc.code} on {request.url.path}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "status_code": exc.status_code,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def shim_request_invalid(request: Request, exc: RequestValidationError):
        problems = _field_problems(exc)
        logger.warning(
            f"Rejected shim request to {request.url.path}: "
            f"{', '.join(p['field'] for p in problems)}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Invalid shim request",
                    "category": "validation",
                    "severity": ErrorSeverity.ERROR.value,
                    "details": problems,
                },
            },
        )


def _register_fallback_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def unexpected_failure(request: Request, exc: Exception):
        logger.error(
            f"Bridge failure on {request.url.path}: {exc}", exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "The bridge failed to handle this request",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _field_problems(exc: RequestValidationError) -> list[dict]:
    """Flatten pydantic errors to {field, message, type}; field drops the 'body' prefix."""
    problems = []
    for e in exc.errors():
        loc = [str(part) for part in e["loc"]]
        if loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        problems.append({
            "field": ".".join(loc) or "body",
            "message": e["msg"],
            "type": e["type"],
        })
    return problems
