"""Global error handlers: every failure is a JSON body with a stable ``error`` kind."""

from http import HTTPStatus

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rejection.config import Settings
from rejection.errors import RejectionError

logger = structlog.get_logger()

_HTTP_KINDS = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    429: "too_many_requests",
    503: "service_unavailable",
}


def error_body(kind: str, detail: object, *, retryable: bool = False) -> dict[str, object]:
    body: dict[str, object] = {"error": kind, "detail": detail}
    if retryable:
        body["retryable"] = True
    return body


def _kind_for_status(status_code: int) -> str:
    if status_code in _HTTP_KINDS:
        return _HTTP_KINDS[status_code]
    try:
        return HTTPStatus(status_code).phrase.lower().replace(" ", "_").replace("-", "_")
    except ValueError:
        return "error"


def setup_error_handlers(app: FastAPI, settings: Settings) -> None:
    """Register global exception handlers."""

    @app.exception_handler(RejectionError)
    async def rejection_error_handler(request: Request, exc: RejectionError) -> JSONResponse:
        """Map domain errors onto their HTTP status."""
        log = logger.warning if exc.status_code >= 500 else logger.info
        log(
            "request_rejected",
            path=request.url.path,
            method=request.method,
            error_kind=exc.kind,
            error=exc.message,
        )
        headers = None
        if exc.retryable:
            headers = {"Retry-After": str(settings.transient_retry_after_seconds)}
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.kind, exc.message, retryable=exc.retryable),
            headers=headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Keep the HTTPException detail and derive the error kind from its status."""
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(_kind_for_status(exc.status_code), exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Request bodies that do not match the schema."""
        content = error_body("validation_error", "Validation error")
        content["errors"] = jsonable_encoder(exc.errors())
        return JSONResponse(status_code=422, content=content)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions, always JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content=error_body("internal_error", "Internal server error"),
        )
