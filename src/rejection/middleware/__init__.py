"""Middleware registration."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rejection.config import Settings
from rejection.middleware.error_handler import setup_error_handlers
from rejection.middleware.logging import setup_logging
from rejection.middleware.request_context import REQUEST_ID_HEADER, RequestContextMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register logging, error handlers and the middleware stack.

    Starlette runs middleware in reverse-add order, so CORS is added last and
    wraps every response, error responses included.
    """
    setup_logging(settings)
    setup_error_handlers(app, settings)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", REQUEST_ID_HEADER],
        # Retry-After accompanies retryable 503s
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
    )
