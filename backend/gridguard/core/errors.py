"""Domain errors and their HTTP mapping.

ValidationError  -> 400, request rejected before any state changes
AuthError        -> 403, privileged key missing or wrong
ConfigError      -> 503, no server-side secret configured at all
PersistenceError -> never reaches a client; stores log it and keep the
                    in-memory effect
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("gridguard.errors")


class GridGuardError(Exception):
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(GridGuardError):
    """Missing or malformed required field (zoneId, zone, timestamps)."""
    status_code = 400


class AuthError(GridGuardError):
    status_code = 403


class ConfigError(GridGuardError):
    status_code = 503


class PersistenceError(GridGuardError):
    """Durable document could not be written."""

    def __init__(self, path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"failed to write {path}: {cause}")


async def _domain_error_handler(request: Request, exc: GridGuardError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    else:
        logger.warning("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GridGuardError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
