"""
Exception types and their HTTP translation.

Storage failures surface as `StorageError` from the repository layer and are
turned into a generic 500 here. Request binding failures (missing fields,
malformed UUIDs, bad JSON) are answered with 400 instead of FastAPI's 422.
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from students_api.logging_config import get_logger, log_event

logger = get_logger("db")


class StudentsApiError(Exception):
    """Base class for errors raised by the Students API."""


class StorageError(StudentsApiError):
    """The relational store could not complete an operation."""

    def __init__(self, operation: str, cause: Exception = None):
        self.operation = operation
        self.cause = cause
        message = f"Storage failure during {operation}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    log_event(logger, "ERROR", str(exc),
        context={"operation": exc.operation},
        extra_data={"method": request.method, "path": request.url.path})
    return JSONResponse(status_code=500, content={"detail": "Internal error"})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
