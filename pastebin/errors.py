"""
Storage errors and the FastAPI exception handlers that turn failures into
HTTP responses.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """The backing store could not complete an operation."""


class PasteExistsError(PersistenceError):
    """A paste with the requested id is already stored."""


class ContentionError(PersistenceError):
    """The view counter kept changing underneath us; retries exhausted."""


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    message = str(first.get("msg", "Invalid request"))
    # pydantic prefixes messages raised from validators
    message = message.removeprefix("Value error, ")
    if location:
        return f"{'.'.join(location)}: {message}"
    return message


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing input is a client error (400), not 422."""
    message = _validation_message(exc)
    logger.info(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"detail": message})


async def persistence_exception_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.exception(f"Store failure on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PersistenceError, persistence_exception_handler)
