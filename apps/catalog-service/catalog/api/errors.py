"""
Translate store errors into JSON error envelopes.

Expected outcomes (validation, not found, conflict) carry their message to the
client. Storage faults are logged with the internal detail and answered with a
generic message.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog.db.errors import (
    EditConflict,
    FailedValidation,
    RecordNotFound,
    StorageFault,
    TimeoutFault,
)

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "the server encountered a problem and could not process your request"
TIMEOUT_MESSAGE = "the server could not complete your request in time"
EDIT_CONFLICT_MESSAGE = "unable to update the record due to an edit conflict, please try again"


def error_response(status_code: int, message) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def failed_validation_handler(request: Request, exc: FailedValidation):
    return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc.errors)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for err in exc.errors():
        # Drop the leading "body"/"query"/"path" segment.
        loc = [str(part) for part in err.get("loc", ())][1:]
        errors.setdefault(".".join(loc) or "body", err.get("msg", "invalid value"))
    return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, errors)


async def record_not_found_handler(request: Request, exc: RecordNotFound):
    return error_response(status.HTTP_404_NOT_FOUND, str(exc))


async def edit_conflict_handler(request: Request, exc: EditConflict):
    return error_response(status.HTTP_409_CONFLICT, EDIT_CONFLICT_MESSAGE)


async def storage_fault_handler(request: Request, exc: StorageFault):
    logger.error(
        "storage_fault: method=%s url=%s error=%s cause=%r",
        request.method,
        request.url,
        exc,
        exc.__cause__,
    )
    if isinstance(exc, TimeoutFault):
        return error_response(status.HTTP_504_GATEWAY_TIMEOUT, TIMEOUT_MESSAGE)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR_MESSAGE)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "the requested resource could not be found"
    elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        message = f"the {request.method} method is not supported for this resource"
    else:
        message = exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error: method=%s url=%s", request.method, request.url)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR_MESSAGE)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FailedValidation, failed_validation_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RecordNotFound, record_not_found_handler)
    app.add_exception_handler(EditConflict, edit_conflict_handler)
    app.add_exception_handler(StorageFault, storage_fault_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
