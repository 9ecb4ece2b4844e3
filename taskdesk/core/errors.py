import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class TaskDeskError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"
    headers: dict[str, str] | None = None

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidInput(TaskDeskError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input"


class InvalidCredentials(TaskDeskError):
    # Same message for unknown email and wrong password
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid email or password"


class Unauthenticated(TaskDeskError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated"
    headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(TaskDeskError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class NotFound(TaskDeskError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class DuplicateEmail(TaskDeskError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Email already registered"


async def _taskdesk_error_handler(request: Request, exc: TaskDeskError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=InvalidInput.status_code,
        content={"detail": jsonable_encoder(exc.errors())},
    )


async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": TaskDeskError.default_detail})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskDeskError, _taskdesk_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
