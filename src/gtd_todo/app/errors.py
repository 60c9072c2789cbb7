import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from gtd_todo.domain.errors import (
    AuthenticationError,
    EmailAlreadyRegisteredError,
    InvalidReorderRequestError,
    SystemListMismatchError,
    TaskNotFoundError,
    TaskOwnershipError,
    TasksNotFoundError,
    TodoAppError,
)

logger = logging.getLogger("gtd.system")

STATUS_BY_ERROR = {
    TaskNotFoundError: 404,
    TasksNotFoundError: 404,
    TaskOwnershipError: 403,
    SystemListMismatchError: 400,
    InvalidReorderRequestError: 422,
    EmailAlreadyRegisteredError: 409,
    AuthenticationError: 401,
}


def status_for(exc: TodoAppError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return 400


async def handle_app_error(request: Request, exc: TodoAppError) -> JSONResponse:
    status_code = status_for(exc)
    logger.warning(
        "request.rejected",
        extra={
            "category": "http",
            "event": "request.rejected",
            "request_id": getattr(request.state, "request_id", None),
            "path": request.url.path,
            "status_code": status_code,
            "error": type(exc).__name__,
            "detail": str(exc),
        },
    )
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content={"message": str(exc)}, headers=headers)


def _describe(error: dict) -> str:
    # ("body", "systemList") -> "systemList"
    loc = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
    return f"{loc}: {error.get('msg')}" if loc else str(error.get("msg"))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "; ".join(_describe(e) for e in errors) or "Invalid request."
    logger.warning(
        "request.invalid",
        extra={
            "category": "http",
            "event": "request.invalid",
            "request_id": getattr(request.state, "request_id", None),
            "path": request.url.path,
            "status_code": 422,
            "detail": message,
        },
    )
    return JSONResponse(
        status_code=422,
        content={"message": message, "errors": jsonable_encoder(errors)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TodoAppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
