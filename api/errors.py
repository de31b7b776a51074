"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from auth.exceptions import AuthenticationRequiredError
from clients.identity_client import IdentityProviderError
from core.errors import (
    DatabaseUnavailableError,
    NoteForbiddenError,
    NoteNotFoundError,
    NoteUpdateFailedError,
)

logger = logging.getLogger(__name__)

DATABASE_DISABLED_MESSAGE = "Notes are disabled because no database is configured."


def _json_error(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message).model_dump(mode="json"),
    )


def _validation_message(errors: list[dict]) -> str:
    messages = []
    for error in errors:
        message = error.get("msg", "Invalid value")
        message = message.removeprefix("Value error, ")
        messages.append(message)
    return "; ".join(messages) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(AuthenticationRequiredError)
    async def authentication_required_handler(request: Request, exc: AuthenticationRequiredError):
        return _json_error(401, ErrorCodes.NOT_AUTHENTICATED, "Authentication required")

    @app.exception_handler(NoteNotFoundError)
    async def not_found_handler(request: Request, exc: NoteNotFoundError):
        return _json_error(404, ErrorCodes.NOT_FOUND, str(exc))

    @app.exception_handler(NoteForbiddenError)
    async def forbidden_handler(request: Request, exc: NoteForbiddenError):
        return _json_error(403, ErrorCodes.FORBIDDEN, str(exc))

    @app.exception_handler(NoteUpdateFailedError)
    async def update_failed_handler(request: Request, exc: NoteUpdateFailedError):
        return _json_error(409, ErrorCodes.UPDATE_FAILED, str(exc))

    @app.exception_handler(DatabaseUnavailableError)
    async def database_unavailable_handler(request: Request, exc: DatabaseUnavailableError):
        logger.warning(f"Notes store unavailable: {exc}")
        return _json_error(503, ErrorCodes.SERVICE_UNAVAILABLE, DATABASE_DISABLED_MESSAGE)

    @app.exception_handler(IdentityProviderError)
    async def identity_provider_handler(request: Request, exc: IdentityProviderError):
        return _json_error(502, ErrorCodes.IDENTITY_PROVIDER_ERROR, "Identity provider unavailable")

    @app.exception_handler(ValidationError)
    async def model_validation_handler(request: Request, exc: ValidationError):
        return _json_error(400, ErrorCodes.VALIDATION_ERROR, _validation_message(exc.errors()))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _json_error(400, ErrorCodes.VALIDATION_ERROR, _validation_message(exc.errors()))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return _json_error(400, ErrorCodes.INVALID_REQUEST, str(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return _json_error(500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
