# errors.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class PotholeError(Exception):
    """Base for every error that maps onto the ``{success: false, ...}`` envelope."""

    status_code = 500
    code = "InternalError"
    message = "Internal Server Error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(PotholeError):
    status_code = 400
    code = "ValidationError"
    message = "Please enter correct body structure"


class AuthError(PotholeError):
    status_code = 401
    code = "AuthError"
    message = "Unauthorized"


class MissingTokenError(AuthError):
    code = "MissingToken"
    message = "Please provide a token"


class InvalidTokenError(AuthError):
    code = "InvalidToken"
    message = "Invalid token"


class MissingSecretError(AuthError):
    status_code = 500
    code = "MissingSecret"
    message = "JWT secret is not configured"


class DuplicateEmailError(PotholeError):
    status_code = 400
    code = "DuplicateEmailError"
    message = "Email already in use"


class NotFoundError(PotholeError):
    status_code = 404
    code = "NotFoundError"
    message = "Not found"


class InvalidCredentialsError(PotholeError):
    status_code = 401
    code = "InvalidCredentialsError"
    message = "Incorrect password"


class InvalidUploadError(PotholeError):
    status_code = 400
    code = "InvalidUploadError"
    message = "Upload error"


class UpstreamError(PotholeError):
    status_code = 502
    code = "UpstreamError"
    message = "Upstream service failed"


def error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": code},
    )


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(PotholeError)
    async def _pothole_error(request: Request, exc: PotholeError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
        return error_response(exc.status_code, exc.message, exc.code)

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = errors[0].get("msg") if errors else None
        message = ValidationError.message if not detail else f"{ValidationError.message}: {detail}"
        return error_response(400, message, ValidationError.code)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), "HTTPError")

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} crashed: {exc}")
        return error_response(500, "Internal Server Error", PotholeError.code)
