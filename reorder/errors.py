"""
Error taxonomy for the reorder service and its translation to HTTP responses.

Domain code raises the subclasses below; `install_error_handlers` turns them
into JSON bodies of the form ``{"detail": ..., "code": ...}``. Anything that is
not a ReorderError is logged with its traceback and reported as a generic
internal failure.
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger


class ConfigError(RuntimeError):
    """Raised at startup when required configuration is missing or invalid."""


class ReorderError(Exception):
    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ReorderError):
    code = "VALIDATION_ERROR"
    status_code = 400


class InvalidAdjustmentError(ReorderError):
    code = "INVALID_ADJUSTMENT"
    status_code = 400


class NotFoundError(ReorderError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class UserNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("user")


class DuplicateConstraintError(ReorderError):
    code = "DUPLICATE"
    status_code = 409


class DuplicateEmailError(DuplicateConstraintError):
    code = "DUPLICATE_EMAIL"

    def __init__(self):
        super().__init__("email already registered")


class DuplicateNameError(DuplicateConstraintError):
    code = "DUPLICATE_NAME"

    def __init__(self, name: str):
        super().__init__(f"a list named {name!r} already exists")


class UnauthorizedError(ReorderError):
    """Bad sign-in credentials."""

    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(self, message: str = "incorrect email or password"):
        super().__init__(message)


class UnauthenticatedError(ReorderError):
    """Request reached a protected route without a usable access token."""

    code = "UNAUTHENTICATED"
    status_code = 401

    def __init__(self, message: str = "you must be logged in to perform this action"):
        super().__init__(message)


class TokenError(ReorderError):
    code = "TOKEN_INVALID"
    status_code = 401


class TokenInvalidError(TokenError):
    def __init__(self, message: str = "invalid token"):
        super().__init__(message)


class TokenExpiredError(TokenError):
    code = "TOKEN_EXPIRED"

    def __init__(self, message: str = "token expired"):
        super().__init__(message)


class TokenMalformedError(TokenError):
    code = "TOKEN_MALFORMED"

    def __init__(self, message: str = "malformed token"):
        super().__init__(message)


class InternalFailureError(ReorderError):
    def __init__(self, message: str = "an unexpected error occurred"):
        super().__init__(message)


def error_response(status_code: int, detail: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, "code": code})


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ReorderError)
    async def reorder_error_handler(request: Request, exc: ReorderError):
        if exc.status_code >= 500:
            logger.opt(exception=exc).error("{} {} failed: {}", request.method, request.url.path, exc.code)
            return error_response(exc.status_code, InternalFailureError().message, exc.code)
        logger.warning("{} {} -> {} {}", request.method, request.url.path, exc.status_code, exc.code)
        return error_response(exc.status_code, exc.message, exc.code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.warning("{} {} -> invalid request data", request.method, request.url.path)
        return error_response(400, "invalid request data", ValidationError.code)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.opt(exception=exc).error("unhandled {} on {} {}", type(exc).__name__, request.method, request.url.path)
        return error_response(500, InternalFailureError().message, InternalFailureError.code)
