"""Registration error taxonomy and the JSON envelope every error response uses."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class IntakeError(Exception):
    """Base class for errors surfaced to callers as {success: false, ...}."""

    status_code = 500
    message = "Registration failed"

    def __init__(self, error: str | None = None, *, message: str | None = None, errors: list[str] | None = None):
        super().__init__(error or message or self.message)
        if message is not None:
            self.message = message
        self.error = error
        self.errors = errors

    def to_body(self) -> dict:
        body = {"success": False, "message": self.message}
        if self.errors is not None:
            body["errors"] = list(self.errors)
        elif self.error is not None:
            body["error"] = self.error
        return body


class ValidationError(IntakeError):
    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: list[str]):
        super().__init__(errors=errors)


class DuplicateEmailError(IntakeError):
    status_code = 400
    message = "Email already registered"

    def __init__(self):
        super().__init__("This email address has already been used for registration")


class DuplicateKeyError(IntakeError):
    """A unique index rejected the insert. `field` names the column that collided."""

    status_code = 400
    message = "Registration already exists"

    def __init__(self, field: str):
        super().__init__("This email or ticket ID already exists in the system")
        self.field = field


class UploadError(IntakeError):
    status_code = 500
    message = "Registration failed"


class StorageError(IntakeError):
    status_code = 500
    message = "Registration failed"


class FileConstraintError(IntakeError):
    status_code = 400
    message = "File upload error"


class RateLimitExceeded(IntakeError):
    status_code = 429
    message = "Too many registration attempts, please try again later."

    def __init__(self, retry_after: int):
        super().__init__()
        self.retry_after = retry_after


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(IntakeError)
    async def _intake_error(request: Request, exc: IntakeError):
        headers = None
        if isinstance(exc, RateLimitExceeded):
            headers = {"Retry-After": str(exc.retry_after)}
        return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        # A known path with the wrong method is still an unmatched route.
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={"success": False, "message": "Endpoint not found"})
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        errors = [f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}" for e in exc.errors()]
        return JSONResponse(status_code=400, content={"success": False, "message": "Validation failed", "errors": errors})

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error", "error": str(exc)},
        )
