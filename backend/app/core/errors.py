# app/core/errors.py
"""
Error taxonomy shared by services and routers.

Services raise a ServiceError subclass; the exception handlers registered in
app.main render it as the standard response envelope:

    {"success": false, "message": "<user-safe text>"}
"""
import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("uvicorn.error")


class ServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None, **payload):
        self.message = message or self.default_message
        self.payload = payload
        super().__init__(self.message)


class ValidationFailed(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class Conflict(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Already exists"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class Unauthorized(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class CodeExpired(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Verification code has expired. Please sign up again to get a new code."


class CodeInvalid(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Incorrect verification code"


class UpstreamError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Upstream service failed"


def envelope(success: bool, message: str, **payload) -> dict:
    return {"success": success, "message": message, **payload}


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(False, exc.message, **exc.payload),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render pydantic request errors as a 400 envelope naming the first bad field."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=envelope(False, message))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("[api] unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=envelope(False, "Internal server error"),
    )
