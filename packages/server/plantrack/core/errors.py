"""
Error taxonomy and the FastAPI handlers that render it.

Services raise these; handlers turn them into the JSON envelope
``{"error": {"code", "message", "status"}}``. Internal causes are logged,
never echoed to the client.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

log = structlog.get_logger()


class PlanTrackError(Exception):
    """Base class for every error a caller is allowed to see."""

    status_code: int = 500
    code: str = "OPERATION_FAILED"
    message: str = "The operation could not be completed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

class InvalidCredential(PlanTrackError):
    status_code = 401
    code = "INVALID_CREDENTIAL"
    message = "Invalid credentials"


class UnknownUser(InvalidCredential):
    """Subject of a valid credential no longer resolves to a user.

    Rendered exactly like InvalidCredential so clients cannot probe for
    deleted accounts; kept separate for logging.
    """


# ---------------------------------------------------------------------------
# Scoping and membership
# ---------------------------------------------------------------------------

class NoOrganization(PlanTrackError):
    status_code = 403
    code = "NO_ORGANIZATION"
    message = "User is not a member of any organization"


class AccessDenied(PlanTrackError):
    status_code = 403
    code = "ACCESS_DENIED"
    message = "Access denied"


class AlreadyMember(PlanTrackError):
    status_code = 409
    code = "ALREADY_MEMBER"
    message = "User is already a member of this organization"


class InvalidInvite(PlanTrackError):
    """Covers not-found, expired and already-consumed invites alike."""

    status_code = 404
    code = "INVALID_INVITE"
    message = "Invite not found or expired"


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

class OnboardingRequired(PlanTrackError):
    status_code = 400
    code = "ONBOARDING_REQUIRED"
    message = "Must provide either organization name or invite token"


class DuplicateEmail(PlanTrackError):
    status_code = 400
    code = "DUPLICATE_EMAIL"
    message = "User with this email already exists"


class ValidationFailed(PlanTrackError):
    status_code = 400
    code = "VALIDATION_FAILED"
    message = "Invalid request"


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------

class NotFound(PlanTrackError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Not found"


class ShareExpired(PlanTrackError):
    status_code = 410
    code = "SHARE_EXPIRED"
    message = "Share has expired"


class OperationFailed(PlanTrackError):
    """Opaque store failure. The cause is chained and logged, not rendered."""


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def error_body(status: int, code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message, "status": status}}


async def plantrack_error_handler(request: Request, exc: PlanTrackError) -> JSONResponse:
    log.info(
        "request.rejected",
        error=type(exc).__name__,
        status=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.code, exc.message),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg')}" if field else ValidationFailed.message
    log.info("request.invalid", path=request.url.path, errors=len(errors))
    return JSONResponse(
        status_code=ValidationFailed.status_code,
        content=error_body(ValidationFailed.status_code, ValidationFailed.code, message),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error("request.failed", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_body(500, OperationFailed.code, OperationFailed.message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PlanTrackError, plantrack_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
