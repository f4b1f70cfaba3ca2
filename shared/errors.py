"""
Error taxonomy shared by every service, plus the FastAPI handler that renders it.
"""

from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shared.response_models import ErrorResponse
from shared.utils import setup_logging

logger = setup_logging("easydeck-errors")


class EasyDeckError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    error_code = "internal_error"
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(EasyDeckError):
    """No verified caller identity."""

    status_code = 401
    error_code = "unauthenticated"
    default_message = "Not authenticated"


class UnauthorizedError(EasyDeckError):
    """Caller is authenticated but does not own the resource."""

    status_code = 403
    error_code = "unauthorized"
    default_message = "Unauthorized"


class NotFoundError(EasyDeckError):
    status_code = 404
    error_code = "not_found"
    default_message = "Not found"


class DeckNotFoundError(NotFoundError):
    default_message = "Deck not found"


class SlideNotFoundError(NotFoundError):
    default_message = "Slide not found"


class ExternalAuthRequiredError(EasyDeckError):
    """The caller is signed in but has no usable Google credential."""

    status_code = 401
    error_code = "google_auth_required"
    default_message = "Google authentication required. Please connect your Google account."


class DeckNotLinkedError(EasyDeckError):
    status_code = 409
    error_code = "deck_not_linked"
    default_message = "Deck is not linked to a Google Slides presentation"


class InvalidPresentationReferenceError(EasyDeckError):
    status_code = 400
    error_code = "invalid_presentation"
    default_message = (
        "Invalid Google Slides URL or ID. Please provide a valid Google Slides presentation URL or ID."
    )


class GoogleSlidesAPIError(EasyDeckError):
    """Non-success response from the Google Slides API."""

    status_code = 502
    error_code = "google_api_error"
    default_message = "Google Slides request failed"

    def __init__(self, message: str | None = None, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class PresentationAccessDeniedError(GoogleSlidesAPIError):
    status_code = 403
    error_code = "google_access_denied"
    default_message = (
        "You do not have access to this presentation. Please make sure you have edit permissions."
    )


class PresentationNotFoundError(GoogleSlidesAPIError):
    status_code = 404
    error_code = "google_not_found"
    default_message = "Presentation not found. Please check the presentation ID or URL."


async def easydeck_error_handler(request: Request, exc: EasyDeckError) -> JSONResponse:
    """Render an EasyDeckError as the standard ErrorResponse body."""
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    payload = ErrorResponse(
        message=exc.message,
        error=type(exc).__name__,
        error_code=exc.error_code,
        upstream_status=getattr(exc, "status", None),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    return JSONResponse(status_code=exc.status_code, content=payload.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EasyDeckError, easydeck_error_handler)
