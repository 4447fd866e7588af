"""
Error types raised by the API and the handlers that turn them into the JSON
error envelope:

    {"error": true, "status_code": 404, "message": "...", "details": {...}}
"""

import logging
from typing import Optional, Union

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

logger = logging.getLogger("rankchallenge")


class ChallengeTrackerException(Exception):
    """Base class for errors that map directly to an HTTP status."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, details: dict = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}


class ChallengeNotFoundError(ChallengeTrackerException):
    status_code = 404

    def __init__(self, challenge_id: str = None):
        if challenge_id:
            super().__init__(f"Challenge '{challenge_id}' does not exist or is not visible to you.")
        else:
            super().__init__("Challenge not found")


class PlayerNotFoundError(ChallengeTrackerException):
    status_code = 404

    def __init__(self, player_id: str = None):
        if player_id:
            super().__init__(f"Player '{player_id}' is not on this challenge's roster.")
        else:
            super().__init__("Player not found in this challenge")


class DuplicateResourceError(ChallengeTrackerException):
    """A unique key (e.g. one PUUID per roster) would be violated."""

    status_code = 409

    def __init__(self, resource_type: str, identifier: str = None):
        suffix = f" '{identifier}'" if identifier else ""
        super().__init__(f"{resource_type}{suffix} already exists")


class AuthenticationError(ChallengeTrackerException):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationError(ChallengeTrackerException):
    status_code = 403

    def __init__(self, message: str = "Only the challenge owner or its admins can do this"):
        super().__init__(message)


class RateLimitError(ChallengeTrackerException):
    status_code = 429

    def __init__(self, retry_after: int = 60):
        super().__init__(
            f"Too many requests. Try again in {retry_after} seconds.",
            details={"retry_after": retry_after},
        )


class ValidationException(ChallengeTrackerException):
    """Input that passed schema validation but is still unacceptable."""

    status_code = 400

    def __init__(self, message: str, field: str = None):
        super().__init__(message, details={"field": field} if field else None)


class RiotAPIError(ChallengeTrackerException):
    status_code = 502

    def __init__(self, message: str, upstream_status: int = None):
        super().__init__(message, details={"upstream_status": upstream_status} if upstream_status else None)


class RiotAPIKeyError(RiotAPIError):
    def __init__(self):
        super().__init__(
            "Riot API key invalid or expired (403). Regenerate it on the Riot Developer Portal.",
            upstream_status=403,
        )


def create_error_response(status_code: int, message: str, details: dict = None) -> dict:
    body = {"error": True, "status_code": status_code, "message": message}
    if details:
        body["details"] = details
    return body


def _error(status_code: int, message: str, details: dict = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=create_error_response(status_code, message, details))


DEFAULT_HTTP_MESSAGES = {
    401: "Please log in to access this resource.",
    403: "You don't have permission to access this resource.",
    404: "The requested resource was not found.",
    405: "This method is not allowed here.",
    429: "Too many requests. Please slow down and try again later.",
}


async def tracker_exception_handler(request: Request, exc: ChallengeTrackerException) -> JSONResponse:
    logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return _error(exc.status_code, exc.message, exc.details)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Starlette/FastAPI HTTP errors, e.g. unknown routes."""
    message = exc.detail or DEFAULT_HTTP_MESSAGES.get(exc.status_code, "An unexpected error occurred.")
    logger.warning(f"HTTP {exc.status_code} on {request.url.path}: {message}")
    return _error(exc.status_code, message)


async def validation_exception_handler(
    request: Request, exc: Union[ValidationError, RequestValidationError]
) -> JSONResponse:
    """
    Schema failures become a 422 listing each bad field. Only loc, msg and
    type are echoed back; the raw input is left out.
    """
    errors = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    message = "Validation failed: " + "; ".join(f"'{'.'.join(e['loc'])}': {e['msg']}" for e in errors)
    logger.warning(message)
    return _error(422, message, {"errors": errors})


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled {type(exc).__name__} on {request.url.path}: {exc}", exc_info=True)
    return _error(500, "An unexpected error occurred. Please try again later.")
