"""Custom exceptions and error handling utilities."""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse


class AppException(Exception):
    """Base exception for application errors."""
    pass


class ValidationError(AppException):
    """Raised when validation fails."""
    pass


class AuthenticationError(AppException):
    """Raised when authentication fails."""
    pass


class InvalidCredential(AuthenticationError):
    """No project matches the supplied API key."""

    def __init__(self, message: str = "Invalid API key"):
        super().__init__(message)
        self.message = message


class InvalidPayload(ValidationError):
    """Ingest payload is missing a session id or an events array."""

    def __init__(self, message: str = "Invalid payload: session_id and events array required"):
        super().__init__(message)
        self.message = message


class StoreFailure(AppException):
    """A persistence call failed during ingestion."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        message = f"Store failure during {operation}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
        self.operation = operation
        self.message = message


def ingest_failure_response(status_code: int, message: str) -> JSONResponse:
    """
    Build the ingest error body: {success, eventsSaved, message}.

    Args:
        status_code: HTTP status to return
        message: Human readable failure reason

    Returns:
        JSONResponse carrying the ingest result shape
    """
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "eventsSaved": 0, "message": message},
    )


def internal_error_response(error: Exception) -> JSONResponse:
    """
    Build a 500 response for unexpected or store-level failures.

    Args:
        error: The exception that aborted the request

    Returns:
        JSONResponse with status 500
    """
    content: Dict[str, Any] = {
        "success": False,
        "message": "Internal server error",
        "error": str(error),
    }
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def not_found_error(resource: str, identifier: Optional[str] = None) -> HTTPException:
    """
    Create a standardized 404 error.

    Args:
        resource: Name of the resource (e.g., "Session", "Project")
        identifier: Optional identifier that was not found

    Returns:
        HTTPException with 404 status
    """
    message = f"{resource} not found"
    if identifier:
        message += f": {identifier}"
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)


def authentication_error(message: str = "Unauthorized") -> HTTPException:
    """Create a standardized 401 authentication error."""
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)
