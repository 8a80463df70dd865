"""API key and dashboard token authentication utilities."""
from typing import Any, Optional

from fastapi import Header

from nomadai.config import settings
from nomadai.utils.exceptions import authentication_error
from nomadai.utils.logger import logger


def resolve_api_key(header_value: Optional[str], body: Any) -> Optional[str]:
    """
    Pick the project API key from the X-API-Key header or the request body.

    sendBeacon cannot set custom headers, so the SDK falls back to sending
    ``api_key`` inside the JSON body.

    Args:
        header_value: Value of the X-API-Key header, if any
        body: Parsed JSON body

    Returns:
        The API key, or None if neither source carries one
    """
    if header_value:
        return header_value
    if isinstance(body, dict):
        value = body.get("api_key")
        if isinstance(value, str) and value:
            return value
    return None


def verify_dashboard_token(
    auth_token: Optional[str] = Header(None, alias="X-Auth-Token"),
) -> None:
    """
    Dependency guarding dashboard routes.

    Raises:
        HTTPException: 401 if no token is configured or the header does not match
    """
    expected = settings.auth_token
    if not expected or auth_token != expected:
        logger.warning("Rejected dashboard request with missing or invalid X-Auth-Token")
        raise authentication_error("Unauthorized")
