"""X-API-KEY authentication for the alerts API.

Keys come from the comma-separated ``API_KEYS`` setting. With no keys
configured every request is accepted, which suits a dashboard running
beside the agents on one machine.
"""

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from fleetwatch.config.settings import get_settings

api_key_header = APIKeyHeader(name="X-API-KEY", auto_error=False)

ANONYMOUS = "anonymous"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "APIKey"},
    )


async def verify_api_key(api_key: str | None = Security(api_key_header)) -> str:
    """Return the caller's key, or ``ANONYMOUS`` when auth is off.

    Raises:
        HTTPException: 401 if keys are configured and the header is
            absent or unknown.
    """
    accepted = get_settings().api_key_set
    if not accepted:
        return ANONYMOUS
    if not api_key:
        raise _unauthorized("Missing X-API-KEY header")
    if api_key not in accepted:
        raise _unauthorized("Invalid API key")
    return api_key
