"""Common route helpers."""

from __future__ import annotations

from fastapi import HTTPException, status

from autodeploy.core.errors import (
    AuthError,
    AutoDeployError,
    PhaseError,
    RecordNotFoundError,
    ServiceError,
    ValidationError,
)


def http_error(exc: AutoDeployError) -> HTTPException:
    """Map a domain failure to an HTTP error response."""
    if isinstance(exc, ValidationError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, PhaseError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, AuthError):
        code = status.HTTP_401_UNAUTHORIZED
    elif isinstance(exc, RecordNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ServiceError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(exc))
