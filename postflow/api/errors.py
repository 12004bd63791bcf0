"""Translate domain and service errors into HTTP responses"""

from fastapi import HTTPException, status

from ..domain.entities.line_item import ConcurrentUpdateError

# Errors raised by use cases and services for expected failures
DOMAIN_ERRORS = (ValueError, LookupError, PermissionError, ConcurrentUpdateError)


def http_error(error: Exception) -> HTTPException:
    if isinstance(error, ConcurrentUpdateError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, PermissionError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(error))
    if isinstance(error, LookupError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error).strip("'\""))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


def internal_error() -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
