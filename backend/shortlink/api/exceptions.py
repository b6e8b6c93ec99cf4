"""
Custom exceptions for API layer.
Separates business exceptions from HTTP exceptions.
"""
from fastapi import HTTPException, status

from ..services.binding.errors import BindingClosedError, CoercionError


class LinkNotFoundError(Exception):
    """Raised when a short id is not stored."""
    pass


class LinkConflictError(Exception):
    """Raised when a requested short id is already taken."""
    pass


class InvalidLinkError(Exception):
    """Raised when the URL or short id supplied is unusable."""
    pass


class LinkExpiredError(Exception):
    """Raised when a stored link is past its expiry (it has been removed)."""
    pass


def handle_business_exception(e: Exception) -> HTTPException:
    """
    Convert business exceptions to HTTP exceptions.
    This keeps business logic clean of HTTP concerns.
    """
    if isinstance(e, LinkNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    elif isinstance(e, LinkConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    elif isinstance(e, (InvalidLinkError, CoercionError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    elif isinstance(e, LinkExpiredError):
        return HTTPException(status_code=status.HTTP_418_IM_A_TEAPOT, detail=str(e))
    elif isinstance(e, BindingClosedError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    else:
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
