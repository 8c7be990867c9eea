from typing import NoReturn

from fastapi import HTTPException, status

from app.domain.results import GENERIC_FAILURE_MESSAGE, StoreError, StoreErrorKind


class NotFoundError(HTTPException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )


class NotFoundOrForbiddenError(HTTPException):
    """Raised when a mutation matched nothing: missing, or not the caller's to change."""

    def __init__(self, resource: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found or you do not have permission to change it",
        )


class ConflictError(HTTPException):
    """Raised when a request conflicts with existing state."""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=message,
        )


class ForbiddenError(HTTPException):
    """Raised when user lacks permission to access a resource."""

    def __init__(self, message: str = "Not authorized to access this resource"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=message,
        )


class UnauthenticatedError(HTTPException):
    """Raised when a mutation is attempted without a signed-in admin."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=message,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ValidationError(HTTPException):
    """Raised when request validation fails."""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=message,
        )


class BackendError(HTTPException):
    """Raised when the database rejects or fails an operation."""

    def __init__(self, message: str | None = None):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=message or GENERIC_FAILURE_MESSAGE,
        )


def raise_for_store_error(error: StoreError, resource: str) -> NoReturn:
    """Translate a store error into the matching HTTP exception."""
    if error.kind == StoreErrorKind.VALIDATION:
        raise ValidationError(error.message)
    if error.kind == StoreErrorKind.UNAUTHENTICATED:
        raise UnauthenticatedError(error.message)
    if error.kind in (StoreErrorKind.NOT_FOUND, StoreErrorKind.INVALID_CODE):
        raise NotFoundError(resource)
    if error.kind in (StoreErrorKind.NOT_FOUND_OR_FORBIDDEN, StoreErrorKind.NOTHING_DELETED):
        raise NotFoundOrForbiddenError(resource)
    if error.kind in (StoreErrorKind.DUPLICATE_CODE, StoreErrorKind.USAGE_LIMIT_REACHED):
        raise ConflictError(error.message)
    raise BackendError(error.message)
