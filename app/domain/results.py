"""Result values returned by the content store.

Store operations never raise past their boundary. Each returns a
StoreResult carrying either the value or a StoreError; routers translate
errors into HTTP responses and the dashboard turns them into notices.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class StoreErrorKind(str, Enum):
    VALIDATION = "validation"
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not_found"
    # Zero rows matched a mutation. Under RLS "missing" and "not yours" look the same.
    NOT_FOUND_OR_FORBIDDEN = "not_found_or_forbidden"
    # Delete matched nothing. Callers treat it like success.
    NOTHING_DELETED = "nothing_deleted"
    DUPLICATE_CODE = "duplicate_code"
    INVALID_CODE = "invalid_code"
    USAGE_LIMIT_REACHED = "usage_limit_reached"
    BACKEND = "backend"


GENERIC_FAILURE_MESSAGE = "An unexpected error occurred"


@dataclass(frozen=True)
class StoreError:
    kind: StoreErrorKind
    message: str

    @property
    def is_benign(self) -> bool:
        return self.kind == StoreErrorKind.NOTHING_DELETED


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    value: T | None = None
    error: StoreError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "StoreResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: StoreErrorKind, message: str | None = None) -> "StoreResult[T]":
        return cls(error=StoreError(kind=kind, message=message or GENERIC_FAILURE_MESSAGE))
