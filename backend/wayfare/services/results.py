"""
Operation results.

Workflow operations return an OperationResult instead of raising for
domain failures: either `value` is set, or `error` describes what went
wrong ({code, message, details}). Callers map error codes to user-facing
messages and status codes; nothing is retried here.
"""

import functools
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from wayfare.core.exceptions import BookingServiceError, ErrorCode

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceError:
    code: ErrorCode
    message: str
    details: Any = None

    @classmethod
    def from_exception(cls, exc: BookingServiceError) -> "ServiceError":
        return cls(code=exc.code, message=exc.message, details=exc.details)

    def to_dict(self) -> dict:
        payload = {"code": self.code.value, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "OperationResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, exc: BookingServiceError) -> "OperationResult[T]":
        return cls(error=ServiceError.from_exception(exc))


def returns_result(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[OperationResult[T]]]:
    """Run a coroutine, converting BookingServiceError into a failed OperationResult."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> OperationResult[T]:
        try:
            value = await func(*args, **kwargs)
        except BookingServiceError as exc:
            return OperationResult.failure(exc)
        return OperationResult.success(value)

    return wrapper
