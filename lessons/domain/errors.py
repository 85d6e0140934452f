"""Domain error codes for the lessons module."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_LESSON_ID = "INVALID_LESSON_ID"
    INVALID_ORDER_ID = "INVALID_ORDER_ID"
    LESSON_NOT_FOUND = "LESSON_NOT_FOUND"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    INSUFFICIENT_CAPACITY = "INSUFFICIENT_CAPACITY"
    IDEMPOTENCY_KEY_REUSED = "IDEMPOTENCY_KEY_REUSED"
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"
    TRANSIENT_FAILURE = "TRANSIENT_FAILURE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when input is malformed. Nothing has been written."""

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_FAILED,
            message=message,
            details=details,
        )


class InvalidLessonIdError(ValidationError):
    """Raised when a lesson ID is invalid."""

    def __init__(self, lesson_id: str) -> None:
        DomainError.__init__(
            self,
            code=ErrorCode.INVALID_LESSON_ID,
            message="Invalid lesson ID format",
            details={"lesson_id": str(lesson_id)},
        )


class InvalidOrderIdError(ValidationError):
    """Raised when an order ID is invalid."""

    def __init__(self, order_id: str) -> None:
        DomainError.__init__(
            self,
            code=ErrorCode.INVALID_ORDER_ID,
            message="Invalid order ID format",
            details={"order_id": str(order_id)},
        )


class LessonNotFoundError(DomainError):
    """Raised when a lesson is not found."""

    def __init__(self, lesson_id) -> None:
        super().__init__(
            code=ErrorCode.LESSON_NOT_FOUND,
            message="Lesson not found",
            details={"lesson_id": str(lesson_id)},
        )

    @property
    def lesson_id(self) -> str:
        return self.details["lesson_id"]


class OrderNotFoundError(DomainError):
    """Raised when an order is not found."""

    def __init__(self, order_id) -> None:
        super().__init__(
            code=ErrorCode.ORDER_NOT_FOUND,
            message="Order not found",
            details={"order_id": str(order_id)},
        )


class InsufficientCapacityError(DomainError):
    """Raised when a lesson has fewer seats left than an order asks for."""

    def __init__(self, lesson_id, requested: int, available: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_CAPACITY,
            message="Not enough seats left on lesson",
            details={
                "lesson_id": str(lesson_id),
                "requested": requested,
                "available": available,
            },
        )

    @property
    def lesson_id(self) -> str:
        return self.details["lesson_id"]


class IdempotencyKeyReusedError(DomainError):
    """Raised when an idempotency key is replayed with a different order."""

    def __init__(self, key: str) -> None:
        super().__init__(
            code=ErrorCode.IDEMPOTENCY_KEY_REUSED,
            message="Idempotency key was already used for a different order",
            details={"idempotency_key": key},
        )


class ConcurrencyConflictError(DomainError):
    """Raised inside the ledger when a conditional capacity write lost a race."""

    def __init__(self, lesson_id) -> None:
        super().__init__(
            code=ErrorCode.CONCURRENCY_CONFLICT,
            message="Lesson capacity changed concurrently",
            details={"lesson_id": str(lesson_id)},
        )


class TransientError(DomainError):
    """Raised for storage faults and exhausted retries. Safe to retry."""

    def __init__(self, message: str = "Temporary failure, please retry") -> None:
        super().__init__(
            code=ErrorCode.TRANSIENT_FAILURE,
            message=message,
        )
