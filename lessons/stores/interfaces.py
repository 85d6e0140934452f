"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Infrastructure faults are
raised as StoreUnavailableError; services decide what the caller sees.
"""

from abc import ABC, abstractmethod
from typing import Any

from lessons.domain import Lesson, LessonId, Order, OrderId

LESSON_SORT_FIELDS = ("topic", "location", "price", "capacity")


class StoreUnavailableError(Exception):
    """Raised when the backing storage cannot complete a call."""


class DuplicateIdempotencyKeyError(Exception):
    """Raised when an order is saved under an idempotency key already taken."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Idempotency key already stored: {key}")
        self.key = key


class LessonStore(ABC):
    """Interface for lesson persistence operations."""

    @abstractmethod
    def list_lessons(self, order_by: str = "topic") -> list[Lesson]:
        """Return all lessons sorted by ``order_by`` ("-" prefix for descending)."""
        ...

    @abstractmethod
    def get_lesson(self, lesson_id: LessonId) -> Lesson | None:
        """Return a lesson by ID, or None if not found."""
        ...

    @abstractmethod
    def create_lesson(self, lesson: Lesson) -> Lesson:
        """Persist a new lesson and return it as stored."""
        ...

    @abstractmethod
    def update_lesson(self, lesson_id: LessonId, changes: dict[str, Any]) -> Lesson | None:
        """Write descriptive fields only. Return None if the lesson does not exist."""
        ...

    @abstractmethod
    def compare_and_set_capacity(
        self, lesson_id: LessonId, expected_version: int, capacity: int
    ) -> bool:
        """Set capacity and bump version only if the stored version still matches.

        Returns False when another writer got there first (or the lesson is gone).
        Only the capacity ledger calls this.
        """
        ...


class OrderStore(ABC):
    """Interface for order persistence operations."""

    @abstractmethod
    def save_order(self, order: Order) -> Order:
        """Persist an order with all of its lines atomically.

        Raises:
            DuplicateIdempotencyKeyError: If the order's idempotency key is taken.
            StoreUnavailableError: If storage fails.
        """
        ...

    @abstractmethod
    def get_order(self, order_id: OrderId) -> Order | None:
        """Return an order by ID, or None if not found."""
        ...

    @abstractmethod
    def get_order_by_idempotency_key(self, key: str) -> Order | None:
        """Return the order stored under an idempotency key, or None."""
        ...
