"""In-process implementation of the stores.

Each call is atomic with respect to the others, which is the same guarantee a
single-row UPDATE gives the Django store. Used by unit and concurrency tests.
"""

import dataclasses
import threading
from datetime import datetime, timezone

from lessons.domain import Capacity, Lesson, LessonId, Money, Order, OrderId
from lessons.stores.interfaces import DuplicateIdempotencyKeyError, LessonStore, OrderStore

_SORT_KEYS = {
    "topic": lambda lesson: lesson.topic,
    "location": lambda lesson: lesson.location,
    "price": lambda lesson: lesson.price.amount,
    "capacity": lambda lesson: lesson.capacity.value,
}


class InMemoryLessonStore(LessonStore):
    def __init__(self, lessons: list[Lesson] | None = None) -> None:
        self._lessons: dict[LessonId, Lesson] = {}
        self._lock = threading.Lock()
        for lesson in lessons or ():
            self._lessons[lesson.id] = lesson

    def list_lessons(self, order_by: str = "topic") -> list[Lesson]:
        descending = order_by.startswith("-")
        key = _SORT_KEYS[order_by.lstrip("-")]
        with self._lock:
            lessons = sorted(self._lessons.values(), key=lambda lesson: str(lesson.id))
        return sorted(lessons, key=key, reverse=descending)

    def get_lesson(self, lesson_id: LessonId) -> Lesson | None:
        with self._lock:
            return self._lessons.get(lesson_id)

    def create_lesson(self, lesson: Lesson) -> Lesson:
        with self._lock:
            self._lessons[lesson.id] = lesson
        return lesson

    def update_lesson(self, lesson_id: LessonId, changes: dict) -> Lesson | None:
        if "price" in changes:
            changes = {**changes, "price": Money(changes["price"])}
        with self._lock:
            lesson = self._lessons.get(lesson_id)
            if lesson is None:
                return None
            lesson = dataclasses.replace(lesson, **changes, updated_at=datetime.now(timezone.utc))
            self._lessons[lesson_id] = lesson
            return lesson

    def compare_and_set_capacity(
        self, lesson_id: LessonId, expected_version: int, capacity: int
    ) -> bool:
        with self._lock:
            lesson = self._lessons.get(lesson_id)
            if lesson is None or lesson.version != expected_version:
                return False
            self._lessons[lesson_id] = dataclasses.replace(
                lesson,
                capacity=Capacity(capacity),
                version=lesson.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            return True


class InMemoryOrderStore(OrderStore):
    def __init__(self) -> None:
        self._orders: dict[OrderId, Order] = {}
        self._by_key: dict[str, OrderId] = {}
        self._lock = threading.Lock()

    def save_order(self, order: Order) -> Order:
        with self._lock:
            if order.idempotency_key is not None:
                if order.idempotency_key in self._by_key:
                    raise DuplicateIdempotencyKeyError(order.idempotency_key)
                self._by_key[order.idempotency_key] = order.id
            self._orders[order.id] = order
        return order

    def get_order(self, order_id: OrderId) -> Order | None:
        with self._lock:
            return self._orders.get(order_id)

    def get_order_by_idempotency_key(self, key: str) -> Order | None:
        with self._lock:
            order_id = self._by_key.get(key)
            return self._orders.get(order_id) if order_id else None

    def all_orders(self) -> list[Order]:
        with self._lock:
            return list(self._orders.values())
