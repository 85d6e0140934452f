"""Builders for domain objects used across the test suite."""

import uuid

from lessons.domain import Capacity, Lesson, LessonId, Money


def make_lesson(
    capacity: int = 5,
    topic: str = "Art",
    location: str = "Golders Green",
    price: int = 8500,
    lesson_id: str | None = None,
) -> Lesson:
    return Lesson(
        id=LessonId(uuid.UUID(lesson_id) if lesson_id else uuid.uuid4()),
        topic=topic,
        location=location,
        price=Money(price),
        capacity=Capacity(capacity),
        initial_capacity=Capacity(capacity),
    )
