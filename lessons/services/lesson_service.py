"""Lesson service - catalogue reads and administrative edits.

Capacity is absent from every write path here; seats move only
through the capacity ledger.
"""

import uuid
from typing import Any

from loguru import logger

from lessons.domain import Capacity, Lesson, LessonId, Money
from lessons.domain.errors import (
    InvalidLessonIdError,
    LessonNotFoundError,
    TransientError,
    ValidationError,
)
from lessons.stores.interfaces import LESSON_SORT_FIELDS, LessonStore, StoreUnavailableError

EDITABLE_FIELDS = ("topic", "location", "price", "image")
LEDGER_FIELDS = ("capacity", "space", "initial_capacity", "version")


class LessonService:
    """Service for lesson catalogue operations."""

    def __init__(self, store: LessonStore) -> None:
        self._store = store

    def list_lessons(self, sort: str = "topic") -> list[Lesson]:
        """Return all lessons, sorted by topic unless asked otherwise."""
        if sort.lstrip("-") not in LESSON_SORT_FIELDS:
            raise ValidationError(
                "Unsupported sort field",
                sort=sort,
                allowed=list(LESSON_SORT_FIELDS),
            )
        try:
            return self._store.list_lessons(order_by=sort)
        except StoreUnavailableError as exc:
            raise TransientError() from exc

    def get_lesson(self, lesson_id: str) -> Lesson:
        """Return a lesson by ID.

        Raises:
            InvalidLessonIdError: If the lesson_id is not a valid UUID.
            LessonNotFoundError: If the lesson does not exist.
        """
        parsed = self._parse_id(lesson_id)
        try:
            lesson = self._store.get_lesson(parsed)
        except StoreUnavailableError as exc:
            raise TransientError() from exc
        if lesson is None:
            raise LessonNotFoundError(lesson_id)
        return lesson

    def create_lesson(
        self,
        topic: str,
        location: str,
        price: int,
        capacity: int,
        image: str | None = None,
    ) -> Lesson:
        """Add a lesson; its starting capacity becomes its permanent ceiling."""
        try:
            lesson = Lesson(
                id=LessonId(uuid.uuid4()),
                topic=self._clean_text(topic, "topic"),
                location=self._clean_text(location, "location"),
                price=Money(price),
                capacity=Capacity(capacity),
                initial_capacity=Capacity(capacity),
                image=image,
            )
        except ValueError as exc:
            raise ValidationError(str(exc))
        try:
            created = self._store.create_lesson(lesson)
        except StoreUnavailableError as exc:
            raise TransientError() from exc
        logger.info("Created lesson {} ({} seats)", created.id, created.capacity.value)
        return created

    def update_lesson_fields(self, lesson_id: str, fields: dict[str, Any]) -> Lesson:
        """Apply an administrative edit to topic, location, price or image.

        Raises:
            InvalidLessonIdError: If the lesson_id is not a valid UUID.
            ValidationError: If fields touch capacity, are unknown, or are invalid.
            LessonNotFoundError: If the lesson does not exist.
        """
        parsed = self._parse_id(lesson_id)
        changes = self._validate_changes(fields)
        try:
            lesson = self._store.update_lesson(parsed, changes)
        except StoreUnavailableError as exc:
            raise TransientError() from exc
        if lesson is None:
            raise LessonNotFoundError(lesson_id)
        logger.info("Updated lesson {}: {}", lesson.id, sorted(changes))
        return lesson

    def _validate_changes(self, fields: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(fields, dict) or not fields:
            raise ValidationError("Nothing to update")

        ledger_owned = sorted(set(fields) & set(LEDGER_FIELDS))
        if ledger_owned:
            raise ValidationError(
                "Capacity can only change through orders",
                fields=ledger_owned,
            )
        rejected = sorted(set(fields) - set(EDITABLE_FIELDS))
        if rejected:
            raise ValidationError(
                "Fields cannot be updated",
                fields=rejected,
                allowed=list(EDITABLE_FIELDS),
            )

        changes: dict[str, Any] = {}
        try:
            for name in ("topic", "location"):
                if name in fields:
                    changes[name] = self._clean_text(fields[name], name)
            if "price" in fields:
                changes["price"] = Money(fields["price"]).amount
        except ValueError as exc:
            raise ValidationError(str(exc))
        if "image" in fields:
            image = fields["image"]
            if image is not None and not isinstance(image, str):
                raise ValidationError("Image must be a string path", fields=["image"])
            changes["image"] = image or None
        return changes

    @staticmethod
    def _clean_text(value: Any, name: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{name.capitalize()} cannot be empty")
        return value.strip()

    @staticmethod
    def _parse_id(lesson_id: str) -> LessonId:
        try:
            return LessonId.from_string(lesson_id)
        except ValueError:
            raise InvalidLessonIdError(lesson_id)
