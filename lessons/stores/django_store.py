"""Django ORM implementation of the lesson and order stores."""

import functools

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
from loguru import logger

from lessons import models
from lessons.domain import Capacity, Lesson, LessonId, Money, Order, OrderId, OrderLine, SeatCount
from lessons.stores.interfaces import (
    DuplicateIdempotencyKeyError,
    LessonStore,
    OrderStore,
    StoreUnavailableError,
)


def _storage_call(method):
    """Turn database driver errors into StoreUnavailableError."""

    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except DatabaseError as exc:
            logger.opt(exception=exc).error("Storage call {} failed", method.__qualname__)
            raise StoreUnavailableError(method.__qualname__) from exc

    return wrapper


def _lesson_to_domain(row: models.Lesson) -> Lesson:
    return Lesson(
        id=LessonId(row.id),
        topic=row.topic,
        location=row.location,
        price=Money(row.price),
        capacity=Capacity(row.capacity),
        initial_capacity=Capacity(row.initial_capacity),
        version=row.version,
        image=row.image,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _order_to_domain(row: models.Order) -> Order:
    return Order(
        id=OrderId(row.id),
        name=row.name,
        phone=row.phone,
        lines=tuple(
            OrderLine(lesson_id=LessonId(line.lesson_id), seats=SeatCount(line.seats))
            for line in row.lines.all()
        ),
        created_at=row.created_at,
        idempotency_key=row.idempotency_key,
    )


class DjangoLessonStore(LessonStore):
    """Relational lesson store using Django ORM."""

    @_storage_call
    def list_lessons(self, order_by: str = "topic") -> list[Lesson]:
        rows = models.Lesson.objects.order_by(order_by, "id")
        return [_lesson_to_domain(row) for row in rows]

    @_storage_call
    def get_lesson(self, lesson_id: LessonId) -> Lesson | None:
        row = models.Lesson.objects.filter(pk=lesson_id.value).first()
        return _lesson_to_domain(row) if row else None

    @_storage_call
    def create_lesson(self, lesson: Lesson) -> Lesson:
        row = models.Lesson.objects.create(
            id=lesson.id.value,
            topic=lesson.topic,
            location=lesson.location,
            price=lesson.price.amount,
            capacity=lesson.capacity.value,
            initial_capacity=lesson.initial_capacity.value,
            version=lesson.version,
            image=lesson.image,
        )
        return _lesson_to_domain(row)

    @_storage_call
    def update_lesson(self, lesson_id: LessonId, changes: dict) -> Lesson | None:
        updated = models.Lesson.objects.filter(pk=lesson_id.value).update(
            **changes, updated_at=timezone.now()
        )
        if not updated:
            return None
        return _lesson_to_domain(models.Lesson.objects.get(pk=lesson_id.value))

    @_storage_call
    def compare_and_set_capacity(
        self, lesson_id: LessonId, expected_version: int, capacity: int
    ) -> bool:
        updated = models.Lesson.objects.filter(
            pk=lesson_id.value, version=expected_version
        ).update(
            capacity=capacity,
            version=F("version") + 1,
            updated_at=timezone.now(),
        )
        return updated == 1


class DjangoOrderStore(OrderStore):
    """Relational order store using Django ORM."""

    def save_order(self, order: Order) -> Order:
        try:
            with transaction.atomic():
                row = models.Order.objects.create(
                    id=order.id.value,
                    name=order.name,
                    phone=order.phone,
                    idempotency_key=order.idempotency_key,
                    created_at=order.created_at,
                )
                models.OrderLine.objects.bulk_create(
                    models.OrderLine(
                        order=row,
                        lesson_id=line.lesson_id.value,
                        position=position,
                        seats=line.seats.value,
                    )
                    for position, line in enumerate(order.lines)
                )
        except IntegrityError as exc:
            if order.idempotency_key and self._key_taken(order.idempotency_key):
                raise DuplicateIdempotencyKeyError(order.idempotency_key) from exc
            logger.opt(exception=exc).error("Order {} violated a constraint", order.id)
            raise StoreUnavailableError("save_order") from exc
        except DatabaseError as exc:
            logger.opt(exception=exc).error("Order {} could not be stored", order.id)
            raise StoreUnavailableError("save_order") from exc
        return order

    @_storage_call
    def get_order(self, order_id: OrderId) -> Order | None:
        row = models.Order.objects.prefetch_related("lines").filter(pk=order_id.value).first()
        return _order_to_domain(row) if row else None

    @_storage_call
    def get_order_by_idempotency_key(self, key: str) -> Order | None:
        row = models.Order.objects.prefetch_related("lines").filter(idempotency_key=key).first()
        return _order_to_domain(row) if row else None

    @_storage_call
    def _key_taken(self, key: str) -> bool:
        return models.Order.objects.filter(idempotency_key=key).exists()
