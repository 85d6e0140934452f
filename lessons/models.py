"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models


class Lesson(models.Model):
    """Persistence model for lessons."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    topic = models.CharField(max_length=255)
    location = models.CharField(max_length=255)
    price = models.PositiveIntegerField()
    capacity = models.PositiveIntegerField()
    initial_capacity = models.PositiveIntegerField()
    version = models.PositiveIntegerField(default=0)
    image = models.CharField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["topic"]
        indexes = [
            models.Index(fields=["topic"], name="lesson_topic_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=1),
                name="lesson_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(capacity__gte=0)
                & models.Q(capacity__lte=models.F("initial_capacity")),
                name="lesson_capacity_within_ceiling",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.topic} @ {self.location}"


class Order(models.Model):
    """Persistence model for orders."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=64)
    idempotency_key = models.CharField(max_length=255, unique=True, blank=True, null=True)
    created_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="order_created_at_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.created_at}"


class OrderLine(models.Model):
    """Persistence model for the lines of an order."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="lines")
    lesson = models.ForeignKey(Lesson, on_delete=models.PROTECT, related_name="order_lines")
    position = models.PositiveIntegerField()
    seats = models.PositiveIntegerField()

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(fields=["order", "position"], name="order_line_position_unique"),
            models.CheckConstraint(condition=models.Q(seats__gte=1), name="order_line_seats_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.seats} x {self.lesson_id}"
